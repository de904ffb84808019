"""
Logging setup.

Modules log through logging.getLogger(__name__); this only wires the
root handler and level from Settings.
"""

import logging
from typing import Optional

from techscan.core.config import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging once, using Settings.log_level by default."""
    level_name = (level or get_settings().log_level).upper()
    level_value = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(level=level_value, format=LOG_FORMAT)
    logging.getLogger("techscan").setLevel(level_value)
