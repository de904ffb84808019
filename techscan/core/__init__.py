"""Core configuration and logging."""

from techscan.core.config import (
    Settings,
    ScoringConfig,
    get_settings,
    get_scoring_config,
)
from techscan.core.logging_config import configure_logging

__all__ = [
    "Settings",
    "ScoringConfig",
    "get_settings",
    "get_scoring_config",
    "configure_logging",
]
