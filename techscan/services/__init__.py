"""
Services

Service layer containing all engine logic.
Each service has a defined interface (contract) and implementation.
"""

from techscan.services.base import (
    BaseService,
    ServiceError,
    ConfigurationError,
    DataFetchError,
)

__all__ = ["BaseService", "ServiceError", "ConfigurationError", "DataFetchError"]
