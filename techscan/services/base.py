"""
Service base class and error hierarchy.

The indicator service and the market scanner share this contract so the
CLI (or any other caller) can drive them the same way.
"""

from abc import ABC, abstractmethod
from typing import Generic, Optional, TypeVar

InputT = TypeVar("InputT")
OutputT = TypeVar("OutputT")


class BaseService(ABC, Generic[InputT, OutputT]):
    """
    A named async unit of work: one input model in, one output model out.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Used as the prefix of log lines and ServiceError messages."""

    @abstractmethod
    async def execute(self, input_data: InputT) -> OutputT:
        """
        Run the service.

        Raises:
            ServiceError: when the input cannot be processed
        """

    @abstractmethod
    async def health_check(self) -> bool:
        """True when upstream dependencies answer."""


class ServiceError(Exception):
    """Error raised by a service, tagged with the service name and context."""

    def __init__(self, service_name: str, message: str, details: Optional[dict] = None):
        self.service_name = service_name
        self.message = message
        self.details = details or {}
        super().__init__(f"[{service_name}] {message}")


class ConfigurationError(ServiceError):
    """Invalid scan filters or scoring configuration."""
    pass


class DataFetchError(ServiceError):
    """Candle supplier failed for a symbol."""
    pass
