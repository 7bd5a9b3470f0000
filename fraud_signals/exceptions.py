"""
Exceptions raised by the fraud signal service.

Hierarchy:
    Exception
    └── FraudSignalsError
        ├── InvalidInput (also a ValueError)
        ├── StorageError
        └── ConfigurationError
"""

from typing import Optional


class FraudSignalsError(Exception):
    """Base class for all fraud signal errors."""

    def __init__(self, message: str, cause: Optional[Exception] = None):
        self.message = message
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause

    @property
    def cause(self) -> Optional[BaseException]:
        return self.__cause__


class InvalidInput(FraudSignalsError, ValueError):
    """A transaction or one of its required fields is missing or malformed."""


class StorageError(FraudSignalsError):
    """The persistence backend failed to read or write."""


class ConfigurationError(FraudSignalsError):
    """Configuration or the rule table could not be loaded."""
