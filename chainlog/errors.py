"""
Exception types raised by chainlog.
"""

from typing import Optional

from .fieldmap import stringify


class ChainlogError(Exception):
    """Base class for chainlog errors."""


class MissingRequestError(ChainlogError, ValueError):
    """Raised when request enrichment is called without a request."""

    def __init__(self, where: str = "fields_request"):
        super().__init__(f"chainlog.{where}: request is None")
        self.where = where


class ConfigError(ChainlogError):
    """Raised for a malformed configuration file or value."""

    def __init__(self, message: str, key: Optional[str] = None):
        super().__init__(f"{key}: {message}" if key else message)
        self.key = key


class RecoveredPanic(ChainlogError):
    """
    An exception caught by recover() or guard().

    The message embeds the original exception type and value; the original
    exception is kept as __cause__ and its traceback frames as `frames`.
    """

    def __init__(self, value: BaseException, frames: tuple = ()):
        super().__init__(f"{type(value).__name__}: {stringify(value)}")
        self.value = value
        self.frames = frames
        self.__cause__ = value
