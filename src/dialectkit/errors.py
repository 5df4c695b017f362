"""
Error types raised by dialectkit.

Every error carries ``context`` naming the operation that was in progress; the
underlying driver exception, if any, is available as ``cause``.
"""

from __future__ import annotations


class DialectKitError(RuntimeError):
    """Base error carrying an operation-context string and the original cause."""

    def __init__(self, context: str) -> None:
        super().__init__(context)
        self.context = context

    @property
    def cause(self) -> BaseException | None:
        return self.__cause__


class ConfigurationError(DialectKitError):
    """Raised when settings are invalid or a required driver is missing."""


class DetectionError(DialectKitError):
    """Raised when connection metadata cannot be read while detecting a dialect."""


class StatisticsError(DialectKitError):
    """Raised when a statistics provider fails to talk to the backend."""


class ExecutionCancelledError(DialectKitError):
    """Raised when the surrounding execution was cancelled or timed out."""
