"""Adapter-specific exceptions."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from searchbattle.models.outcome import Source


class AdapterError(Exception):
    """Base exception for adapter errors."""


class ConfigurationError(AdapterError):
    """Raised when adapter configuration is invalid."""


class BackendError(AdapterError):
    """Raised when a backend call fails, tagged with the failing source.

    Attributes:
        source: The adapter whose backend failed.
        cause: The underlying driver exception, if any.
    """

    def __init__(self, source: Source, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.source = source
        self.cause = cause

    def __str__(self) -> str:
        return f"[{self.source.value}] {self.args[0]}"
