"""Error kinds raised by the winglets engine."""

from __future__ import annotations

from typing import Hashable


class WingletsError(Exception):
    """Base class for all engine errors."""


class InvalidConfiguration(WingletsError, ValueError):
    """Caller-level misuse: bad options, grid resolution, colours or point input.

    Raised before any computation starts.
    """


class CategoryError(WingletsError):
    """A failure confined to one category. Other categories keep processing."""

    def __init__(self, message: str, category: Hashable | None = None) -> None:
        super().__init__(message)
        self.category = category


class InsufficientData(CategoryError):
    """Too few points (or zero spread) to derive a KDE bandwidth."""


class NoContourFound(CategoryError):
    """The iso-value sweep never produced exactly one closed loop."""
