"""Exceptions raised by the sweet-spot engine and its entry store."""
from __future__ import annotations


class SweetSpotError(Exception):
    """Base class for every error raised by this package."""


class UnknownNicheError(SweetSpotError, LookupError):
    """Raised when no assumption is registered for a niche."""

    def __init__(self, niche: str):
        self.niche = niche
        super().__init__(f"No assumption registered for niche {niche!r}")


class InvalidInputError(SweetSpotError, ValueError):
    """Raised when a precondition on an input field is violated."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"{field}: {message}")


class MismatchedInputError(SweetSpotError, ValueError):
    """Raised when results and entries are not index-aligned."""


class EntryNotFoundError(SweetSpotError, LookupError):
    """Raised when an entry id does not exist in the store."""

    def __init__(self, entry_id: str):
        self.entry_id = entry_id
        super().__init__(f"Sweet spot entry {entry_id!r} not found")


__all__ = [
    "SweetSpotError",
    "UnknownNicheError",
    "InvalidInputError",
    "MismatchedInputError",
    "EntryNotFoundError",
]
