from __future__ import annotations


class DeckError(Exception):
    """Base class for errors raised by the deck core."""


class ConfigStoreError(DeckError):
    """Reading or writing the persisted configuration failed."""

    def __init__(self, message: str, path: str = "") -> None:
        super().__init__(message)
        self.path = path


class ConfigValidationError(DeckError):
    """A configuration tree violates a structural invariant."""


class GridBoundsError(DeckError):
    """A position lies outside the bounds of its page."""
