"""Configuration tree, navigation and grid mutation for the deck.

``DeckCoordinator`` lives in ``deck_core.coordinator`` and is not re-exported
here because it pulls in the action and drop packages, which import this one.
"""

from .errors import ConfigStoreError, ConfigValidationError, DeckError, GridBoundsError
from .models import ActionType, Button, DeckConfig, Page, Position, Profile

__all__ = [
    "ActionType",
    "Button",
    "ConfigStoreError",
    "ConfigValidationError",
    "DeckConfig",
    "DeckError",
    "GridBoundsError",
    "Page",
    "Position",
    "Profile",
]
