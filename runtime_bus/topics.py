"""Topic constants for the runtime bus."""

# Navigation
NAVIGATION_CHANGED = "deck.navigation.changed"

# Grid / config
CONFIG_COMMITTED = "deck.config.committed"
CONFIG_COMMIT_FAILED = "deck.config.commit_failed"

# Drop pipeline
DROP_REQUEST = "deck.drop.request"
DROP_ACCEPTED = "deck.drop.accepted"
DROP_REJECTED = "deck.drop.rejected"

# Actions
ACTION_EXECUTE_REQUEST = "deck.action.execute.request"
ACTION_EXECUTED = "deck.action.executed"

# Icon cache
ICON_CACHE_CLEANUP_COMPLETED = "deck.icon_cache.cleanup.completed"

# User-facing warnings
WARNING = "deck.warning"

__all__ = [
    "NAVIGATION_CHANGED",
    "CONFIG_COMMITTED",
    "CONFIG_COMMIT_FAILED",
    "DROP_REQUEST",
    "DROP_ACCEPTED",
    "DROP_REJECTED",
    "ACTION_EXECUTE_REQUEST",
    "ACTION_EXECUTED",
    "ICON_CACHE_CLEANUP_COMPLETED",
    "WARNING",
]
