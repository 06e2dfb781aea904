"""State management errors."""


class StateError(Exception):
    """Raised when transfer state cannot be persisted to a required location."""
