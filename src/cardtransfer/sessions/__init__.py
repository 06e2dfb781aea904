"""Session grouping for timed media files."""

from .errors import SessionNamingError
from .grouper import group_into_sessions, name_sessions
from .models import Session

__all__ = ["Session", "SessionNamingError", "group_into_sessions", "name_sessions"]
