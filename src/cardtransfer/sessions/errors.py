"""Session grouping errors."""


class SessionNamingError(ValueError):
    """Raised when a date has more sessions than available folder suffixes."""
