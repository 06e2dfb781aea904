"""Transfer engine errors."""


class TransferError(Exception):
    """Raised when a copy or a required state write fails, aborting the run."""
