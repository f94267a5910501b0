class ProcessorError(Exception):
    """Base exception for all processor-related errors."""


class BidNotFoundError(ProcessorError):
    """Raised when a bid cannot be found in the database."""


class UnsupportedStorageDiskError(ProcessorError):
    """Raised when a bid document uses an unsupported storage disk type."""
