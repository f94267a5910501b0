class EditError(Exception):
    """Raised when a user edit to a bid's items is invalid."""
