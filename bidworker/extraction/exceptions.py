class ExtractionError(Exception):
    """Raised when bid extraction fails."""


class UpstreamFormatError(ExtractionError):
    """Raised when model output cannot be repaired into a JSON object."""

    def __init__(self, message: str, snippet: str = "") -> None:
        super().__init__(message)
        self.snippet = snippet


class ExtractionNetworkError(ExtractionError):
    """Raised when the AI provider call fails due to network/infrastructure issues."""


class CalculationError(ExtractionError):
    """Raised when an item's price cannot be computed from its fields."""


class ItemNotFoundError(ExtractionError):
    """Raised when an item identifier does not resolve to an item."""
