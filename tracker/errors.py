class TrackerError(Exception):
    """Base class for recoverable errors surfaced to the user."""


class ValidationError(TrackerError):
    """Bad user input, raised before anything is mutated."""

    def __init__(self, message: str, code: str = "invalid_input"):
        super().__init__(message)
        self.message = message
        self.code = code

    @classmethod
    def from_error(cls, error: dict) -> "ValidationError":
        return cls(error.get("message", "invalid input"), error.get("error", "invalid_input"))


class StorageError(TrackerError):
    """The key-value store failed to read, write or remove a document."""

    def __init__(self, message: str, key: str | None = None):
        super().__init__(message)
        self.key = key
