"""Domain exceptions. The API layer maps each to its own HTTP status."""


class MediaShelfError(Exception):
    """Base class for errors raised by services and adapters."""


class NotFoundError(MediaShelfError):
    """A user, work or rating does not exist."""


class ValidationError(MediaShelfError):
    """Input rejected before anything was written."""

    def __init__(self, message: str = "Invalid input", errors: list[str] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.errors = errors or []


class ConflictError(MediaShelfError):
    """A uniqueness rule (username, email) would be violated."""
