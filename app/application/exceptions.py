"""Application-layer exceptions. Do not reuse domain exceptions."""


class ApplicationError(Exception):
    """Base for all application-layer errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class StorageFailureError(ApplicationError):
    """Raised when the audit store rejects or fails an operation. Never retried by the engine."""


class ProjectionError(ApplicationError):
    """Raised when an actor or parent projection cannot be resolved. Soft: trail reads degrade, not fail."""
