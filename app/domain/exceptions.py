"""Domain-specific exceptions. Pure domain layer, no infrastructure."""

from typing import Iterable, List, Optional


class DomainError(Exception):
    """Base for all domain-layer errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class AuditValidationError(DomainError):
    """
    Raised when caller-supplied audit data is missing or malformed.
    `fields` names every offending field so the caller can fix them in one pass.
    """

    def __init__(self, message: str, fields: Optional[Iterable[str]] = None) -> None:
        self.fields: List[str] = list(fields or [])
        super().__init__(message)
