"""Domain validators. Pure validation functions."""

from app.domain.validators.audit_validator import (
    build_draft,
    is_valid_identifier,
    validate_identifier,
    validate_payload_for_action,
)

__all__ = [
    "build_draft",
    "is_valid_identifier",
    "validate_identifier",
    "validate_payload_for_action",
]
