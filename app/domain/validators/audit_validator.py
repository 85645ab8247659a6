"""Validators for audit domain rules. Pure functions, no infrastructure or DB access."""

import json
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from app.domain.exceptions import AuditValidationError
from app.domain.models.audit_record import AuditAction, AuditRecordDraft, Transport

UPDATE_CHANGE_KEYS = frozenset({"from", "to"})


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (dict, list)):
        return len(value) == 0
    return False


def is_valid_identifier(value: Any) -> bool:
    """Identifiers are canonical UUID strings."""
    if not isinstance(value, str):
        return False
    try:
        return str(uuid.UUID(value)) == value.lower()
    except ValueError:
        return False


def validate_identifier(value: Any, field_name: str) -> str:
    """Raise AuditValidationError unless value is a canonical UUID string."""
    if not is_valid_identifier(value):
        raise AuditValidationError(f"{field_name} must be a valid identifier", [field_name])
    return value.lower()


def validate_payload_for_action(action: AuditAction, payload: Dict[str, Any]) -> None:
    """
    CREATE/DELETE carry a full-state map. UPDATE carries a change map whose values
    hold "to" and optionally "from". Every payload must be JSON-serializable.
    """
    try:
        json.dumps(payload)
    except (TypeError, ValueError) as e:
        raise AuditValidationError("payload must be JSON-serializable", ["payload"]) from e

    if action is not AuditAction.UPDATE:
        return
    for name, change in payload.items():
        if (
            not isinstance(change, dict)
            or "to" not in change
            or not set(change) <= UPDATE_CHANGE_KEYS
        ):
            raise AuditValidationError(
                f"payload.{name} must be a change of the form {{'from': ..., 'to': ...}}",
                ["payload"],
            )


def _coerce_enum(enum_cls, value: Any):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().upper())
    except ValueError:
        return None


def build_draft(
    *,
    actor_id: Any,
    subject_kind: Any,
    subject_id: Any,
    action: Any,
    payload: Any,
    transport: Any = None,
    parent_id: Optional[str] = None,
    occurred_at: Optional[datetime] = None,
) -> AuditRecordDraft:
    """
    Validate raw record fields and return a draft ready for the store.
    Collects every problem before raising so the error names all bad fields.
    """
    required: List[Tuple[str, Any]] = [
        ("actor_id", actor_id),
        ("subject_kind", subject_kind),
        ("subject_id", subject_id),
        ("action", action),
        ("payload", payload),
    ]
    missing = [name for name, value in required if _is_blank(value)]
    if missing:
        raise AuditValidationError(
            f"Missing required fields: {', '.join(missing)}", missing
        )

    invalid: List[str] = []
    for name, value in (("actor_id", actor_id), ("subject_id", subject_id), ("parent_id", parent_id)):
        if name == "parent_id" and value is None:
            continue
        if not is_valid_identifier(value):
            invalid.append(name)

    action_value = _coerce_enum(AuditAction, action)
    if action_value is None:
        invalid.append("action")

    transport_value = None
    if not _is_blank(transport):
        transport_value = _coerce_enum(Transport, transport)
        if transport_value is None:
            invalid.append("transport")

    if not isinstance(payload, dict):
        invalid.append("payload")
    if not isinstance(subject_kind, str):
        invalid.append("subject_kind")
    if occurred_at is not None and not isinstance(occurred_at, datetime):
        invalid.append("occurred_at")

    if invalid:
        raise AuditValidationError(f"Invalid fields: {', '.join(invalid)}", invalid)

    validate_payload_for_action(action_value, payload)
    if occurred_at is not None and occurred_at.tzinfo is None:
        occurred_at = occurred_at.replace(tzinfo=timezone.utc)

    return AuditRecordDraft(
        actor_id=actor_id.lower(),
        subject_kind=subject_kind.strip(),
        subject_id=subject_id.lower(),
        action=action_value,
        payload=payload,
        transport=transport_value,
        parent_id=parent_id.lower() if parent_id else None,
        occurred_at=occurred_at,
    )
