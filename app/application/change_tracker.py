"""Shallow structural diff of entity snapshots, used to build UPDATE payloads."""

from collections.abc import Mapping
from typing import Any, Dict

from app.domain.exceptions import AuditValidationError


class _Absent:
    """Marker for a field that did not exist in the old snapshot."""

    def __repr__(self) -> str:
        return "ABSENT"


ABSENT = _Absent()


def diff(old_state: Mapping, new_state: Mapping) -> Dict[str, Dict[str, Any]]:
    """
    Return {field: {"from": old, "to": new}} for every key of new_state whose value
    differs from old_state. Keys missing from old_state report "from" as ABSENT.
    Keys only in old_state are ignored (partial-update semantics).
    """
    if not isinstance(old_state, Mapping):
        raise AuditValidationError("old_state must be a mapping", ["old_state"])
    if not isinstance(new_state, Mapping):
        raise AuditValidationError("new_state must be a mapping", ["new_state"])

    changes: Dict[str, Dict[str, Any]] = {}
    for key, new_value in new_state.items():
        old_value = old_state[key] if key in old_state else ABSENT
        if old_value is ABSENT or old_value != new_value:
            changes[key] = {"from": old_value, "to": new_value}
    return changes


def changes_to_payload(changes: Dict[str, Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
    """JSON-ready UPDATE payload: ABSENT "from" values are omitted."""
    payload: Dict[str, Dict[str, Any]] = {}
    for key, change in changes.items():
        entry = {"to": change["to"]}
        if change.get("from", ABSENT) is not ABSENT:
            entry = {"from": change["from"], "to": change["to"]}
        payload[key] = entry
    return payload
