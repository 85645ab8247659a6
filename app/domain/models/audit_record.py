"""Domain model for audit records. Pure business semantics, no ORM or infrastructure."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional


class AuditAction(str, Enum):
    """Kind of state transition an audit record describes. Closed set."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class Transport(str, Enum):
    """Channel that triggered the mutation. Informational only."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"


@dataclass(frozen=True)
class AuditRecordDraft:
    """
    Validated record not yet persisted. The store assigns id and sequence,
    and occurred_at when the caller left it unset.
    """

    actor_id: str
    subject_kind: str
    subject_id: str
    action: AuditAction
    payload: Dict[str, Any]
    transport: Optional[Transport] = None
    parent_id: Optional[str] = None
    occurred_at: Optional[datetime] = None


@dataclass(frozen=True)
class PersistedAuditRecord:
    """
    Immutable audit record as stored. Trail order is (occurred_at, sequence):
    sequence is the store's monotonic insertion counter and breaks timestamp ties.
    """

    id: str
    actor_id: str
    subject_kind: str
    subject_id: str
    action: AuditAction
    payload: Dict[str, Any]
    occurred_at: datetime
    sequence: int
    transport: Optional[Transport] = None
    parent_id: Optional[str] = None

    @property
    def order_key(self) -> tuple:
        return (self.occurred_at, self.sequence)

    def to_dict(self) -> Dict[str, Any]:
        """Structured representation for JSON storage and logging."""
        return {
            "id": self.id,
            "actor_id": self.actor_id,
            "subject_kind": self.subject_kind,
            "subject_id": self.subject_id,
            "action": self.action.value,
            "transport": self.transport.value if self.transport else None,
            "payload": self.payload,
            "parent_id": self.parent_id,
            "occurred_at": self.occurred_at.isoformat(),
            "sequence": self.sequence,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PersistedAuditRecord":
        transport = data.get("transport")
        return cls(
            id=data["id"],
            actor_id=data["actor_id"],
            subject_kind=data["subject_kind"],
            subject_id=data["subject_id"],
            action=AuditAction(data["action"]),
            payload=data["payload"],
            occurred_at=datetime.fromisoformat(data["occurred_at"].replace("Z", "+00:00")),
            sequence=int(data["sequence"]),
            transport=Transport(transport) if transport else None,
            parent_id=data.get("parent_id"),
        )


@dataclass(frozen=True)
class ActorSummary:
    """Display fields of the principal behind a record."""

    actor_id: str
    name: Optional[str] = None
    email: Optional[str] = None


@dataclass(frozen=True)
class TrailEntry:
    """A trail record plus its best-effort projections. None means not expanded."""

    record: PersistedAuditRecord
    actor: Optional[ActorSummary] = None
    parent: Optional[PersistedAuditRecord] = None
