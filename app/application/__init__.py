# Application layer: services that orchestrate domain and infrastructure.

from app.application.audit_store import ActorDirectory, AuditStore
from app.application.audit_trail_service import AuditTrailService
from app.application.change_tracker import ABSENT, changes_to_payload, diff
from app.application.entity_audit_service import (
    BulkUpdateResult,
    EntityAuditService,
    EntityUpdate,
)
from app.application.exceptions import (
    ApplicationError,
    ProjectionError,
    StorageFailureError,
)

__all__ = [
    "ABSENT",
    "ActorDirectory",
    "ApplicationError",
    "AuditStore",
    "AuditTrailService",
    "BulkUpdateResult",
    "EntityAuditService",
    "EntityUpdate",
    "ProjectionError",
    "StorageFailureError",
    "changes_to_payload",
    "diff",
]
