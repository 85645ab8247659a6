# app/infrastructure/database/models.py

from sqlalchemy import BigInteger, Column, DateTime, Identity, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.sql import func

from app.infrastructure.database.session import Base


class AuditRecordRow(Base):
    """ORM model for append-only audit records. Rows are inserted once and never updated."""

    __tablename__ = "audit_records"

    id = Column(String(36), primary_key=True)
    sequence = Column(BigInteger, Identity(always=True), nullable=False, unique=True)

    actor_id = Column(String(36), nullable=False)
    subject_kind = Column(String, nullable=False)
    subject_id = Column(String(36), nullable=False, index=True)
    action = Column(String(16), nullable=False)
    transport = Column(String(16), nullable=True)
    payload = Column(JSONB, nullable=False)
    parent_id = Column(String(36), nullable=True, index=True)

    occurred_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())


class UserRow(Base):
    """Read-only view of the user-management users table, for actor projections."""

    __tablename__ = "users"

    id = Column(String(36), primary_key=True)
    name = Column(String, nullable=True)
    email = Column(String, nullable=True)
