"""FastAPI dependency injection: audit store, actor directory, metrics, AuditTrailService."""

import logging
from typing import Annotated, Optional

from fastapi import Depends, Request

from app.application.audit_store import ActorDirectory, AuditStore
from app.application.audit_trail_service import AuditTrailService
from app.config.settings import AppSettings
from app.observability.metrics import MetricsCollector


def get_app_settings(request: Request) -> AppSettings:
    """Settings the app was built with (set by create_app)."""
    return request.app.state.settings


def get_audit_store(request: Request) -> AuditStore:
    """Audit store constructed by create_app for the configured backend."""
    return request.app.state.audit_store


def get_actor_directory(request: Request) -> Optional[ActorDirectory]:
    return request.app.state.actor_directory


def get_metrics(request: Request) -> MetricsCollector:
    return request.app.state.metrics


def get_audit_service(
    store: Annotated[AuditStore, Depends(get_audit_store)],
    actor_directory: Annotated[Optional[ActorDirectory], Depends(get_actor_directory)],
    metrics: Annotated[MetricsCollector, Depends(get_metrics)],
    settings: Annotated[AppSettings, Depends(get_app_settings)],
) -> AuditTrailService:
    """Build AuditTrailService with injected store, actor directory, metrics, logger."""
    return AuditTrailService(
        store=store,
        logger=logging.getLogger("app.audit"),
        actor_directory=actor_directory,
        metrics=metrics,
        verify_parent=settings.verify_parent,
    )

