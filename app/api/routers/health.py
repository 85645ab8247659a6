# app/api/routers/health.py

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from app.api.dependencies import get_app_settings, get_metrics
from app.config.settings import AppSettings
from app.observability.metrics import MetricsCollector

router = APIRouter()


@router.get("/health")
async def health(
    request: Request,
    settings: Annotated[AppSettings, Depends(get_app_settings)],
):
    """Health check with correlation ID from request state and the active store backend."""
    return {
        "status": "ok",
        "correlation_id": request.state.correlation_id,
        "environment": settings.environment,
        "version": settings.version,
        "store_backend": settings.store_backend,
    }


@router.get("/metrics")
async def metrics(metrics: Annotated[MetricsCollector, Depends(get_metrics)]):
    """In-memory audit counters and store latencies."""
    return metrics.export_metrics()
