# app/main.py

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.api.middleware import CorrelationIdMiddleware, RequestLogMiddleware
from app.api.routers import audit, health
from app.application.exceptions import ApplicationError, StorageFailureError
from app.config.logging import configure_logging
from app.config.settings import AppSettings, get_settings
from app.domain.exceptions import AuditValidationError, DomainError
from app.domain.schemas.audit import ErrorResponse
from app.infrastructure.memory.audit_store_memory import InMemoryActorDirectory, InMemoryAuditStore
from app.observability.metrics import MetricsCollector

logger = logging.getLogger(__name__)


def _wire_backend(app: FastAPI, settings: AppSettings) -> None:
    """Construct the audit store and actor directory for the configured backend."""
    app.state.redis_client = None
    app.state.db_engine = None

    if settings.store_backend == "redis":
        from app.infrastructure.cache.audit_store_redis import RedisAuditStore
        from app.infrastructure.cache.redis_client import RedisClient

        redis_client = RedisClient(settings.redis_url)
        app.state.redis_client = redis_client
        app.state.audit_store = RedisAuditStore(redis_client)
        app.state.actor_directory = InMemoryActorDirectory()
    elif settings.store_backend == "database":
        from app.infrastructure.database.audit_store_db import DbActorDirectory, DbAuditStore
        from app.infrastructure.database.session import build_engine, build_session_factory

        engine = build_engine(settings.database_url)
        session_factory = build_session_factory(engine)
        app.state.db_engine = engine
        app.state.audit_store = DbAuditStore(session_factory)
        app.state.actor_directory = DbActorDirectory(session_factory)
    else:
        app.state.audit_store = InMemoryAuditStore()
        app.state.actor_directory = InMemoryActorDirectory()


@asynccontextmanager
async def lifespan(app: FastAPI):
    if app.state.db_engine is not None:
        from app.infrastructure.database.session import init_models

        await init_models(app.state.db_engine)
    logger.info("audit_service_started", extra={"store_backend": app.state.settings.store_backend})
    yield
    if app.state.redis_client is not None:
        await app.state.redis_client.close()
    if app.state.db_engine is not None:
        await app.state.db_engine.dispose()


def _error(status_code: int, message: str, fields=None) -> JSONResponse:
    body = ErrorResponse(detail=message, fields=list(fields or []))
    return JSONResponse(status_code=status_code, content=body.model_dump())


def create_app(settings: Optional[AppSettings] = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title=settings.app_name,
        version=settings.version,
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.metrics = MetricsCollector()
    _wire_backend(app, settings)

    # Middleware order: last added runs first (outermost). Request flow: CorrelationId -> RequestLog.
    app.add_middleware(RequestLogMiddleware)
    app.add_middleware(CorrelationIdMiddleware)

    @app.exception_handler(AuditValidationError)
    async def audit_validation_error_handler(request, exc: AuditValidationError):
        return _error(400, exc.message, exc.fields)

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(request, exc: RequestValidationError):
        fields = [".".join(str(p) for p in err["loc"][1:]) or str(err["loc"][0]) for err in exc.errors()]
        return _error(400, "Malformed request", fields)

    @app.exception_handler(DomainError)
    async def domain_error_handler(request, exc: DomainError):
        return _error(400, exc.message)

    @app.exception_handler(StorageFailureError)
    async def storage_failure_error_handler(request, exc: StorageFailureError):
        return _error(500, exc.message)

    @app.exception_handler(ApplicationError)
    async def application_error_handler(request, exc: ApplicationError):
        return _error(500, exc.message)

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request, exc: Exception):
        logger.exception("unhandled_error")
        return _error(500, "Internal server error")

    # Routers: /health, /metrics, /audit
    app.include_router(health.router)
    app.include_router(audit.router, prefix="/audit")
    return app


app = create_app()
