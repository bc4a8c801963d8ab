"""FastAPI application factory."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from loguru import logger
from starlette.responses import JSONResponse

from stack_reconciler import __version__
from stack_reconciler.app.api.http.app_data import (
    ApplicationDependencies,
    build_application_dependencies,
)
from stack_reconciler.app.api.http.routers import health, stacks
from stack_reconciler.app.api.http.schemas.stacks import ReconcileErrorResponse
from stack_reconciler.app.core.reconciler import ReconcileError
from stack_reconciler.app.runtime.context import get_config


async def reconcile_error_handler(request: Request, exc: Exception) -> JSONResponse:
    assert isinstance(exc, ReconcileError)
    if exc.client_error:
        logger.info(f"{request.method} {request.url.path} rejected: {exc}")
    else:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    body = ReconcileErrorResponse(
        detail=exc.message if not exc.details else f"{exc.message}: {exc.details}",
        kind=exc.kind,
        operation=exc.operation,
        target=exc.target,
        secondary_errors=[str(e) for e in exc.secondary_errors],
    )
    return JSONResponse(status_code=exc.http_status, content=body.model_dump())


def create_app(app_dependencies: ApplicationDependencies | None = None) -> FastAPI:
    """Create the HTTP application.

    Args:
        app_dependencies: Prebuilt dependencies; built from config.yaml at
            startup when omitted
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if getattr(app.state, "app_dependencies", None) is None:
            deps = build_application_dependencies(get_config())
            deps.database_service.create_all()
            app.state.app_dependencies = deps
        logger.info("Stack reconciler API started")
        yield

    app = FastAPI(title="Stack Reconciler", version=__version__, lifespan=lifespan)
    app.state.app_dependencies = app_dependencies
    app.add_exception_handler(ReconcileError, reconcile_error_handler)
    app.include_router(health.router)
    app.include_router(stacks.router)
    return app
