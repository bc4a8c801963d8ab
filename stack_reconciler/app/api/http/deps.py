"""FastAPI dependencies resolved from ``app.state.app_dependencies``."""

from __future__ import annotations

from fastapi import Request

from stack_reconciler.app.api.http.app_data import ApplicationDependencies
from stack_reconciler.app.core.reconciler import Reconciler
from stack_reconciler.app.core.services.database import ApplicationStore
from stack_reconciler.app.runtime.config.config_data import ConfigData


def get_app_dependencies(request: Request) -> ApplicationDependencies:
    return request.app.state.app_dependencies


def get_store(request: Request) -> ApplicationStore:
    return get_app_dependencies(request).store


def get_reconciler(request: Request) -> Reconciler:
    return get_app_dependencies(request).reconciler


def get_app_config(request: Request) -> ConfigData:
    return get_app_dependencies(request).config
