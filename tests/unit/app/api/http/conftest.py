"""HTTP test fixtures wired to the in-memory platform and store."""

import pytest
from fastapi.testclient import TestClient

from stack_reconciler.app.api.http.app import create_app
from stack_reconciler.app.api.http.app_data import ApplicationDependencies
from stack_reconciler.app.core.reconciler import Reconciler
from stack_reconciler.app.runtime.config.config_data import ConfigData, StacksConfig


@pytest.fixture
def app_config() -> ConfigData:
    return ConfigData(stacks=StacksConfig(events_page_size=2))


@pytest.fixture
def app_dependencies(app_config, db_service, store, platform, k8s_controller):
    return ApplicationDependencies(
        config=app_config,
        database_service=db_service,
        store=store,
        reconciler=Reconciler(platform, store, lambda cluster: k8s_controller),
    )


@pytest.fixture
def client(app_dependencies) -> TestClient:
    return TestClient(create_app(app_dependencies))
