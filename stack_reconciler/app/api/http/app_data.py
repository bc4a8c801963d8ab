from dataclasses import dataclass

from stack_reconciler.app.core.reconciler import Reconciler, build_reconciler
from stack_reconciler.app.core.services.database import (
    ApplicationStore,
    DbManageService,
    SqlApplicationStore,
)
from stack_reconciler.app.runtime.config.config_data import ConfigData


@dataclass
class ApplicationDependencies:
    config: ConfigData
    database_service: DbManageService
    store: ApplicationStore
    reconciler: Reconciler


def build_application_dependencies(config: ConfigData) -> ApplicationDependencies:
    """Wire the store and reconciler for one process."""
    database_service = DbManageService(config.database)
    store = SqlApplicationStore(database_service.engine)
    return ApplicationDependencies(
        config=config,
        database_service=database_service,
        store=store,
        reconciler=build_reconciler(config, store),
    )
