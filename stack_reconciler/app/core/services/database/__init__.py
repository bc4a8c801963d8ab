from .db_manage import DbManageService
from .store import ApplicationStore, EventPage, SqlApplicationStore

__all__ = ["ApplicationStore", "DbManageService", "EventPage", "SqlApplicationStore"]
