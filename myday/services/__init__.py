from .base import BaseService
from .task import TaskService
from .completion import CompletionService
from .event import EventService
from .imports import ImportService
from .journal import JournalService
from .tag import TagService
from .routine import RoutineService
from .settings import SettingsService
from .insights import InsightService
from .dashboard import DashboardService
from .family import FamilyService, SharingService, NotificationService
from .storage import MigrationService
from .auth import SessionService

__all__ = [
    "BaseService",
    "TaskService",
    "CompletionService",
    "EventService",
    "ImportService",
    "JournalService",
    "TagService",
    "RoutineService",
    "SettingsService",
    "InsightService",
    "DashboardService",
    "FamilyService",
    "SharingService",
    "NotificationService",
    "MigrationService",
    "SessionService",
]
