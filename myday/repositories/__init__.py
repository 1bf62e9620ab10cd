from .base import BaseRepository
from .task import TaskRepository
from .completion import CompletionRepository, SpilloverRepository
from .event import EventRepository
from .journal import JournalRepository
from .tag import TagRepository
from .routine import RoutineRepository
from .user import UserRepository
from .family import (
    FamilyRepository,
    FamilyMemberRepository,
    InvitationRepository,
    AssignmentRepository,
    SharedTaskRepository,
    NotificationRepository,
)

__all__ = [
    "BaseRepository",
    "TaskRepository",
    "CompletionRepository",
    "SpilloverRepository",
    "EventRepository",
    "JournalRepository",
    "TagRepository",
    "RoutineRepository",
    "UserRepository",
    "FamilyRepository",
    "FamilyMemberRepository",
    "InvitationRepository",
    "AssignmentRepository",
    "SharedTaskRepository",
    "NotificationRepository",
]
