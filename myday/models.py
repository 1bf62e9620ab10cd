# myday/models.py
from sqlalchemy import Column, String, Integer, ForeignKey, Text, DateTime, Enum, Boolean, JSON, Index, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
import enum
import uuid

from .db import Base

# Calendar dates are stored as YYYY-MM-DD strings so that the database rows
# and the local JSON documents share one representation.
DATE_LENGTH = 10


class FrequencyEnum(str, enum.Enum):
    daily = "daily"
    weekly = "weekly"
    monthly = "monthly"
    count_based = "count-based"
    interval = "interval"
    custom = "custom"


class EventFrequencyEnum(str, enum.Enum):
    yearly = "yearly"
    one_time = "one-time"
    custom = "custom"


class MoodEnum(str, enum.Enum):
    great = "great"
    good = "good"
    okay = "okay"
    bad = "bad"
    terrible = "terrible"


class FamilyRoleEnum(str, enum.Enum):
    admin = "admin"
    member = "member"


class InvitationStatusEnum(str, enum.Enum):
    pending = "pending"
    accepted = "accepted"
    rejected = "rejected"
    cancelled = "cancelled"


class AssignmentStatusEnum(str, enum.Enum):
    pending = "pending"
    accepted = "accepted"
    rejected = "rejected"
    completed = "completed"


class AssignmentPriorityEnum(str, enum.Enum):
    low = "low"
    normal = "normal"
    high = "high"
    urgent = "urgent"


class SharePermissionEnum(str, enum.Enum):
    view = "view"
    edit = "edit"


class NotificationTypeEnum(str, enum.Enum):
    invitation = "invitation"
    task_assigned = "task_assigned"
    task_shared = "task_shared"
    task_completed = "task_completed"
    family_update = "family_update"


class User(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String, nullable=False, unique=True)
    name = Column(String, nullable=True)
    username = Column(String, nullable=True)
    avatar_emoji = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    tasks = relationship("Task", back_populates="user")
    settings = relationship("UserSettings", back_populates="user", uselist=False)


class Task(Base):
    __tablename__ = "myday_tasks"

    id = Column(String, primary_key=True)
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)

    # Presentation
    name = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String, nullable=True)
    color = Column(String, nullable=True)
    custom_background_color = Column(String, nullable=True)
    weightage = Column(Integer, nullable=False, default=5)

    # Recurrence; only the fields matching `frequency` are populated
    frequency = Column(String, nullable=False, default=FrequencyEnum.daily.value)
    custom_frequency = Column(String, nullable=True)
    days_of_week = Column(JSON, nullable=True)
    day_of_month = Column(Integer, nullable=True)
    frequency_count = Column(Integer, nullable=True)
    frequency_period = Column(String, nullable=True)
    interval_value = Column(Integer, nullable=True)
    interval_unit = Column(String, nullable=True)
    interval_start_date = Column(String(DATE_LENGTH), nullable=True)
    time_of_day = Column(String, nullable=True)

    # Active window
    start_date = Column(String(DATE_LENGTH), nullable=True)
    end_date = Column(String(DATE_LENGTH), nullable=True)
    specific_date = Column(String(DATE_LENGTH), nullable=True)
    end_time = Column(String, nullable=True)

    dependent_task_ids = Column(JSON, nullable=True)

    # Hold state
    on_hold = Column(Boolean, nullable=False, default=False)
    hold_start_date = Column(String(DATE_LENGTH), nullable=True)
    hold_end_date = Column(String(DATE_LENGTH), nullable=True)
    hold_reason = Column(Text, nullable=True)

    tags = Column(JSON, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    user = relationship("User", back_populates="tasks")
    completions = relationship("TaskCompletion", back_populates="task", cascade="all, delete-orphan")
    spillovers = relationship("TaskSpillover", cascade="all, delete-orphan")

    __table_args__ = (
        Index("ix_myday_tasks_user_created", "user_id", "created_at"),
    )


class TaskCompletion(Base):
    __tablename__ = "myday_task_completions"

    id = Column(String, primary_key=True)
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    task_id = Column(String, ForeignKey("myday_tasks.id", ondelete="CASCADE"), nullable=False)
    completion_date = Column(String(DATE_LENGTH), nullable=False)
    duration_minutes = Column(Integer, nullable=True)
    started_at = Column(DateTime, nullable=True)
    completed_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    task = relationship("Task", back_populates="completions")

    __table_args__ = (
        UniqueConstraint("user_id", "task_id", "completion_date", name="uq_completion_user_task_date"),
        Index("ix_myday_completions_user_date", "user_id", "completion_date"),
    )


class TaskSpillover(Base):
    __tablename__ = "myday_task_spillovers"

    id = Column(String, primary_key=True)
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    task_id = Column(String, ForeignKey("myday_tasks.id", ondelete="CASCADE"), nullable=False)
    from_date = Column(String(DATE_LENGTH), nullable=False)
    to_date = Column(String(DATE_LENGTH), nullable=False)
    moved_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "task_id", "from_date", name="uq_spillover_user_task_from"),
    )


class Event(Base):
    __tablename__ = "myday_events"

    id = Column(String, primary_key=True)
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(Text, nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String, nullable=True)
    tags = Column(JSON, nullable=True)
    # MM-DD for yearly events, YYYY-MM-DD otherwise
    event_date = Column(String(DATE_LENGTH), nullable=False)
    frequency = Column(String, nullable=False, default=EventFrequencyEnum.one_time.value)
    custom_frequency = Column(String, nullable=True)
    year = Column(Integer, nullable=True)
    notify_days_before = Column(Integer, nullable=False, default=0)
    priority = Column(Integer, nullable=False, default=5)
    hide_from_dashboard = Column(Boolean, nullable=False, default=False)
    color = Column(String, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class JournalEntry(Base):
    __tablename__ = "myday_journal_entries"

    id = Column(String, primary_key=True)
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    entry_date = Column(String(DATE_LENGTH), nullable=False)
    content = Column(Text, nullable=False, default="")
    mood = Column(String, nullable=True)
    tags = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "entry_date", name="uq_journal_user_date"),
    )


class Tag(Base):
    __tablename__ = "myday_tags"

    id = Column(String, primary_key=True)
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    color = Column(String, nullable=True)
    trackable = Column(Boolean, nullable=False, default=False)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "name", name="uq_tag_user_name"),
    )


class Routine(Base):
    __tablename__ = "myday_routines"

    id = Column(String, primary_key=True)
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    time_of_day = Column(String, nullable=False, default="anytime")
    task_ids = Column(JSON, nullable=False, default=list)
    is_pre_defined = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class UserSettings(Base):
    __tablename__ = "myday_user_settings"

    user_id = Column(String, ForeignKey("users.id"), primary_key=True)
    theme = Column(String, nullable=False, default="purple")
    dashboard_layout = Column(String, nullable=False, default="uniform")
    notifications_enabled = Column(Boolean, nullable=False, default=True)
    location = Column(JSON, nullable=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    user = relationship("User", back_populates="settings")


class Family(Base):
    __tablename__ = "families"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    created_by = Column(String, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    members = relationship("FamilyMember", back_populates="family", cascade="all, delete-orphan")
    invitations = relationship("FamilyInvitation", back_populates="family", cascade="all, delete-orphan")


class FamilyMember(Base):
    __tablename__ = "family_members"

    id = Column(String, primary_key=True)
    family_id = Column(String, ForeignKey("families.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    role = Column(Enum(FamilyRoleEnum), nullable=False, default=FamilyRoleEnum.member)
    joined_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    family = relationship("Family", back_populates="members")
    user = relationship("User")

    __table_args__ = (
        UniqueConstraint("family_id", "user_id", name="uq_family_member"),
    )


class FamilyInvitation(Base):
    __tablename__ = "family_invitations"

    id = Column(String, primary_key=True)
    family_id = Column(String, ForeignKey("families.id", ondelete="CASCADE"), nullable=False, index=True)
    invited_by = Column(String, ForeignKey("users.id"), nullable=False)
    invited_email = Column(String, nullable=False, index=True)
    invited_user_id = Column(String, ForeignKey("users.id"), nullable=True)
    status = Column(Enum(InvitationStatusEnum), nullable=False, default=InvitationStatusEnum.pending)
    message = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)
    expires_at = Column(DateTime, nullable=False)

    family = relationship("Family", back_populates="invitations")


class TaskAssignment(Base):
    __tablename__ = "task_assignments"

    id = Column(String, primary_key=True)
    task_id = Column(String, ForeignKey("myday_tasks.id", ondelete="CASCADE"), nullable=False)
    assigned_by = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    assigned_to = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    family_id = Column(String, ForeignKey("families.id", ondelete="CASCADE"), nullable=False)
    due_date = Column(String(DATE_LENGTH), nullable=True)
    priority = Column(Enum(AssignmentPriorityEnum), nullable=False, default=AssignmentPriorityEnum.normal)
    status = Column(Enum(AssignmentStatusEnum), nullable=False, default=AssignmentStatusEnum.pending)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    task = relationship("Task")


class SharedTask(Base):
    __tablename__ = "shared_tasks"

    id = Column(String, primary_key=True)
    task_id = Column(String, ForeignKey("myday_tasks.id", ondelete="CASCADE"), nullable=False)
    shared_by = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    # None means the whole family can see it
    shared_with = Column(String, ForeignKey("users.id"), nullable=True)
    family_id = Column(String, ForeignKey("families.id", ondelete="CASCADE"), nullable=False)
    permission = Column(Enum(SharePermissionEnum), nullable=False, default=SharePermissionEnum.view)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    task = relationship("Task")


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(String, primary_key=True)
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    type = Column(Enum(NotificationTypeEnum), nullable=False)
    title = Column(String, nullable=False)
    message = Column(Text, nullable=False)
    link = Column(String, nullable=True)
    read = Column(Boolean, nullable=False, default=False)
    data = Column(JSON, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index("ix_notifications_user_read", "user_id", "read"),
    )
