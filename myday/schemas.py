from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Any, Dict, List, Optional, Literal
import re
from datetime import datetime

from myday.scheduling import parse_date
from myday.models import (
    FamilyRoleEnum,
    InvitationStatusEnum,
    AssignmentStatusEnum,
    AssignmentPriorityEnum,
    SharePermissionEnum,
    NotificationTypeEnum,
)

Frequency = Literal["daily", "weekly", "monthly", "count-based", "interval", "custom"]
FrequencyPeriod = Literal["week", "month"]
IntervalUnit = Literal["days", "weeks", "months", "years"]
TimeOfDay = Literal["morning", "afternoon", "evening", "anytime"]
EventFrequency = Literal["yearly", "one-time", "custom"]
Mood = Literal["great", "good", "okay", "bad", "terrible"]
DashboardLayout = Literal["uniform", "grid-spans", "masonry"]

DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")


def check_date_string(value: Optional[str]) -> Optional[str]:
    """Accept None or a YYYY-MM-DD calendar date."""
    if value is None:
        return value
    if not isinstance(value, str) or not DATE_PATTERN.fullmatch(value):
        raise ValueError(f"'{value}' is not a YYYY-MM-DD date")
    try:
        parse_date(value)
    except ValueError:
        raise ValueError(f"'{value}' is not a YYYY-MM-DD date")
    return value


class CamelModel(BaseModel):
    """Snake_case attributes, camelCase on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ----- Tasks -----

class TaskFields(CamelModel):
    description: Optional[str] = None
    category: Optional[str] = None
    color: Optional[str] = None
    custom_background_color: Optional[str] = None
    custom_frequency: Optional[str] = None
    days_of_week: Optional[List[int]] = None
    day_of_month: Optional[int] = Field(default=None, ge=1, le=31)
    frequency_count: Optional[int] = Field(default=None, ge=1)
    frequency_period: Optional[FrequencyPeriod] = None
    interval_value: Optional[int] = Field(default=None, ge=1)
    interval_unit: Optional[IntervalUnit] = None
    interval_start_date: Optional[str] = None
    time_of_day: Optional[TimeOfDay] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    specific_date: Optional[str] = None
    end_time: Optional[str] = None
    dependent_task_ids: Optional[List[str]] = None
    tags: Optional[List[str]] = None

    @field_validator("interval_start_date", "start_date", "end_date", "specific_date")
    @classmethod
    def _dates(cls, v):
        return check_date_string(v)

    @field_validator("days_of_week")
    @classmethod
    def _days(cls, v):
        if v is None:
            return v
        if any(d < 0 or d > 6 for d in v):
            raise ValueError("daysOfWeek values must be between 0 (Sunday) and 6 (Saturday)")
        return sorted(set(v))


class TaskCreate(TaskFields):
    name: str
    weightage: int = Field(default=5, ge=1, le=10)
    frequency: Frequency = "daily"


class TaskUpdate(TaskFields):
    name: Optional[str] = None
    weightage: Optional[int] = Field(default=None, ge=1, le=10)
    frequency: Optional[Frequency] = None
    on_hold: Optional[bool] = None
    hold_start_date: Optional[str] = None
    hold_end_date: Optional[str] = None
    hold_reason: Optional[str] = None

    @field_validator("hold_start_date", "hold_end_date")
    @classmethod
    def _hold_dates(cls, v):
        return check_date_string(v)


class TaskOut(TaskFields):
    id: str
    name: str
    weightage: int
    frequency: Frequency
    on_hold: bool = False
    hold_start_date: Optional[str] = None
    hold_end_date: Optional[str] = None
    hold_reason: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None


class HoldRequest(CamelModel):
    end_date: Optional[str] = None
    reason: Optional[str] = None

    @field_validator("end_date")
    @classmethod
    def _end(cls, v):
        return check_date_string(v)


class TaskOrderRequest(CamelModel):
    task_ids: List[str]


class BulkResult(CamelModel):
    updated: int
    ids: List[str]


# ----- Completions / spillovers -----

class CompleteTaskRequest(CamelModel):
    date: Optional[str] = None
    duration_minutes: Optional[int] = Field(default=None, ge=0)
    started_at: Optional[datetime] = None

    @field_validator("date")
    @classmethod
    def _date(cls, v):
        return check_date_string(v)


class CompletionOut(CamelModel):
    id: str
    task_id: str
    completion_date: str
    duration_minutes: Optional[int] = None
    started_at: Optional[datetime] = None
    completed_at: datetime


class CompletionResult(CamelModel):
    completion: CompletionOut
    cascaded_task_ids: List[str] = []


class SpilloverRequest(CamelModel):
    from_date: Optional[str] = None
    to_date: Optional[str] = None

    @field_validator("from_date", "to_date")
    @classmethod
    def _dates(cls, v):
        return check_date_string(v)


class SpilloverOut(CamelModel):
    id: str
    task_id: str
    from_date: str
    to_date: str
    moved_at: datetime


# ----- Statistics -----

class ProgressOut(CamelModel):
    current: int
    target: int
    label: str


class TaskStatsOut(CamelModel):
    task_id: str
    streak: int
    missed_count: int
    progress: Optional[ProgressOut] = None


class StreakOut(CamelModel):
    streak: int
    as_of: str


# ----- Events -----

class EventFields(CamelModel):
    description: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[List[str]] = None
    custom_frequency: Optional[str] = None
    year: Optional[int] = None
    notify_days_before: Optional[int] = Field(default=None, ge=0)
    priority: Optional[int] = Field(default=None, ge=1, le=10)
    hide_from_dashboard: Optional[bool] = None
    color: Optional[str] = None


class EventCreate(EventFields):
    name: str
    event_date: str
    frequency: EventFrequency = "one-time"


class EventUpdate(EventFields):
    name: Optional[str] = None
    event_date: Optional[str] = None
    frequency: Optional[EventFrequency] = None


class EventOut(EventFields):
    id: str
    name: str
    event_date: str
    frequency: EventFrequency
    notify_days_before: int = 0
    priority: int = 5
    hide_from_dashboard: bool = False
    created_at: datetime


class UpcomingEventOut(CamelModel):
    event: EventOut
    date: str
    days_until: int
    is_acknowledged: bool = False


class AcknowledgeRequest(CamelModel):
    date: Optional[str] = None

    @field_validator("date")
    @classmethod
    def _date(cls, v):
        return check_date_string(v)


class ImportResult(CamelModel):
    imported_count: int
    skipped_count: int
    event_ids: List[str]


# ----- Journal -----

class JournalEntryIn(CamelModel):
    entry_date: str
    content: str = ""
    mood: Optional[Mood] = None
    tags: Optional[List[str]] = None

    @field_validator("entry_date")
    @classmethod
    def _date(cls, v):
        return check_date_string(v)


class JournalEntryOut(JournalEntryIn):
    id: str
    created_at: datetime
    updated_at: Optional[datetime] = None


# ----- Tags -----

class TagCreate(CamelModel):
    name: str
    color: Optional[str] = None
    trackable: bool = False
    description: Optional[str] = None


class TagUpdate(CamelModel):
    name: Optional[str] = None
    color: Optional[str] = None
    trackable: Optional[bool] = None
    description: Optional[str] = None


class TagOut(TagCreate):
    id: str
    created_at: datetime


class TagCountOut(CamelModel):
    tag_id: str
    name: str
    color: Optional[str] = None
    count: int


# ----- Routines -----

class RoutineCreate(CamelModel):
    name: str
    description: Optional[str] = None
    time_of_day: TimeOfDay = "anytime"
    task_ids: List[str] = []
    is_active: bool = True


class RoutineUpdate(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None
    time_of_day: Optional[TimeOfDay] = None
    task_ids: Optional[List[str]] = None
    is_active: Optional[bool] = None


class RoutineOut(RoutineCreate):
    id: str
    is_pre_defined: bool = False
    created_at: datetime


class AppliedRoutineOut(CamelModel):
    routine_id: str
    tasks: List[TaskOut]


# ----- Settings / profile / preferences -----

class Location(CamelModel):
    zip_code: Optional[str] = None
    city: Optional[str] = None
    country: Optional[str] = None


class UserSettingsOut(CamelModel):
    theme: str = "purple"
    dashboard_layout: DashboardLayout = "uniform"
    notifications: bool = True
    location: Optional[Location] = None


class UserSettingsUpdate(CamelModel):
    theme: Optional[str] = None
    dashboard_layout: Optional[DashboardLayout] = None
    notifications: Optional[bool] = None
    location: Optional[Location] = None


class ProfileOut(CamelModel):
    username: Optional[str] = None
    email: str
    avatar_emoji: Optional[str] = None


class ProfileUpdate(CamelModel):
    username: Optional[str] = None
    email: Optional[str] = None
    avatar_emoji: Optional[str] = None


class PreferencesOut(CamelModel):
    task_order: List[str] = []
    dashboard_layout: DashboardLayout = "uniform"
    is_first_time_user: bool = True


# ----- Insights -----

RecommendationType = Literal["reduce_frequency", "change_time", "change_days", "pause"]


class Recommendation(CamelModel):
    type: RecommendationType
    confidence: int
    reason: str = ""
    suggested_value: Any = None
    expected_improvement: str = ""
    action_label: str = ""


class InsightMetrics(CamelModel):
    completion_rate: int
    weeks_analyzed: int
    attempted_count: float
    completed_count: int
    target_frequency: float


class TaskInsight(CamelModel):
    task_id: str
    task_name: str
    issue: Literal["low_completion", "high_spillover", "time_mismatch"] = "low_completion"
    current_metrics: InsightMetrics
    recommendations: List[Recommendation]


# ----- Dashboard -----

class DashboardTaskItem(CamelModel):
    id: str
    name: str
    description: Optional[str] = None
    category: Optional[str] = None
    color: Optional[str] = None
    weightage: int
    priority_level: Literal["critical", "high", "medium", "low"]
    is_completed: bool
    is_spillover: bool = False
    streak: int = 0
    missed_count: int = 0
    progress: Optional[ProgressOut] = None
    task: TaskOut


class DashboardEventItem(CamelModel):
    id: str
    name: str
    description: Optional[str] = None
    category: Optional[str] = None
    color: Optional[str] = None
    weightage: int
    date: str
    days_until: int
    is_completed: bool
    event: EventOut


class TodayOut(CamelModel):
    date: str
    tasks: List[DashboardTaskItem]
    events: List[DashboardEventItem]
    progress: int
    streak: int
    insight: Optional[TaskInsight] = None


# ----- Family -----

class FamilyCreate(CamelModel):
    name: str
    description: Optional[str] = None


class FamilyUpdate(CamelModel):
    name: Optional[str] = None
    description: Optional[str] = None


class FamilyOut(CamelModel):
    id: str
    name: str
    description: Optional[str] = None
    created_by: str
    created_at: datetime
    updated_at: datetime


class FamilyMemberOut(CamelModel):
    id: str
    family_id: str
    user_id: str
    role: FamilyRoleEnum
    joined_at: datetime
    email: Optional[str] = None
    display_name: Optional[str] = None


class FamilyDataOut(CamelModel):
    family: FamilyOut
    members: List[FamilyMemberOut]
    my_role: FamilyRoleEnum


class InvitationCreate(CamelModel):
    email: str
    message: Optional[str] = None


class InvitationResponse(CamelModel):
    accept: bool


class InvitationOut(CamelModel):
    id: str
    family_id: str
    invited_by: str
    invited_email: str
    invited_user_id: Optional[str] = None
    status: InvitationStatusEnum
    message: Optional[str] = None
    created_at: datetime
    expires_at: datetime
    family_name: Optional[str] = None
    inviter_email: Optional[str] = None


class AssignmentCreate(CamelModel):
    task_id: str
    assigned_to: str
    family_id: str
    due_date: Optional[str] = None
    priority: AssignmentPriorityEnum = AssignmentPriorityEnum.normal
    notes: Optional[str] = None

    @field_validator("due_date")
    @classmethod
    def _due(cls, v):
        return check_date_string(v)


class AssignmentStatusUpdate(CamelModel):
    status: AssignmentStatusEnum


class AssignmentOut(CamelModel):
    id: str
    task_id: str
    assigned_by: str
    assigned_to: str
    family_id: str
    due_date: Optional[str] = None
    priority: AssignmentPriorityEnum
    status: AssignmentStatusEnum
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    task_name: Optional[str] = None


class ShareCreate(CamelModel):
    task_id: str
    family_id: str
    shared_with: Optional[str] = None
    permission: SharePermissionEnum = SharePermissionEnum.view


class SharedTaskOut(CamelModel):
    id: str
    task_id: str
    shared_by: str
    shared_with: Optional[str] = None
    family_id: str
    permission: SharePermissionEnum
    created_at: datetime
    task_name: Optional[str] = None


class NotificationOut(CamelModel):
    id: str
    type: NotificationTypeEnum
    title: str
    message: str
    link: Optional[str] = None
    read: bool
    data: Optional[Dict[str, Any]] = None
    created_at: datetime


class UnreadCountOut(CamelModel):
    count: int


# ----- Auth / storage / weather -----

class DevLoginRequest(CamelModel):
    email: str
    name: str


class UserOut(CamelModel):
    id: str
    email: str
    name: Optional[str] = None


class MigrationResult(CamelModel):
    success: bool
    message: str
    counts: Dict[str, int] = {}


class AppDataOut(CamelModel):
    tasks: List[TaskOut] = []
    completions: List[CompletionOut] = []
    spillovers: List[SpilloverOut] = []
    events: List[EventOut] = []
    event_acknowledgments: Dict[str, bool] = {}
    tags: List[TagOut] = []
    journal_entries: List[JournalEntryOut] = []
    routines: List[RoutineOut] = []


class WeatherOut(CamelModel):
    temperature: float
    description: str
    icon: Optional[str] = None
    location: str
