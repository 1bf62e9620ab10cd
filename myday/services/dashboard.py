from datetime import date, timedelta
from typing import List, Optional
from sqlalchemy.orm import Session

from myday.core import settings
from myday.schemas import (
    DashboardEventItem,
    DashboardTaskItem,
    ProgressOut,
    StreakOut,
    TaskInsight,
    TaskStatsOut,
    TodayOut,
)
from myday.exceptions import AuthenticationRequiredError, NotFoundError
from myday.scheduling import format_date, parse_date
from myday.storage.adapter import StorageMode
from .base import BaseService
from .event import EventService
from .insights import InsightService
from .stats import (
    CompletionIndex,
    completion_rate,
    count_progress,
    global_streak,
    priority_level,
    task_missed_count,
    task_streak,
)
from .task import TaskService

# Count-based progress can reach back to the first of the month
_PERIOD_LOOKBACK_DAYS = 31


class DashboardService(BaseService):
    """Today view and the streak statistics shown around it."""

    def __init__(self, db: Session, storage_mode: Optional[StorageMode] = None):
        super().__init__(db, storage_mode)
        self.task_service = TaskService(db, storage_mode)
        self.event_service = EventService(db, storage_mode)
        self.insight_service = InsightService(db, storage_mode)

    def _history(self, user_id: str, today: date):
        repos = self.repos(user_id)
        lookback = max(settings.streak_window_days, settings.missed_window_days, _PERIOD_LOOKBACK_DAYS)
        tasks = repos.tasks.to_schema_batch(repos.tasks.list_by_user(user_id))
        completions = repos.completions.to_schema_batch(repos.completions.list_by_user(
            user_id,
            start=format_date(today - timedelta(days=lookback)),
            end=format_date(today + timedelta(days=_PERIOD_LOOKBACK_DAYS)),
        ))
        spillovers = repos.spillovers.to_schema_batch(repos.spillovers.list_by_user(user_id))
        return tasks, completions, spillovers

    def _top_insight(self, user_id: str, today: date) -> Optional[TaskInsight]:
        try:
            insights = self.insight_service.get_underperforming_tasks(user_id, today)
        except AuthenticationRequiredError:
            # Not signed in yet: the dashboard simply shows no insight
            return None
        return insights[0] if insights else None

    def today(self, user_id: str, today: Optional[date] = None) -> TodayOut:
        """Everything the dashboard needs for one day."""
        today = today or date.today()
        day = format_date(today)
        self.logger.debug(f"Building dashboard for {day} for user {user_id}")

        _, completions, spillovers = self._history(user_id, today)
        index = CompletionIndex.build(completions)
        spilled_ids = {s.task_id for s in spillovers if s.to_date == day}

        task_items: List[DashboardTaskItem] = []
        for task in self.task_service.tasks_for_date(user_id, day):
            progress = count_progress(task, completions, today)
            task_items.append(DashboardTaskItem(
                id=task.id,
                name=task.name,
                description=task.description,
                category=task.category,
                color=task.color,
                weightage=task.weightage,
                priority_level=priority_level(task.weightage),
                is_completed=index.done(task.id, day),
                is_spillover=task.id in spilled_ids,
                streak=task_streak(task, index, today, settings.streak_window_days),
                missed_count=task_missed_count(task, index, spillovers, today, settings.missed_window_days),
                progress=ProgressOut(**progress) if progress else None,
                task=task,
            ))

        event_items = [
            DashboardEventItem(
                id=item.event.id,
                name=item.event.name,
                description=item.event.description,
                category=item.event.category,
                color=item.event.color,
                weightage=item.event.priority,
                date=item.date,
                days_until=item.days_until,
                is_completed=item.is_acknowledged,
                event=item.event,
            )
            for item in self.event_service.upcoming_events(
                user_id,
                today,
                days_ahead=settings.dashboard_event_days,
                include_hidden=False,
            )
        ]

        flags = [i.is_completed for i in task_items] + [e.is_completed for e in event_items]
        return TodayOut(
            date=day,
            tasks=task_items,
            events=event_items,
            progress=completion_rate(flags),
            streak=self.streak(user_id, today).streak,
            insight=self._top_insight(user_id, today),
        )

    def streak(self, user_id: str, today: Optional[date] = None) -> StreakOut:
        """Days in a row, ending yesterday, on which every due task was done."""
        today = today or date.today()
        tasks, completions, _ = self._history(user_id, today)
        return StreakOut(
            streak=global_streak(tasks, completions, today, settings.streak_window_days),
            as_of=format_date(today),
        )

    def task_stats(self, task_id: str, user_id: str, day: Optional[str] = None) -> TaskStatsOut:
        today = parse_date(day) if day else date.today()
        tasks, completions, spillovers = self._history(user_id, today)
        task = next((t for t in tasks if t.id == task_id), None)
        if task is None:
            raise NotFoundError("Task", task_id)

        progress = count_progress(task, completions, today)
        return TaskStatsOut(
            task_id=task.id,
            streak=task_streak(task, completions, today, settings.streak_window_days),
            missed_count=task_missed_count(task, completions, spillovers, today, settings.missed_window_days),
            progress=ProgressOut(**progress) if progress else None,
        )
