# myday/services/insights.py
from __future__ import annotations
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Optional
import math

from myday.core import settings
from myday.exceptions import NotFoundError, ValidationError
from myday.schemas import InsightMetrics, Recommendation, TaskInsight, TaskOut
from myday.scheduling import format_date
from .base import BaseService
from .task import TaskService

# Rule table over a trailing window (default 3 weeks):
#   expected = weekly_frequency(task) * weeks; skip when expected < 1
#   rate = round(completed / expected * 100); flag when rate < threshold (40)
#   reduce_frequency  85  any frequency except monthly
#   change_days       70  weekly tasks only
#   pause             60  rate < 20 and fewer than 2 completions

REDUCE_CONFIDENCE = 85
CHANGE_DAYS_CONFIDENCE = 70
PAUSE_CONFIDENCE = 60
PAUSE_DAYS = 14
PROJECTED_RATE_CAP = 95

# Common weekly patterns for N days (Sunday = 0)
DEFAULT_DAY_PATTERNS = {
    1: [1],
    2: [1, 4],
    3: [1, 3, 5],
    4: [1, 3, 5, 6],
    5: [1, 2, 3, 4, 5],
    6: [1, 2, 3, 4, 5, 6],
}
SUGGESTED_DAYS = [2, 4]


def weekly_frequency(task: Any) -> float:
    """Expected completions per week for a task's recurrence."""
    frequency = getattr(task, "frequency", None)
    if frequency == "daily":
        return 7
    if frequency == "weekly":
        return len(getattr(task, "days_of_week", None) or []) or 1
    if frequency == "monthly":
        return 0.25
    if frequency == "count-based":
        count = getattr(task, "frequency_count", None) or 1
        if getattr(task, "frequency_period", None) == "week":
            return count
        return count / 4
    if frequency == "custom":
        if "month" in (getattr(task, "custom_frequency", None) or ""):
            return 0.25
        return 1
    return 1


def default_days(count: int) -> List[int]:
    return list(DEFAULT_DAY_PATTERNS.get(count, [1]))


def frequency_label(weekly: int) -> str:
    if weekly >= 7:
        return "Keep Daily"
    if weekly >= 5:
        return "Reduce to Weekdays"
    return f"Reduce to {weekly}x/week"


def suggested_frequency_value(task: Any, weekly: int) -> Optional[Dict[str, Any]]:
    """Field changes that bring ``task`` down to ``weekly`` completions."""
    frequency = getattr(task, "frequency", None)
    if (frequency == "daily" and weekly < 7) or frequency == "weekly":
        return {"frequency": "weekly", "daysOfWeek": default_days(weekly)}
    if frequency == "count-based":
        return {
            "frequency": "count-based",
            "frequencyCount": max(1, weekly),
            "frequencyPeriod": "week",
        }
    return None


def generate_recommendations(
    task: Any,
    rate: int,
    completed: int,
    expected: float,
    weeks: int = 3,
    threshold: int = 40,
) -> List[Recommendation]:
    recommendations = []
    frequency = getattr(task, "frequency", None)

    if rate < threshold and frequency != "monthly":
        suggested = max(1, math.ceil(weekly_frequency(task) * 0.5))
        projected = min(PROJECTED_RATE_CAP, round(completed / (suggested * weeks) * 100))
        recommendations.append(Recommendation(
            type="reduce_frequency",
            confidence=REDUCE_CONFIDENCE,
            reason=(
                f"You completed {completed} of {_number(expected)} times ({rate}%). "
                "A lower frequency may help you maintain consistency."
            ),
            suggested_value=suggested_frequency_value(task, suggested),
            expected_improvement=f"{projected}% completion rate at reduced frequency",
            action_label=frequency_label(suggested),
        ))

    if frequency == "weekly" and rate < threshold:
        recommendations.append(Recommendation(
            type="change_days",
            confidence=CHANGE_DAYS_CONFIDENCE,
            reason="Current schedule may not align with your routine. Try different days.",
            suggested_value=list(SUGGESTED_DAYS),
            expected_improvement="Better alignment with your schedule",
            action_label="Try suggested days",
        ))

    if rate < 20 and completed < 2:
        recommendations.append(Recommendation(
            type="pause",
            confidence=PAUSE_CONFIDENCE,
            reason="You've completed this very rarely. Consider pausing to reduce overwhelm.",
            suggested_value=True,
            expected_improvement="Reduce stress and focus on tasks you can complete",
            action_label="Pause for 2 weeks",
        ))

    return recommendations


def _number(value: float):
    return int(value) if float(value).is_integer() else value


def analyze_task_performance(
    task: Any,
    completions: Iterable[Any],
    today: date,
    weeks: int = 3,
    threshold: int = 40,
) -> Optional[TaskInsight]:
    """Insight for one task, or None when it is on track or has too little history."""
    start = format_date(today - timedelta(days=weeks * 7))
    end = format_date(today)
    completed = sum(
        1 for c in completions
        if c.task_id == task.id and start <= c.completion_date <= end
    )

    target = weekly_frequency(task)
    expected = target * weeks
    if expected < 1:
        return None

    rate = round(completed / expected * 100)
    if rate >= threshold:
        return None

    recommendations = generate_recommendations(task, rate, completed, expected, weeks, threshold)
    if not recommendations:
        return None

    return TaskInsight(
        task_id=task.id,
        task_name=task.name,
        issue="low_completion",
        current_metrics=InsightMetrics(
            completion_rate=rate,
            weeks_analyzed=weeks,
            attempted_count=expected,
            completed_count=completed,
            target_frequency=target,
        ),
        recommendations=recommendations,
    )


def find_underperforming(
    tasks: Iterable[Any],
    completions: Iterable[Any],
    today: date,
    weeks: int = 3,
    threshold: int = 40,
) -> List[TaskInsight]:
    completions = list(completions)
    insights = [
        insight for insight in (
            analyze_task_performance(task, completions, today, weeks, threshold)
            for task in tasks
        )
        if insight
    ]
    return sorted(insights, key=lambda i: i.current_metrics.completion_rate)


def recommendation_changes(recommendation: Recommendation, today: date) -> Dict[str, Any]:
    """Task field changes for an accepted recommendation."""
    value = recommendation.suggested_value
    if recommendation.type == "reduce_frequency":
        if not value:
            return {}
        # Suggested values use the camelCase wire names
        return {
            field: value[alias]
            for field, alias in (
                ("frequency", "frequency"),
                ("days_of_week", "daysOfWeek"),
                ("frequency_count", "frequencyCount"),
                ("frequency_period", "frequencyPeriod"),
            )
            if alias in value
        }
    if recommendation.type == "change_days":
        if not value:
            return {}
        return {"frequency": "weekly", "days_of_week": list(value)}
    if recommendation.type == "pause":
        return {"end_date": format_date(today + timedelta(days=PAUSE_DAYS))}
    raise ValidationError(f"Recommendation type '{recommendation.type}' cannot be applied")


class InsightService(BaseService):
    """Rule-based insights about tasks the user keeps missing."""

    def get_underperforming_tasks(self, user_id: str, today: Optional[date] = None) -> List[TaskInsight]:
        today = today or date.today()
        weeks = settings.insight_weeks
        self.logger.debug(f"Analyzing task performance for user {user_id} over {weeks} weeks")

        repos = self.repos(user_id)
        tasks = repos.tasks.to_schema_batch(repos.tasks.list_by_user(user_id))
        completions = repos.completions.to_schema_batch(repos.completions.list_by_user(
            user_id,
            start=format_date(today - timedelta(days=weeks * 7)),
            end=format_date(today),
        ))

        insights = find_underperforming(tasks, completions, today, weeks, settings.insight_threshold)
        prefs = self.preferences(user_id)
        return [i for i in insights if not prefs.is_insight_dismissed(i.task_id)]

    def apply_recommendation(
        self,
        task_id: str,
        user_id: str,
        recommendation: Recommendation,
        today: Optional[date] = None,
    ) -> TaskOut:
        today = today or date.today()
        self.logger.info(f"Applying {recommendation.type} to task {task_id} for user {user_id}")

        repos = self.repos(user_id)
        if not repos.tasks.get_by_user(task_id, user_id):
            raise NotFoundError("Task", task_id)

        changes = recommendation_changes(recommendation, today)
        task_service = TaskService(self.db, self.storage_mode)
        if not changes:
            return task_service.get_task(task_id, user_id)
        return task_service.update_task(task_id, user_id, changes)

    def dismiss_insight(self, task_id: str, user_id: str) -> None:
        self.logger.info(f"Dismissing insight for task {task_id} for user {user_id}")
        self.preferences(user_id).dismiss_insight(task_id)
