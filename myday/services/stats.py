# myday/services/stats.py
from __future__ import annotations
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from myday.scheduling import (
    created_on,
    format_date,
    is_date_in_range,
    is_on_hold,
    period_bounds,
    should_task_show_on,
)

# Streaks and missed counts never look at today: the day is still in progress.
# Held days are skipped without breaking a streak and are never counted as
# missed. Days before a task existed are never due.


@dataclass
class CompletionIndex:
    """Set of (task_id, date) pairs for O(1) lookups while walking dates."""
    pairs: Set[Tuple[str, str]]

    @classmethod
    def build(cls, completions: Iterable[Any]) -> "CompletionIndex":
        return cls({(c.task_id, c.completion_date) for c in completions})

    def done(self, task_id: str, day: str) -> bool:
        return (task_id, day) in self.pairs


def _as_index(completions) -> CompletionIndex:
    if isinstance(completions, CompletionIndex):
        return completions
    return CompletionIndex.build(completions)


def is_due(task: Any, day: date) -> bool:
    """Due on ``day``: existed by then, not held, and matched by the recurrence."""
    created = created_on(task)
    if created and day < created:
        return False
    if is_on_hold(task, day):
        return False
    return should_task_show_on(task, day)


def global_streak(
    tasks: List[Any],
    completions: Iterable[Any],
    today: date,
    window: int = 30,
) -> int:
    """Consecutive fully-completed days ending yesterday."""
    index = _as_index(completions)
    streak = 0
    day = today - timedelta(days=1)
    for _ in range(window):
        ds = format_date(day)
        due = [t for t in tasks if is_due(t, day)]
        if due:
            if all(index.done(t.id, ds) for t in due):
                streak += 1
            else:
                break
        day -= timedelta(days=1)
    return streak


def task_streak(
    task: Any,
    completions: Iterable[Any],
    today: date,
    window: int = 30,
) -> int:
    index = _as_index(completions)
    created = created_on(task)
    streak = 0
    day = today - timedelta(days=1)
    for _ in range(window):
        if created and day < created:
            break
        ds = format_date(day)
        if not is_on_hold(task, day) and should_task_show_on(task, day):
            if index.done(task.id, ds):
                streak += 1
            else:
                break
        day -= timedelta(days=1)
    return streak


def task_missed_count(
    task: Any,
    completions: Iterable[Any],
    spillovers: Iterable[Any],
    today: date,
    days: int = 7,
) -> int:
    index = _as_index(completions)
    spilled = {s.from_date for s in spillovers if s.task_id == task.id}
    missed = 0
    for offset in range(1, days + 1):
        day = today - timedelta(days=offset)
        ds = format_date(day)
        if not is_due(task, day):
            continue
        if not index.done(task.id, ds) and ds not in spilled:
            missed += 1
    return missed


def completion_count_for_period(task_id: str, completions: Iterable[Any], start: str, end: str) -> int:
    return sum(
        1 for c in completions
        if c.task_id == task_id and is_date_in_range(c.completion_date, start, end)
    )


def count_progress(task: Any, completions: Iterable[Any], day: date) -> Optional[Dict[str, Any]]:
    """Progress toward a count-based target for the period containing ``day``."""
    target = getattr(task, "frequency_count", None)
    period = getattr(task, "frequency_period", None)
    if getattr(task, "frequency", None) != "count-based" or not target or not period:
        return None
    start, end = period_bounds(task, day)
    current = completion_count_for_period(task.id, completions, start, end)
    return {"current": current, "target": target, "label": f"{current}/{target} this {period}"}


def completion_rate(flags: Iterable[bool]) -> int:
    flags = list(flags)
    if not flags:
        return 0
    return round(sum(1 for f in flags if f) / len(flags) * 100)


def priority_level(weightage: int) -> str:
    if weightage >= 9:
        return "critical"
    if weightage >= 7:
        return "high"
    if weightage >= 4:
        return "medium"
    return "low"


def tag_counts(
    tasks: Iterable[Any],
    completions: Iterable[Any],
    tags: Iterable[Any],
    start: Optional[str] = None,
    end: Optional[str] = None,
) -> List[Dict[str, Any]]:
    """Completions per trackable tag, most used first."""
    trackable = {t.id: t for t in tags if getattr(t, "trackable", False)}
    task_tags = {t.id: (getattr(t, "tags", None) or []) for t in tasks}
    counts = {tag_id: 0 for tag_id in trackable}
    for c in completions:
        if start and c.completion_date < start:
            continue
        if end and c.completion_date > end:
            continue
        for tag_id in task_tags.get(c.task_id, []):
            if tag_id in counts:
                counts[tag_id] += 1
    rows = [
        {"tag_id": tag_id, "name": trackable[tag_id].name, "color": trackable[tag_id].color, "count": n}
        for tag_id, n in counts.items()
    ]
    return sorted(rows, key=lambda r: (-r["count"], r["name"]))
