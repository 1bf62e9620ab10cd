"""Calendar arithmetic and the "should this task show on date D" predicate.

Everything here is pure: functions take task-like objects (ORM rows, pydantic
schemas, or anything exposing the same attribute names) and plain dates.
"""
from __future__ import annotations

import re
from calendar import monthrange
from datetime import date, datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

DATE_FORMAT = "%Y-%m-%d"

_CUSTOM_MONTHLY = re.compile(r"(\d+)(st|nd|rd|th)\s+of\s+every\s+month", re.IGNORECASE)

# Recurrence fields owned by each frequency
RECURRENCE_FIELDS: Dict[str, Tuple[str, ...]] = {
    "daily": (),
    "weekly": ("days_of_week",),
    "monthly": ("day_of_month",),
    "count-based": ("frequency_count", "frequency_period"),
    "interval": ("interval_value", "interval_unit", "interval_start_date"),
    "custom": ("custom_frequency",),
}
ALL_RECURRENCE_FIELDS = tuple(
    sorted({field for fields in RECURRENCE_FIELDS.values() for field in fields})
)

DateLike = Union[date, str]


def format_date(value: date) -> str:
    return value.strftime(DATE_FORMAT)


def parse_date(value: str) -> date:
    return datetime.strptime(value, DATE_FORMAT).date()


def to_date(value: DateLike) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return parse_date(value)


def today_string(today: Optional[date] = None) -> str:
    return format_date(today or date.today())


def js_weekday(day: date) -> int:
    """Day of week with Sunday as 0, the convention used by daysOfWeek."""
    return (day.weekday() + 1) % 7


def get_week_bounds(day: DateLike) -> Tuple[str, str]:
    """Sunday through Saturday of the week containing ``day``."""
    d = to_date(day)
    start = d - timedelta(days=js_weekday(d))
    return format_date(start), format_date(start + timedelta(days=6))


def get_month_bounds(day: DateLike) -> Tuple[str, str]:
    d = to_date(day)
    last = monthrange(d.year, d.month)[1]
    return format_date(d.replace(day=1)), format_date(d.replace(day=last))


def is_date_in_range(day: str, start: str, end: str) -> bool:
    return start <= day <= end


def period_bounds(task: Any, day: DateLike) -> Tuple[str, str]:
    """Counting period of a count-based task around ``day``."""
    if getattr(task, "frequency_period", None) == "month":
        return get_month_bounds(day)
    return get_week_bounds(day)


def created_on(task: Any) -> Optional[date]:
    created = getattr(task, "created_at", None)
    if created is None:
        return None
    if isinstance(created, str):
        created = datetime.fromisoformat(created.replace("Z", "+00:00"))
    return to_date(created)


def is_on_hold(task: Any, day: DateLike) -> bool:
    """True when ``day`` falls inside the task's hold window.

    A missing start or end bound leaves that side of the window open.
    """
    if not getattr(task, "on_hold", False):
        return False
    d = format_date(to_date(day))
    start = getattr(task, "hold_start_date", None)
    end = getattr(task, "hold_end_date", None)
    if start and d < start:
        return False
    if end and d > end:
        return False
    return True


def is_interval_match(task: Any, day: DateLike) -> bool:
    value = getattr(task, "interval_value", None)
    unit = getattr(task, "interval_unit", None)
    anchor_str = getattr(task, "interval_start_date", None)
    if not value or not unit or not anchor_str:
        return False

    d = to_date(day)
    anchor = parse_date(anchor_str)

    if unit == "days":
        diff = (d - anchor).days
        return diff >= 0 and diff % value == 0

    if unit == "weeks":
        diff = (d - anchor).days
        return diff >= 0 and diff % 7 == 0 and (diff // 7) % value == 0

    if unit == "months":
        # Months lacking the anchor day (e.g. the 31st) are skipped
        if d.day != anchor.day:
            return False
        months = (d.year - anchor.year) * 12 + (d.month - anchor.month)
        return months >= 0 and months % value == 0

    if unit == "years":
        if d.day != anchor.day or d.month != anchor.month:
            return False
        years = d.year - anchor.year
        return years >= 0 and years % value == 0

    return False


def _custom_match(task: Any, d: date) -> bool:
    text = getattr(task, "custom_frequency", None)
    if not text:
        return False
    match = _CUSTOM_MONTHLY.search(text)
    if match:
        return d.day == int(match.group(1))
    return False


def should_task_show_on(task: Any, day: DateLike) -> bool:
    """Decide whether ``task`` is scheduled for ``day``.

    Checks run in a fixed order: hold window, start/end bounds, the
    specific-date override, then the frequency rule. Count-based tasks always
    match here; their period target is applied by ``filter_count_based``.
    """
    d = to_date(day)
    ds = format_date(d)

    if is_on_hold(task, d):
        return False

    start = getattr(task, "start_date", None)
    end = getattr(task, "end_date", None)
    if start and ds < start:
        return False
    if end and ds > end:
        return False

    specific = getattr(task, "specific_date", None)
    if specific:
        return ds == specific

    frequency = getattr(task, "frequency", None)
    if frequency == "daily":
        return True
    if frequency == "weekly":
        return js_weekday(d) in (getattr(task, "days_of_week", None) or [])
    if frequency == "monthly":
        return getattr(task, "day_of_month", None) == d.day
    if frequency == "count-based":
        return True
    if frequency == "interval":
        return is_interval_match(task, d)
    if frequency == "custom":
        return _custom_match(task, d)
    return False


def tasks_for_date(tasks: Iterable[Any], day: DateLike) -> List[Any]:
    return [task for task in tasks if should_task_show_on(task, day)]


def filter_count_based(
    tasks: Iterable[Any],
    completions: Iterable[Any],
    day: DateLike,
) -> List[Any]:
    """Drop count-based tasks whose period target is already met.

    A task completed on ``day`` itself stays visible so it can be unticked.
    """
    ds = format_date(to_date(day))
    completions = list(completions)
    result = []
    for task in tasks:
        target = getattr(task, "frequency_count", None)
        if getattr(task, "frequency", None) != "count-based" or not target:
            result.append(task)
            continue
        start, end = period_bounds(task, ds)
        done = [
            c for c in completions
            if c.task_id == task.id and is_date_in_range(c.completion_date, start, end)
        ]
        if len(done) < target or any(c.completion_date == ds for c in done):
            result.append(task)
    return result


def normalize_recurrence(data: Dict[str, Any]) -> Dict[str, Any]:
    """Clear recurrence fields that do not belong to ``data['frequency']``."""
    keep = RECURRENCE_FIELDS.get(data.get("frequency") or "daily", ())
    for field in ALL_RECURRENCE_FIELDS:
        if field not in keep:
            data[field] = None
    return data
