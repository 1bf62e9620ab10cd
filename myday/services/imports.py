from datetime import date, datetime, timedelta
from typing import List, Dict, Any, Optional, Union
from icalendar import Calendar
from sqlalchemy.orm import Session

from myday.schemas import EventCreate, ImportResult
from myday.exceptions import ValidationError
from myday.storage.adapter import StorageMode
from .base import BaseService
from .event import EventService

# First match wins, so "death anniversary" is read before plain "anniversary"
CATEGORY_KEYWORDS = [
    ("Birthday", ("birthday", "bday")),
    ("Death Anniversary", ("death", "passing")),
    ("Anniversary", ("anniversary", "anni")),
    ("Memorial", ("memorial", "memory")),
    ("Remembrance", ("remembrance", "tribute")),
    ("Holiday", ("holiday", "christmas", "thanksgiving", "new year")),
]
DEFAULT_CATEGORY = "Special Event"

CATEGORY_COLORS = {
    "Birthday": "#EC4899",
    "Anniversary": "#EF4444",
    "Holiday": "#8B5CF6",
    "Special Event": "#3B82F6",
    "Death Anniversary": "#6b7280",
    "Memorial": "#4b5563",
    "Remembrance": "#6b7280",
}
DEFAULT_COLOR = "#667eea"

PERSONAL_CATEGORIES = {
    "Birthday",
    "Anniversary",
    "Death Anniversary",
    "Memorial",
    "Remembrance",
    "Holiday",
}

IMPORT_NOTIFY_DAYS = 3


def _component_date(prop) -> Optional[date]:
    if prop is None:
        return None
    value = prop.dt
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return None


def _alarm_days(event) -> Optional[int]:
    """Whole days before the event of its first relative VALARM trigger."""
    for alarm in event.walk("VALARM"):
        trigger = alarm.get("trigger")
        if trigger is None or not isinstance(trigger.dt, timedelta):
            continue
        if trigger.dt < timedelta(0) and (-trigger.dt).days > 0:
            return (-trigger.dt).days
    return None


def parse_icalendar(content: Union[str, bytes]) -> List[Dict[str, Any]]:
    """Extract VEVENTs that carry a summary, a start date and a UID."""
    calendar = Calendar.from_ical(content)
    events = []

    for component in calendar.walk("VEVENT"):
        summary = component.get("summary")
        uid = component.get("uid")
        start = _component_date(component.get("dtstart"))
        if not summary or not uid or start is None:
            continue

        rrule = component.get("rrule")
        frequencies = rrule.get("FREQ", []) if rrule else []
        description = component.get("description")
        events.append({
            "summary": str(summary),
            "description": str(description) if description else None,
            "uid": str(uid),
            "dtstart": start,
            "freq": str(frequencies[0]).upper() if frequencies else None,
            "trigger_days": _alarm_days(component),
        })

    return events


def detect_category(summary: str) -> str:
    text = summary.lower()
    for category, keywords in CATEGORY_KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return category
    return DEFAULT_CATEGORY


def color_for_category(category: str) -> str:
    return CATEGORY_COLORS.get(category, DEFAULT_COLOR)


def convert_ical_events(ical_events: List[Dict[str, Any]]) -> List[EventCreate]:
    """Map parsed VEVENTs onto events; yearly rules become MM-DD events."""
    events = []
    for ical_event in ical_events:
        start = ical_event["dtstart"]
        category = detect_category(ical_event["summary"])
        if ical_event.get("freq") == "YEARLY":
            event_date = start.strftime("%m-%d")
            frequency = "yearly"
            year = start.year
        else:
            event_date = start.isoformat()
            frequency = "one-time"
            year = None

        events.append(EventCreate(
            name=ical_event["summary"],
            description=ical_event.get("description"),
            category=category,
            event_date=event_date,
            frequency=frequency,
            year=year,
            notify_days_before=ical_event.get("trigger_days") or IMPORT_NOTIFY_DAYS,
            color=color_for_category(category),
        ))
    return events


def filter_personal_events(events: List[EventCreate]) -> List[EventCreate]:
    return [e for e in events if e.category in PERSONAL_CATEGORIES]


class ImportService(BaseService):
    """Service for importing events from external calendar files."""

    def __init__(self, db: Session, storage_mode: Optional[StorageMode] = None):
        super().__init__(db, storage_mode)
        self.event_service = EventService(db, storage_mode)

    def import_ical(self, content: str, user_id: str, personal_only: bool = False) -> ImportResult:
        """Create events from an .ics document."""
        try:
            if "BEGIN:VCALENDAR" not in content and "BEGIN:VEVENT" not in content:
                raise ValidationError("File is not an iCalendar document")

            try:
                ical_events = parse_icalendar(content)
            except ValueError as e:
                raise ValidationError("Could not parse iCalendar file", {"reason": str(e)})
            events = convert_ical_events(ical_events)
            if personal_only:
                events = filter_personal_events(events)
            self.logger.info(
                f"Importing {len(events)} of {len(ical_events)} calendar events for user {user_id}"
            )

            event_ids = [self.event_service.create_event(event, user_id).id for event in events]

            self.logger.info(f"Successfully imported {len(event_ids)} events")
            return ImportResult(
                imported_count=len(event_ids),
                skipped_count=len(ical_events) - len(event_ids),
                event_ids=event_ids,
            )

        except Exception as e:
            self.rollback()
            self.logger.error(f"Failed to import iCalendar file: {str(e)}")
            raise
