import calendar
import re
from datetime import date
from typing import Any, Dict, List, Optional
from sqlalchemy.orm import Session

from myday.schemas import EventCreate, EventOut, UpcomingEventOut
from myday.exceptions import NotFoundError, ValidationError
from myday.scheduling import format_date, parse_date
from myday.storage.adapter import StorageMode
from .base import BaseService

_MONTH_DAY = re.compile(r"^(\d{2})-(\d{2})$")
_FULL_DATE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")


def _anniversary(year: int, month: int, day: int) -> date:
    # Feb 29 falls on Feb 28 in non-leap years
    if month == 2 and day == 29 and not calendar.isleap(year):
        return date(year, 2, 28)
    return date(year, month, day)


def next_occurrence(event: Any, today: date) -> Optional[date]:
    """Next date on or after ``today`` the event falls on, or None if it has passed."""
    value = event.event_date
    month_day = _MONTH_DAY.match(value)
    full = _FULL_DATE.match(value)

    if event.frequency == "yearly" or (month_day and not full):
        if month_day:
            month, day = int(month_day.group(1)), int(month_day.group(2))
        elif full:
            month, day = int(full.group(2)), int(full.group(3))
        else:
            return None
        occurrence = _anniversary(today.year, month, day)
        if occurrence < today:
            occurrence = _anniversary(today.year + 1, month, day)
        return occurrence

    if full:
        occurrence = parse_date(value)
        return occurrence if occurrence >= today else None
    return None


def upcoming_from(
    events: List[EventOut],
    today: date,
    days_ahead: int = 7,
    respect_notify: bool = True,
) -> List[UpcomingEventOut]:
    """Events whose next occurrence is within ``days_ahead`` days, soonest first.

    With ``respect_notify`` an event is only listed once its reminder window
    (``notify_days_before``) has opened.
    """
    upcoming = []
    for event in events:
        occurrence = next_occurrence(event, today)
        if occurrence is None:
            continue
        days_until = (occurrence - today).days
        if days_until < 0 or days_until > days_ahead:
            continue
        if respect_notify and days_until > (event.notify_days_before or 0):
            continue
        upcoming.append(UpcomingEventOut(
            event=event,
            date=format_date(occurrence),
            days_until=days_until,
        ))
    return sorted(upcoming, key=lambda u: (u.days_until, -u.event.priority, u.event.name))


class EventService(BaseService):
    """Service for important dates and their reminders."""

    def __init__(self, db: Session, storage_mode: Optional[StorageMode] = None):
        super().__init__(db, storage_mode)

    def _normalize(self, data: Dict[str, Any]) -> Dict[str, Any]:
        data["name"] = (data.get("name") or "").strip()
        if not data["name"]:
            raise ValidationError("Event name cannot be empty")

        value = (data.get("event_date") or "").strip()
        frequency = data.get("frequency") or "one-time"
        full = _FULL_DATE.match(value)
        month_day = _MONTH_DAY.match(value)

        if frequency == "yearly":
            if full:
                # Yearly events are stored as MM-DD; the year is kept separately
                data["year"] = data.get("year") or int(full.group(1))
                value = value[5:]
            elif not month_day:
                raise ValidationError("Yearly events need a date as MM-DD or YYYY-MM-DD")
            month, day = int(value[:2]), int(value[3:])
            try:
                date(2000, month, day)
            except ValueError:
                raise ValidationError(f"'{value}' is not a valid month and day")
        else:
            if not full and not (frequency == "custom" and month_day):
                raise ValidationError("Event date must be YYYY-MM-DD")
            if full:
                try:
                    parse_date(value)
                except ValueError:
                    raise ValidationError(f"'{value}' is not a valid date")

        data["event_date"] = value
        data["frequency"] = frequency
        for field, default in (("notify_days_before", 0), ("priority", 5), ("hide_from_dashboard", False)):
            if data.get(field) is None:
                data[field] = default
        return data

    def create_event(self, event_in: EventCreate, user_id: str) -> EventOut:
        """Create a new event for specific user."""
        try:
            self.logger.info(f"Creating event for user {user_id}: {event_in.name}")

            repos = self.repos(user_id)
            data = self._normalize(event_in.model_dump())
            event = repos.events.create_for_user(user_id, data)
            self.commit()

            self.logger.info(f"Event created successfully: {event.id}")
            return repos.events.to_schema(event)

        except Exception as e:
            self.rollback()
            self.logger.error(f"Failed to create event: {str(e)}")
            raise

    def get_event(self, event_id: str, user_id: str) -> EventOut:
        self.logger.debug(f"Fetching event {event_id} for user {user_id}")

        repos = self.repos(user_id)
        event = repos.events.get_by_user(event_id, user_id)
        if not event:
            raise NotFoundError("Event", event_id)
        return repos.events.to_schema(event)

    def list_events(self, user_id: str) -> List[EventOut]:
        self.logger.debug(f"Listing events for user {user_id}")

        repos = self.repos(user_id)
        return repos.events.to_schema_batch(repos.events.list_by_user(user_id))

    def update_event(self, event_id: str, user_id: str, update_data: Dict[str, Any]) -> EventOut:
        try:
            self.logger.info(f"Updating event {event_id} for user {user_id}")

            repos = self.repos(user_id)
            existing = repos.events.get_by_user(event_id, user_id)
            if not existing:
                raise NotFoundError("Event", event_id)

            merged = repos.events.to_schema(existing).model_dump()
            merged.update(update_data)
            merged = self._normalize(merged)
            changes = {k: v for k, v in merged.items() if k not in ("id", "created_at")}

            event = repos.events.update_by_user(event_id, user_id, changes)
            self.commit()

            self.logger.info(f"Event updated successfully: {event_id}")
            return repos.events.to_schema(event)

        except Exception as e:
            self.rollback()
            self.logger.error(f"Failed to update event {event_id}: {str(e)}")
            raise

    def delete_event(self, event_id: str, user_id: str) -> bool:
        try:
            self.logger.info(f"Deleting event {event_id} for user {user_id}")

            repos = self.repos(user_id)
            if not repos.events.get_by_user(event_id, user_id):
                raise NotFoundError("Event", event_id)

            deleted = repos.events.delete_by_user(event_id, user_id)
            self.commit()

            self.logger.info(f"Event deleted successfully: {event_id}")
            return deleted

        except Exception as e:
            self.rollback()
            self.logger.error(f"Failed to delete event {event_id}: {str(e)}")
            raise

    def upcoming_events(
        self,
        user_id: str,
        today: Optional[date] = None,
        days_ahead: int = 7,
        respect_notify: bool = True,
        include_hidden: bool = True,
    ) -> List[UpcomingEventOut]:
        """Upcoming occurrences, each flagged with its acknowledgment state."""
        today = today or date.today()
        if days_ahead < 0:
            raise ValidationError("daysAhead cannot be negative")
        self.logger.debug(f"Listing events within {days_ahead} days for user {user_id}")

        events = self.list_events(user_id)
        if not include_hidden:
            events = [e for e in events if not e.hide_from_dashboard]

        prefs = self.preferences(user_id)
        upcoming = upcoming_from(events, today, days_ahead, respect_notify)
        for item in upcoming:
            item.is_acknowledged = prefs.is_event_acknowledged(item.event.id, item.date)
        return upcoming

    def acknowledge_event(self, event_id: str, user_id: str, day: Optional[str] = None) -> UpcomingEventOut:
        """Mark one occurrence of an event as seen."""
        event = self.get_event(event_id, user_id)
        if day is None:
            occurrence = next_occurrence(event, date.today())
            if occurrence is None:
                raise ValidationError("Event has no upcoming occurrence to acknowledge")
            day = format_date(occurrence)

        self.logger.info(f"Acknowledging event {event_id} for {day} for user {user_id}")
        self.preferences(user_id).acknowledge_event(event_id, day)
        return UpcomingEventOut(
            event=event,
            date=day,
            days_until=(parse_date(day) - date.today()).days,
            is_acknowledged=True,
        )

    def is_event_acknowledged(self, event_id: str, user_id: str, day: str) -> bool:
        return self.preferences(user_id).is_event_acknowledged(event_id, day)
