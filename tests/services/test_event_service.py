from datetime import date

import pytest

from myday.exceptions import NotFoundError, ValidationError
from myday.schemas import EventCreate
from myday.services import EventService, ImportService
from myday.storage.adapter import StorageMode


@pytest.fixture(params=[StorageMode.database, StorageMode.local])
def event_service(request, test_db, users):
    return EventService(test_db, request.param)


class TestEventService:
    """Test event creation, upcoming listings and acknowledgments."""

    def test_yearly_full_date_is_stored_as_month_day(self, event_service, users):
        alice, _ = users
        event = event_service.create_event(
            EventCreate(name="Mom's birthday", event_date="1960-04-12", frequency="yearly"),
            alice.id,
        )

        assert event.event_date == "04-12"
        assert event.year == 1960
        assert event.notify_days_before == 0
        assert event.priority == 5

    @pytest.mark.parametrize("payload", [
        {"name": "  ", "event_date": "2024-05-01"},
        {"name": "Trip", "event_date": "05-01"},
        {"name": "Trip", "event_date": "2024-02-30"},
        {"name": "Birthday", "event_date": "13-01", "frequency": "yearly"},
    ])
    def test_invalid_events_rejected(self, event_service, users, payload):
        alice, _ = users
        with pytest.raises(ValidationError):
            event_service.create_event(EventCreate(**payload), alice.id)

    def test_update_switches_to_yearly(self, event_service, users):
        alice, _ = users
        event = event_service.create_event(EventCreate(name="Wedding", event_date="2015-06-20"), alice.id)

        updated = event_service.update_event(event.id, alice.id, {"frequency": "yearly"})

        assert updated.event_date == "06-20"
        assert updated.year == 2015
        assert updated.name == "Wedding"

    def test_events_are_per_user(self, event_service, users):
        alice, bob = users
        event = event_service.create_event(EventCreate(name="Dentist", event_date="2024-03-01"), alice.id)

        assert event_service.list_events(bob.id) == []
        with pytest.raises(NotFoundError):
            event_service.get_event(event.id, bob.id)
        with pytest.raises(NotFoundError):
            event_service.delete_event(event.id, bob.id)

    def test_upcoming_with_acknowledgment(self, event_service, users):
        alice, _ = users
        today = date(2024, 4, 10)
        birthday = event_service.create_event(
            EventCreate(name="Sam's birthday", event_date="04-12", frequency="yearly", notify_days_before=3),
            alice.id,
        )
        event_service.create_event(
            EventCreate(name="Conference", event_date="2024-04-16", notify_days_before=1),
            alice.id,
        )

        upcoming = event_service.upcoming_events(alice.id, today=today, days_ahead=7)
        assert [u.event.name for u in upcoming] == ["Sam's birthday"]
        assert upcoming[0].date == "2024-04-12"
        assert upcoming[0].days_until == 2
        assert upcoming[0].is_acknowledged is False

        everything = event_service.upcoming_events(alice.id, today=today, days_ahead=7, respect_notify=False)
        assert [u.event.name for u in everything] == ["Sam's birthday", "Conference"]

        event_service.acknowledge_event(birthday.id, alice.id, "2024-04-12")
        upcoming = event_service.upcoming_events(alice.id, today=today, days_ahead=7)
        assert upcoming[0].is_acknowledged is True
        # Next year's occurrence is a separate acknowledgment
        assert event_service.is_event_acknowledged(birthday.id, alice.id, "2025-04-12") is False

    def test_upcoming_hidden_events(self, event_service, users):
        alice, _ = users
        event_service.create_event(
            EventCreate(name="Quiet day", event_date="2024-04-10", hide_from_dashboard=True),
            alice.id,
        )
        today = date(2024, 4, 10)

        assert len(event_service.upcoming_events(alice.id, today=today)) == 1
        assert event_service.upcoming_events(alice.id, today=today, include_hidden=False) == []

    def test_negative_days_ahead(self, event_service, users):
        alice, _ = users
        with pytest.raises(ValidationError):
            event_service.upcoming_events(alice.id, days_ahead=-1)


class TestImportService:
    """Test importing .ics files into events."""

    CALENDAR = "\r\n".join([
        "BEGIN:VCALENDAR",
        "BEGIN:VEVENT",
        "UID:1@example.com",
        "SUMMARY:Grandpa's Birthday",
        "DTSTART;VALUE=DATE:19400302",
        "RRULE:FREQ=YEARLY",
        "END:VEVENT",
        "BEGIN:VEVENT",
        "UID:2@example.com",
        "SUMMARY:Budget sync",
        "DTSTART:20240502T140000Z",
        "END:VEVENT",
        "END:VCALENDAR",
    ])

    def test_import_creates_events(self, test_db, users):
        alice, _ = users
        result = ImportService(test_db).import_ical(self.CALENDAR, alice.id)

        assert result.imported_count == 2
        assert result.skipped_count == 0
        events = {e.name: e for e in EventService(test_db).list_events(alice.id)}
        assert events["Grandpa's Birthday"].event_date == "03-02"
        assert events["Grandpa's Birthday"].frequency == "yearly"
        assert events["Budget sync"].event_date == "2024-05-02"
        assert events["Budget sync"].category == "Special Event"

    def test_import_personal_only(self, test_db, users):
        alice, _ = users
        result = ImportService(test_db).import_ical(self.CALENDAR, alice.id, personal_only=True)

        assert result.imported_count == 1
        assert result.skipped_count == 1

    def test_import_rejects_non_calendar(self, test_db, users):
        alice, _ = users
        with pytest.raises(ValidationError):
            ImportService(test_db).import_ical("just some text", alice.id)
