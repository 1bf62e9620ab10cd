import pytest
from pydantic import ValidationError as SchemaValidationError

from myday.exceptions import NotFoundError
from myday.schemas import JournalEntryIn
from myday.services import JournalService
from myday.storage.adapter import StorageMode


@pytest.fixture(params=[StorageMode.database, StorageMode.local])
def journal_service(request, test_db, users):
    return JournalService(test_db, request.param)


class TestJournalService:
    def test_one_entry_per_day(self, journal_service, users):
        alice, _ = users
        first = journal_service.save_entry(
            JournalEntryIn(entry_date="2024-02-01", content="Slow start", mood="okay"), alice.id
        )
        second = journal_service.save_entry(
            JournalEntryIn(entry_date="2024-02-01", content="Better afternoon", mood="good"), alice.id
        )

        assert first.id == second.id
        entry = journal_service.get_entry_by_date(alice.id, "2024-02-01")
        assert entry.content == "Better afternoon"
        assert entry.mood == "good"
        assert len(journal_service.list_entries(alice.id)) == 1

    def test_missing_day_returns_none(self, journal_service, users):
        alice, _ = users
        assert journal_service.get_entry_by_date(alice.id, "2024-02-02") is None

    def test_delete(self, journal_service, users):
        alice, bob = users
        entry = journal_service.save_entry(JournalEntryIn(entry_date="2024-02-03", content="x"), alice.id)

        with pytest.raises(NotFoundError):
            journal_service.delete_entry(entry.id, bob.id)
        assert journal_service.delete_entry(entry.id, alice.id) is True
        assert journal_service.list_entries(alice.id) == []

    def test_bad_date_rejected_by_schema(self):
        with pytest.raises(SchemaValidationError):
            JournalEntryIn(entry_date="02/03/2024", content="x")
