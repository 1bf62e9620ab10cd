import json

import pytest

from myday.exceptions import AuthenticationRequiredError
from myday.storage.adapter import StorageMode, local_store_for, repositories_for

TASK_FIELDS = {
    "name": "Water plants",
    "frequency": "interval",
    "interval_value": 3,
    "interval_unit": "days",
    "interval_start_date": "2024-01-01",
    "dependent_task_ids": ["task_watering_can"],
    "on_hold": True,
    "hold_start_date": "2024-02-01",
    "hold_end_date": "2024-02-10",
    "hold_reason": "Vacation",
    "weightage": 4,
}


@pytest.mark.parametrize("mode", [StorageMode.database, StorageMode.local])
class TestTaskRoundTrip:
    """A task saved and reloaded keeps its hold, dependency and interval fields."""

    def test_round_trip_preserves_fields(self, test_db, users, mode):
        alice, _ = users
        repos = repositories_for(test_db, alice.id, mode)

        created = repos.tasks.create_for_user(alice.id, dict(TASK_FIELDS))
        test_db.commit()

        reloaded = repos.tasks.to_schema(repos.tasks.get_by_user(created.id, alice.id))
        for field, value in TASK_FIELDS.items():
            assert getattr(reloaded, field) == value, field

    def test_explicit_id_is_kept(self, test_db, users, mode):
        alice, _ = users
        repos = repositories_for(test_db, alice.id, mode)

        repos.tasks.create_for_user(alice.id, dict(TASK_FIELDS, id="task_fixed"))
        test_db.commit()

        assert repos.tasks.get_by_user("task_fixed", alice.id) is not None

    def test_update_and_delete(self, test_db, users, mode):
        alice, _ = users
        repos = repositories_for(test_db, alice.id, mode)
        task = repos.tasks.create_for_user(alice.id, dict(TASK_FIELDS))

        updated = repos.tasks.update_by_user(task.id, alice.id, {"on_hold": False, "hold_reason": None})
        assert updated.on_hold is False
        assert updated.hold_reason is None

        assert repos.tasks.delete_by_user(task.id, alice.id) is True
        assert repos.tasks.get_by_user(task.id, alice.id) is None
        assert repos.tasks.delete_by_user(task.id, alice.id) is False


def test_local_documents_use_camel_case(test_db, users, local_storage_dir):
    alice, _ = users
    repos = repositories_for(test_db, alice.id, StorageMode.local)
    repos.tasks.create_for_user(alice.id, dict(TASK_FIELDS))

    document = json.loads((local_storage_dir / f"{alice.id}.json").read_text())
    stored = document["tasks"][0]
    assert stored["holdEndDate"] == "2024-02-10"
    assert stored["dependentTaskIds"] == ["task_watering_can"]
    assert "hold_end_date" not in stored


def test_local_completion_upsert_is_keyed_by_day(test_db, users):
    alice, _ = users
    repos = repositories_for(test_db, alice.id, StorageMode.local)

    first = repos.completions.upsert(alice.id, "task_a", "2024-01-05", duration_minutes=10)
    second = repos.completions.upsert(alice.id, "task_a", "2024-01-05", duration_minutes=25)

    assert first.id == second.id
    assert [c.duration_minutes for c in repos.completions.list_by_user(alice.id)] == [25]


def test_database_data_is_scoped_per_user(test_db, users):
    alice, bob = users
    repos = repositories_for(test_db, alice.id, StorageMode.database)
    task = repos.tasks.create_for_user(alice.id, dict(TASK_FIELDS))
    test_db.commit()

    assert repos.tasks.get_by_user(task.id, bob.id) is None
    assert repos.tasks.list_by_user(bob.id) == []


def test_signed_out_access_rejected(test_db):
    with pytest.raises(AuthenticationRequiredError):
        repositories_for(test_db, None, StorageMode.database)
    with pytest.raises(AuthenticationRequiredError):
        local_store_for("")
