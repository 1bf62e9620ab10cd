import pytest

from myday.exceptions import NotFoundError, ValidationError
from myday.schemas import TaskCreate, TaskOut, check_date_string
from myday.services import CompletionService, TaskService
from myday.storage.adapter import StorageMode


@pytest.fixture(params=[StorageMode.database, StorageMode.local])
def task_service(request, test_db, users):
    """TaskService in both storage modes."""
    return TaskService(test_db, request.param)


class TestTaskService:
    """Test TaskService business logic."""

    def test_create_task_success(self, task_service, users, sample_task_data):
        alice, _ = users
        result = task_service.create_task(TaskCreate(**sample_task_data), alice.id)

        assert isinstance(result, TaskOut)
        assert result.name == "Morning walk"
        assert result.id.startswith("task_")
        assert result.on_hold is False

    def test_create_task_empty_name_fails(self, task_service, users):
        alice, _ = users
        with pytest.raises(ValidationError) as exc_info:
            task_service.create_task(TaskCreate(name="   "), alice.id)

        assert "Task name cannot be empty" in str(exc_info.value)

    def test_weekly_task_requires_days(self, task_service, users):
        alice, _ = users
        with pytest.raises(ValidationError):
            task_service.create_task(TaskCreate(name="Gym", frequency="weekly"), alice.id)

    def test_end_before_start_rejected(self, task_service, users):
        alice, _ = users
        with pytest.raises(ValidationError):
            task_service.create_task(
                TaskCreate(name="Course", start_date="2024-02-01", end_date="2024-01-01"),
                alice.id,
            )

    def test_recurrence_fields_of_other_frequencies_cleared(self, task_service, users):
        alice, _ = users
        result = task_service.create_task(
            TaskCreate(name="Gym", frequency="weekly", days_of_week=[1, 3], day_of_month=9),
            alice.id,
        )
        assert result.days_of_week == [1, 3]
        assert result.day_of_month is None

    def test_interval_anchor_defaults_to_start_date(self, task_service, users):
        alice, _ = users
        result = task_service.create_task(
            TaskCreate(
                name="Change filter",
                frequency="interval",
                interval_value=2,
                interval_unit="weeks",
                start_date="2024-03-01",
            ),
            alice.id,
        )
        assert result.interval_start_date == "2024-03-01"

    def test_unknown_dependency_rejected(self, task_service, users):
        alice, _ = users
        with pytest.raises(ValidationError) as exc_info:
            task_service.create_task(TaskCreate(name="Rinse", dependent_task_ids=["task_missing"]), alice.id)

        assert exc_info.value.details == {"missing_task_ids": ["task_missing"]}

    def test_get_task_of_other_user_not_found(self, task_service, users, sample_task_data):
        alice, bob = users
        task = task_service.create_task(TaskCreate(**sample_task_data), alice.id)

        with pytest.raises(NotFoundError):
            task_service.get_task(task.id, bob.id)

    def test_update_task_switch_frequency(self, task_service, users, sample_task_data):
        alice, _ = users
        task = task_service.create_task(TaskCreate(**sample_task_data), alice.id)

        updated = task_service.update_task(task.id, alice.id, {"frequency": "monthly", "day_of_month": 12})

        assert updated.frequency == "monthly"
        assert updated.day_of_month == 12
        assert updated.name == "Morning walk"

    def test_update_clears_fields_of_other_frequencies(self, task_service, users):
        alice, _ = users
        task = task_service.create_task(TaskCreate(name="Gym", frequency="weekly", days_of_week=[1]), alice.id)

        updated = task_service.update_task(task.id, alice.id, {"day_of_month": 5, "interval_value": 3})

        assert updated.frequency == "weekly"
        assert updated.days_of_week == [1]
        assert updated.day_of_month is None
        assert updated.interval_value is None

    def test_task_cannot_depend_on_itself(self, task_service, users, sample_task_data):
        alice, _ = users
        task = task_service.create_task(TaskCreate(**sample_task_data), alice.id)

        with pytest.raises(ValidationError):
            task_service.update_task(task.id, alice.id, {"dependent_task_ids": [task.id]})

    def test_delete_task_cleans_up_references(self, task_service, users):
        alice, _ = users
        first = task_service.create_task(TaskCreate(name="Cook"), alice.id)
        second = task_service.create_task(TaskCreate(name="Wash up", dependent_task_ids=[first.id]), alice.id)
        task_service.update_order(alice.id, [first.id, second.id])
        CompletionService(task_service.db, task_service.storage_mode).complete_task(first.id, alice.id, "2024-01-02")

        assert task_service.delete_task(first.id, alice.id) is True

        assert task_service.get_task(second.id, alice.id).dependent_task_ids == []
        assert task_service.preferences(alice.id).task_order() == [second.id]
        completions = CompletionService(task_service.db, task_service.storage_mode).list_completions(
            alice.id, task_id=first.id
        )
        assert completions == []

    def test_list_tasks_follows_custom_order(self, task_service, users):
        alice, _ = users
        a = task_service.create_task(TaskCreate(name="A"), alice.id)
        b = task_service.create_task(TaskCreate(name="B"), alice.id)
        c = task_service.create_task(TaskCreate(name="C"), alice.id)

        saved = task_service.update_order(alice.id, [b.id, "task_unknown", a.id, b.id])

        assert saved == [b.id, a.id]
        assert [t.id for t in task_service.list_tasks(alice.id)] == [b.id, a.id, c.id]


class TestHolds:
    def test_hold_and_unhold(self, task_service, users, sample_task_data):
        alice, _ = users
        task = task_service.create_task(TaskCreate(**sample_task_data), alice.id)

        held = task_service.hold_task(task.id, alice.id, "2030-01-10", "Trip")
        assert held.on_hold is True
        assert held.hold_end_date == "2030-01-10"
        assert held.hold_reason == "Trip"

        released = task_service.unhold_task(task.id, alice.id)
        assert released.on_hold is False
        assert released.hold_start_date is None
        assert released.hold_end_date is None

    def test_hold_end_in_past_rejected(self, task_service, users, sample_task_data):
        alice, _ = users
        task = task_service.create_task(TaskCreate(**sample_task_data), alice.id)

        with pytest.raises(ValidationError):
            task_service.hold_task(task.id, alice.id, "2000-01-01")

    def test_bulk_hold_and_release(self, task_service, users):
        alice, bob = users
        mine = [task_service.create_task(TaskCreate(name=f"T{i}"), alice.id) for i in range(3)]
        theirs = task_service.create_task(TaskCreate(name="Bob's"), bob.id)

        held = task_service.bulk_hold(alice.id, reason="Vacation")
        assert sorted(held) == sorted(t.id for t in mine)
        assert task_service.get_task(theirs.id, bob.id).on_hold is False

        task_service.unhold_task(mine[0].id, alice.id)
        released = task_service.bulk_unhold(alice.id)
        assert sorted(released) == sorted(t.id for t in mine[1:])
        assert all(not t.on_hold for t in task_service.list_tasks(alice.id))


class TestTasksForDate:
    def test_held_task_not_listed(self, task_service, users):
        alice, _ = users
        task = task_service.create_task(TaskCreate(name="Run"), alice.id)
        task_service.update_task(task.id, alice.id, {
            "on_hold": True,
            "hold_start_date": "2024-01-05",
            "hold_end_date": "2024-01-08",
        })

        assert task_service.tasks_for_date(alice.id, "2024-01-06") == []
        assert [t.id for t in task_service.tasks_for_date(alice.id, "2024-01-09")] == [task.id]

    def test_spilled_task_shows_on_target_day(self, task_service, users):
        alice, _ = users
        task = task_service.create_task(TaskCreate(name="Taxes", specific_date="2024-04-10"), alice.id)
        CompletionService(task_service.db, task_service.storage_mode).move_to_next_day(
            task.id, alice.id, "2024-04-10"
        )

        assert [t.id for t in task_service.tasks_for_date(alice.id, "2024-04-11")] == [task.id]
        spillovers = CompletionService(task_service.db, task_service.storage_mode).list_spillovers(
            alice.id, to_date="2024-04-11"
        )
        assert [s.task_id for s in spillovers] == [task.id]

    def test_count_based_hidden_when_target_met(self, task_service, users):
        alice, _ = users
        task = task_service.create_task(
            TaskCreate(name="Swim", frequency="count-based", frequency_count=1, frequency_period="week"),
            alice.id,
        )
        CompletionService(task_service.db, task_service.storage_mode).complete_task(task.id, alice.id, "2024-01-01")

        assert task_service.tasks_for_date(alice.id, "2024-01-01") != []
        assert task_service.tasks_for_date(alice.id, "2024-01-02") == []


class TestDateStrings:
    @pytest.mark.parametrize("value", ["2024-W01-1", "2024-1-05", "20240105", "2024-02-30", " 2024-01-05"])
    def test_rejects_non_calendar_dates(self, value):
        with pytest.raises(ValueError):
            check_date_string(value)

    def test_accepts_calendar_date(self):
        assert check_date_string("2024-02-29") == "2024-02-29"
        assert check_date_string(None) is None
