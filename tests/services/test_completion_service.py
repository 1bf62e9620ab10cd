import pytest

from myday.exceptions import NotFoundError, ValidationError
from myday.schemas import TaskCreate
from myday.services import CompletionService, TaskService
from myday.storage.adapter import StorageMode


@pytest.fixture(params=[StorageMode.database, StorageMode.local])
def services(request, test_db, users):
    return TaskService(test_db, request.param), CompletionService(test_db, request.param)


class TestCompletionService:
    """Test completions, cascades and spillovers."""

    def test_complete_is_idempotent_per_day(self, services, users):
        task_service, completion_service = services
        alice, _ = users
        task = task_service.create_task(TaskCreate(name="Read"), alice.id)

        first = completion_service.complete_task(task.id, alice.id, "2024-01-05", duration_minutes=20)
        second = completion_service.complete_task(task.id, alice.id, "2024-01-05", duration_minutes=35)

        assert first.completion.id == second.completion.id
        stored = completion_service.list_completions(alice.id, task_id=task.id)
        assert len(stored) == 1
        assert stored[0].duration_minutes == 35

    def test_complete_unknown_task(self, services, users):
        _, completion_service = services
        alice, _ = users
        with pytest.raises(NotFoundError):
            completion_service.complete_task("task_missing", alice.id, "2024-01-05")

    def test_uncomplete(self, services, users):
        task_service, completion_service = services
        alice, _ = users
        task = task_service.create_task(TaskCreate(name="Read"), alice.id)
        completion_service.complete_task(task.id, alice.id, "2024-01-05")

        assert completion_service.uncomplete_task(task.id, alice.id, "2024-01-05") is True
        assert completion_service.is_completed(task.id, alice.id, "2024-01-05") is False
        assert completion_service.uncomplete_task(task.id, alice.id, "2024-01-05") is False

    def test_cascade_completes_dependents_due_that_day(self, services, users):
        task_service, completion_service = services
        alice, _ = users
        brush = task_service.create_task(TaskCreate(name="Brush teeth"), alice.id)
        floss = task_service.create_task(TaskCreate(name="Floss", dependent_task_ids=[brush.id]), alice.id)
        rinse = task_service.create_task(TaskCreate(name="Rinse", dependent_task_ids=[floss.id]), alice.id)
        # Mondays only; 2024-01-05 is a Friday
        weekly = task_service.create_task(
            TaskCreate(name="Deep clean", frequency="weekly", days_of_week=[1], dependent_task_ids=[brush.id]),
            alice.id,
        )

        result = completion_service.complete_task(brush.id, alice.id, "2024-01-05")

        assert sorted(result.cascaded_task_ids) == sorted([floss.id, rinse.id])
        assert completion_service.is_completed(rinse.id, alice.id, "2024-01-05")
        assert not completion_service.is_completed(weekly.id, alice.id, "2024-01-05")

    def test_cascade_survives_cycles(self, services, users):
        task_service, completion_service = services
        alice, _ = users
        a = task_service.create_task(TaskCreate(name="A"), alice.id)
        b = task_service.create_task(TaskCreate(name="B", dependent_task_ids=[a.id]), alice.id)
        task_service.update_task(a.id, alice.id, {"dependent_task_ids": [b.id]})

        result = completion_service.complete_task(a.id, alice.id, "2024-01-05")

        assert result.cascaded_task_ids == [b.id]

    def test_move_to_next_day_defaults_to_tomorrow(self, services, users):
        task_service, completion_service = services
        alice, _ = users
        task = task_service.create_task(TaskCreate(name="Call bank"), alice.id)

        spillover = completion_service.move_to_next_day(task.id, alice.id, "2024-02-28")

        assert spillover.from_date == "2024-02-28"
        assert spillover.to_date == "2024-02-29"

    def test_moving_again_replaces_target(self, services, users):
        task_service, completion_service = services
        alice, _ = users
        task = task_service.create_task(TaskCreate(name="Call bank"), alice.id)

        completion_service.move_to_next_day(task.id, alice.id, "2024-02-28")
        completion_service.move_to_next_day(task.id, alice.id, "2024-02-28", "2024-03-02")

        spillovers = completion_service.list_spillovers(alice.id)
        assert [(s.from_date, s.to_date) for s in spillovers] == [("2024-02-28", "2024-03-02")]

    def test_move_backwards_rejected(self, services, users):
        task_service, completion_service = services
        alice, _ = users
        task = task_service.create_task(TaskCreate(name="Call bank"), alice.id)

        with pytest.raises(ValidationError):
            completion_service.move_to_next_day(task.id, alice.id, "2024-02-28", "2024-02-28")

    def test_list_completions_range_validation(self, services, users):
        _, completion_service = services
        alice, _ = users
        with pytest.raises(ValidationError):
            completion_service.list_completions(alice.id, start="2024-02-01", end="2024-01-01")
