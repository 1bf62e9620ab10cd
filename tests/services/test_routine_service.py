import pytest

from myday.exceptions import NotFoundError, ValidationError
from myday.schemas import RoutineCreate, TaskCreate
from myday.services import RoutineService, TaskService
from myday.services.routine import DEFAULT_ROUTINES


class TestRoutineService:
    def test_default_routines_seeded_once(self, test_db, users):
        alice, _ = users
        service = RoutineService(test_db)

        created = service.initialize_default_routines(alice.id)
        assert len(created) == len(DEFAULT_ROUTINES)
        assert all(r.is_pre_defined and not r.is_active for r in created)

        assert service.initialize_default_routines(alice.id) == []
        assert len(service.list_routines(alice.id)) == len(DEFAULT_ROUTINES)

    def test_apply_keeps_routine_order(self, test_db, users):
        alice, _ = users
        tasks = TaskService(test_db)
        stretch = tasks.create_task(TaskCreate(name="Stretch"), alice.id)
        coffee = tasks.create_task(TaskCreate(name="Coffee"), alice.id)
        service = RoutineService(test_db)
        routine = service.create_routine(
            RoutineCreate(name="Morning", time_of_day="morning", task_ids=[coffee.id, stretch.id, coffee.id]),
            alice.id,
        )

        assert routine.task_ids == [coffee.id, stretch.id]
        applied = service.apply_routine(routine.id, alice.id)
        assert applied.routine_id == routine.id
        assert [t.name for t in applied.tasks] == ["Coffee", "Stretch"]

    def test_unknown_tasks_rejected(self, test_db, users):
        alice, bob = users
        bobs_task = TaskService(test_db).create_task(TaskCreate(name="Bob's"), bob.id)

        with pytest.raises(ValidationError):
            RoutineService(test_db).create_routine(
                RoutineCreate(name="Borrowed", task_ids=[bobs_task.id]), alice.id
            )

    def test_update_and_delete(self, test_db, users):
        alice, bob = users
        service = RoutineService(test_db)
        routine = service.create_routine(RoutineCreate(name="Evening"), alice.id)

        updated = service.update_routine(routine.id, alice.id, {"name": " Night ", "is_active": False})
        assert updated.name == "Night"
        assert updated.is_active is False

        with pytest.raises(ValidationError):
            service.update_routine(routine.id, alice.id, {"name": ""})
        with pytest.raises(NotFoundError):
            service.delete_routine(routine.id, bob.id)
        assert service.delete_routine(routine.id, alice.id) is True
