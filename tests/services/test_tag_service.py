import pytest

from myday.exceptions import ConflictError, NotFoundError, ValidationError
from myday.schemas import TagCreate, TaskCreate
from myday.services import CompletionService, TagService, TaskService


class TestTagService:
    """Test tag CRUD and tag analytics."""

    def test_duplicate_name_conflicts(self, test_db, users):
        alice, bob = users
        service = TagService(test_db)
        service.create_tag(TagCreate(name="Fitness"), alice.id)

        with pytest.raises(ConflictError):
            service.create_tag(TagCreate(name=" Fitness "), alice.id)
        # Names are unique per user only
        assert service.create_tag(TagCreate(name="Fitness"), bob.id).name == "Fitness"

    def test_empty_name(self, test_db, users):
        alice, _ = users
        with pytest.raises(ValidationError):
            TagService(test_db).create_tag(TagCreate(name="  "), alice.id)

    def test_list_sorted_by_name(self, test_db, users):
        alice, _ = users
        service = TagService(test_db)
        for name in ("work", "Health", "family"):
            service.create_tag(TagCreate(name=name), alice.id)

        assert [t.name for t in service.list_tags(alice.id)] == ["family", "Health", "work"]

    def test_rename_to_existing_name(self, test_db, users):
        alice, _ = users
        service = TagService(test_db)
        service.create_tag(TagCreate(name="Home"), alice.id)
        garden = service.create_tag(TagCreate(name="Garden"), alice.id)

        with pytest.raises(ConflictError):
            service.update_tag(garden.id, alice.id, {"name": "Home"})
        assert service.update_tag(garden.id, alice.id, {"name": "Garden", "color": "#0f0"}).color == "#0f0"

    def test_delete_strips_tag_from_tasks(self, test_db, users):
        alice, _ = users
        service = TagService(test_db)
        tasks = TaskService(test_db)
        fitness = service.create_tag(TagCreate(name="Fitness"), alice.id)
        outdoors = service.create_tag(TagCreate(name="Outdoors"), alice.id)
        task = tasks.create_task(TaskCreate(name="Run", tags=[fitness.id, outdoors.id]), alice.id)

        assert service.delete_tag(fitness.id, alice.id) is True

        assert tasks.get_task(task.id, alice.id).tags == [outdoors.id]
        with pytest.raises(NotFoundError):
            service.get_tag(fitness.id, alice.id)

    def test_analytics_counts_trackable_tags(self, test_db, users):
        alice, _ = users
        service = TagService(test_db)
        tasks = TaskService(test_db)
        completions = CompletionService(test_db)
        fitness = service.create_tag(TagCreate(name="Fitness", trackable=True), alice.id)
        service.create_tag(TagCreate(name="Chores"), alice.id)
        run = tasks.create_task(TaskCreate(name="Run", tags=[fitness.id]), alice.id)
        for day in ("2024-03-01", "2024-03-02", "2024-03-10"):
            completions.complete_task(run.id, alice.id, day)

        counts = service.tag_analytics(alice.id, start="2024-03-01", end="2024-03-05")

        assert [(c.name, c.count) for c in counts] == [("Fitness", 2)]

    def test_analytics_rejects_reversed_range(self, test_db, users):
        alice, _ = users
        with pytest.raises(ValidationError):
            TagService(test_db).tag_analytics(alice.id, start="2024-03-05", end="2024-03-01")
