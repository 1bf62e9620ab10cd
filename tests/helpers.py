from datetime import datetime
from typing import Any

from myday.schemas import CompletionOut, SpilloverOut, TaskOut

CREATED = datetime(2023, 12, 1, 8, 0, 0)


def make_task(id: str = "task_1", name: str = "Task", **fields: Any) -> TaskOut:
    data = {"id": id, "name": name, "weightage": 5, "frequency": "daily", "created_at": CREATED}
    data.update(fields)
    return TaskOut(**data)


def make_completion(task_id: str, day: str) -> CompletionOut:
    return CompletionOut(
        id=f"completion_{task_id}_{day}",
        task_id=task_id,
        completion_date=day,
        completed_at=datetime(2024, 1, 1, 12, 0, 0),
    )


def make_spillover(task_id: str, from_date: str, to_date: str) -> SpilloverOut:
    return SpilloverOut(
        id=f"spillover_{task_id}_{from_date}",
        task_id=task_id,
        from_date=from_date,
        to_date=to_date,
        moved_at=datetime(2024, 1, 1, 12, 0, 0),
    )
