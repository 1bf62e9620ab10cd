from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Dict, Any, Optional

from myday.db import get_db
from myday.services import CompletionService, DashboardService, TaskService
from myday.schemas import (
    BulkResult,
    CompleteTaskRequest,
    CompletionResult,
    HoldRequest,
    SpilloverOut,
    SpilloverRequest,
    TaskCreate,
    TaskOrderRequest,
    TaskOut,
    TaskStatsOut,
    TaskUpdate,
    check_date_string,
)
from myday.exceptions import ValidationError
from myday.api.v1.auth import get_current_user_dep


router = APIRouter()


def get_task_service(db: Session = Depends(get_db)) -> TaskService:
    """Dependency to get TaskService instance."""
    return TaskService(db)


def get_completion_service(db: Session = Depends(get_db)) -> CompletionService:
    return CompletionService(db)


def get_dashboard_service(db: Session = Depends(get_db)) -> DashboardService:
    return DashboardService(db)


def _date_param(value: Optional[str]) -> Optional[str]:
    try:
        return check_date_string(value)
    except ValueError as e:
        raise ValidationError(str(e))


@router.post("", response_model=TaskOut, status_code=201)
def create_task(
    payload: TaskCreate,
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    task_service: TaskService = Depends(get_task_service)
):
    """Create a new task for authenticated user."""
    return task_service.create_task(payload, current_user["user_id"])


@router.get("", response_model=List[TaskOut])
def list_tasks(
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    task_service: TaskService = Depends(get_task_service)
):
    """List tasks in the saved custom order."""
    return task_service.list_tasks(current_user["user_id"])


@router.get("/for-date", response_model=List[TaskOut])
def tasks_for_date(
    date: Optional[str] = Query(None, description="Day to list (YYYY-MM-DD); defaults to today"),
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    task_service: TaskService = Depends(get_task_service)
):
    """Tasks scheduled for a day, including tasks moved into it."""
    return task_service.tasks_for_date(current_user["user_id"], _date_param(date))


@router.post("/order", response_model=List[str])
def update_order(
    body: TaskOrderRequest,
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    task_service: TaskService = Depends(get_task_service)
):
    """Save the custom task order."""
    return task_service.update_order(current_user["user_id"], body.task_ids)


@router.post("/bulk-hold", response_model=BulkResult)
def bulk_hold(
    body: HoldRequest,
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    task_service: TaskService = Depends(get_task_service)
):
    """Put every task on hold (vacation mode)."""
    ids = task_service.bulk_hold(current_user["user_id"], body.end_date, body.reason)
    return BulkResult(updated=len(ids), ids=ids)


@router.post("/bulk-unhold", response_model=BulkResult)
def bulk_unhold(
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    task_service: TaskService = Depends(get_task_service)
):
    ids = task_service.bulk_unhold(current_user["user_id"])
    return BulkResult(updated=len(ids), ids=ids)


@router.get("/{task_id}", response_model=TaskOut)
def get_task(
    task_id: str,
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    task_service: TaskService = Depends(get_task_service)
):
    """Get a specific task by ID for authenticated user."""
    return task_service.get_task(task_id, current_user["user_id"])


@router.put("/{task_id}", response_model=TaskOut)
@router.patch("/{task_id}", response_model=TaskOut)
def update_task(
    task_id: str,
    update_data: TaskUpdate,
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    task_service: TaskService = Depends(get_task_service)
):
    """Update a task for authenticated user (supports both PUT and PATCH)."""
    update_dict = update_data.model_dump(exclude_unset=True)
    return task_service.update_task(task_id, current_user["user_id"], update_dict)


@router.delete("/{task_id}", status_code=204)
def delete_task(
    task_id: str,
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    task_service: TaskService = Depends(get_task_service)
):
    """Delete a task with its completion history."""
    task_service.delete_task(task_id, current_user["user_id"])
    return None


@router.post("/{task_id}/hold", response_model=TaskOut)
def hold_task(
    task_id: str,
    body: HoldRequest,
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    task_service: TaskService = Depends(get_task_service)
):
    return task_service.hold_task(task_id, current_user["user_id"], body.end_date, body.reason)


@router.post("/{task_id}/unhold", response_model=TaskOut)
def unhold_task(
    task_id: str,
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    task_service: TaskService = Depends(get_task_service)
):
    return task_service.unhold_task(task_id, current_user["user_id"])


@router.post("/{task_id}/complete", response_model=CompletionResult)
def complete_task(
    task_id: str,
    body: CompleteTaskRequest,
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    completion_service: CompletionService = Depends(get_completion_service)
):
    """Mark a task done for a day; dependent tasks due that day follow."""
    return completion_service.complete_task(
        task_id,
        current_user["user_id"],
        body.date,
        body.duration_minutes,
        body.started_at,
    )


@router.post("/{task_id}/uncomplete")
def uncomplete_task(
    task_id: str,
    date: Optional[str] = Query(None),
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    completion_service: CompletionService = Depends(get_completion_service)
):
    removed = completion_service.uncomplete_task(task_id, current_user["user_id"], _date_param(date))
    return {"removed": removed}


@router.post("/{task_id}/spillover", response_model=SpilloverOut)
def move_to_next_day(
    task_id: str,
    body: SpilloverRequest,
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    completion_service: CompletionService = Depends(get_completion_service)
):
    """Move an unfinished task to a later day (tomorrow by default)."""
    return completion_service.move_to_next_day(task_id, current_user["user_id"], body.from_date, body.to_date)


@router.get("/{task_id}/stats", response_model=TaskStatsOut)
def task_stats(
    task_id: str,
    date: Optional[str] = Query(None, description="Reference day; defaults to today"),
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    dashboard_service: DashboardService = Depends(get_dashboard_service)
):
    """Streak, missed count and period progress for one task."""
    return dashboard_service.task_stats(task_id, current_user["user_id"], _date_param(date))
