from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List, Dict, Any

from myday.db import get_db
from myday.services import InsightService
from myday.schemas import Recommendation, TaskInsight, TaskOut
from myday.api.v1.auth import get_current_user_dep


router = APIRouter()


def get_insight_service(db: Session = Depends(get_db)) -> InsightService:
    """Dependency to get InsightService instance."""
    return InsightService(db)


@router.get("", response_model=List[TaskInsight])
def get_underperforming_tasks(
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    insight_service: InsightService = Depends(get_insight_service)
):
    """Tasks completed well below their target, with suggested changes."""
    return insight_service.get_underperforming_tasks(current_user["user_id"])


@router.post("/{task_id}/apply", response_model=TaskOut)
def apply_recommendation(
    task_id: str,
    recommendation: Recommendation,
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    insight_service: InsightService = Depends(get_insight_service)
):
    return insight_service.apply_recommendation(task_id, current_user["user_id"], recommendation)


@router.post("/{task_id}/dismiss", status_code=204)
def dismiss_insight(
    task_id: str,
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    insight_service: InsightService = Depends(get_insight_service)
):
    insight_service.dismiss_insight(task_id, current_user["user_id"])
    return None
