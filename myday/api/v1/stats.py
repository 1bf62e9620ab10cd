from fastapi import APIRouter, Depends, Query
from typing import Dict, Any, Optional

from myday.services import DashboardService
from myday.schemas import StreakOut
from myday.api.v1.auth import get_current_user_dep
from myday.api.v1.dashboard import get_dashboard_service, parse_day_param


router = APIRouter()


@router.get("/streak", response_model=StreakOut)
def streak(
    date: Optional[str] = Query(None, description="Reference day; defaults to today"),
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    dashboard_service: DashboardService = Depends(get_dashboard_service)
):
    """Days in a row, up to yesterday, on which every due task was completed."""
    return dashboard_service.streak(current_user["user_id"], parse_day_param(date))
