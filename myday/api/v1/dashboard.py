from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Dict, Any, Optional

from myday.db import get_db
from myday.services import DashboardService
from myday.schemas import TodayOut
from myday.scheduling import parse_date
from myday.exceptions import ValidationError
from myday.api.v1.auth import get_current_user_dep


router = APIRouter()


def get_dashboard_service(db: Session = Depends(get_db)) -> DashboardService:
    """Dependency to get DashboardService instance."""
    return DashboardService(db)


def parse_day_param(value: Optional[str]):
    if value is None:
        return None
    try:
        return parse_date(value)
    except ValueError:
        raise ValidationError(f"'{value}' is not a valid date (expected YYYY-MM-DD)")


@router.get("/today", response_model=TodayOut)
def today(
    date: Optional[str] = Query(None, description="Day to show; defaults to today"),
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    dashboard_service: DashboardService = Depends(get_dashboard_service)
):
    """Tasks and events for the day with progress, streaks and the top insight."""
    return dashboard_service.today(current_user["user_id"], parse_day_param(date))
