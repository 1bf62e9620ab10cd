from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import Dict, Any

from myday.db import get_db
from myday.services import MigrationService
from myday.schemas import AppDataOut, MigrationResult
from myday.api.v1.auth import get_current_user_dep


router = APIRouter()


def get_migration_service(db: Session = Depends(get_db)) -> MigrationService:
    """Dependency to get MigrationService instance."""
    return MigrationService(db)


@router.post("/migrate", response_model=MigrationResult)
def migrate_local_to_database(
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    migration_service: MigrationService = Depends(get_migration_service)
):
    """Copy data kept in local storage into the database."""
    return migration_service.migrate_local_to_database(current_user["user_id"])


@router.get("/export", response_model=AppDataOut)
def export_all_data(
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    migration_service: MigrationService = Depends(get_migration_service)
):
    return migration_service.export_all_data(current_user["user_id"])
