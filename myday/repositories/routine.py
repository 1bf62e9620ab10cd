from typing import List
from sqlalchemy.orm import Session
from sqlalchemy import select

from myday.models import Routine
from myday.schemas import RoutineOut
from .base import BaseRepository


class RoutineRepository(BaseRepository[Routine, RoutineOut]):
    """Repository for routines (named bundles of task ids)."""

    id_prefix = "routine"
    schema = RoutineOut

    def __init__(self, db: Session):
        super().__init__(db, Routine)

    def list_predefined(self, user_id: str) -> List[Routine]:
        return list(self.db.execute(
            select(Routine).where(Routine.user_id == user_id, Routine.is_pre_defined.is_(True))
        ).scalars().all())
