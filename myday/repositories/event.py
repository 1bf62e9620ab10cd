from sqlalchemy.orm import Session

from myday.models import Event
from myday.schemas import EventOut
from .base import BaseRepository


class EventRepository(BaseRepository[Event, EventOut]):
    """Repository for calendar events."""

    id_prefix = "event"
    schema = EventOut

    def __init__(self, db: Session):
        super().__init__(db, Event)
