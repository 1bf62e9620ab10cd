from typing import Any, Dict, Optional
from datetime import datetime
from sqlalchemy.orm import Session
from sqlalchemy import select, func

from myday.models import User, UserSettings


class UserRepository:
    """Lookups for users and their per-user settings row."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: str) -> Optional[User]:
        return self.db.get(User, user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        return self.db.execute(
            select(User).where(func.lower(User.email) == email.strip().lower())
        ).scalar_one_or_none()

    def upsert_by_email(self, email: str, name: Optional[str]) -> User:
        user = self.get_by_email(email)
        if user:
            if name:
                user.name = name
        else:
            user = User(email=email.strip().lower(), name=name)
            self.db.add(user)
        self.db.flush()
        self.db.refresh(user)
        return user

    def update(self, user: User, data: Dict[str, Any]) -> User:
        for field, value in data.items():
            if hasattr(user, field):
                setattr(user, field, value)
        self.db.flush()
        self.db.refresh(user)
        return user

    def get_settings(self, user_id: str) -> Optional[UserSettings]:
        return self.db.get(UserSettings, user_id)

    def upsert_settings(self, user_id: str, data: Dict[str, Any]) -> UserSettings:
        """Partial upsert keyed by user_id."""
        row = self.get_settings(user_id)
        if row is None:
            row = UserSettings(user_id=user_id)
            self.db.add(row)
        for field, value in data.items():
            if hasattr(row, field):
                setattr(row, field, value)
        row.updated_at = datetime.utcnow()
        self.db.flush()
        self.db.refresh(row)
        return row
