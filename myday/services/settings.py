from typing import Optional, Dict, Any
from sqlalchemy.orm import Session

from myday.repositories import UserRepository
from myday.schemas import (
    Location,
    PreferencesOut,
    ProfileOut,
    UserSettingsOut,
    UserSettingsUpdate,
)
from myday.exceptions import ConflictError, NotFoundError, ValidationError
from myday.storage.adapter import StorageMode
from .base import BaseService


class SettingsService(BaseService):
    """Service for user settings, profile and UI preferences."""

    def __init__(self, db: Session, storage_mode: Optional[StorageMode] = None):
        super().__init__(db, storage_mode)
        self.user_repo = UserRepository(db)

    def _to_settings(self, row) -> UserSettingsOut:
        if row is None:
            return UserSettingsOut()
        return UserSettingsOut(
            theme=row.theme,
            dashboard_layout=row.dashboard_layout,
            notifications=row.notifications_enabled,
            location=Location.model_validate(row.location) if row.location else None,
        )

    def get_settings(self, user_id: str) -> UserSettingsOut:
        """Stored settings, or the defaults when the user has none yet."""
        self.logger.debug(f"Fetching settings for user {user_id}")
        return self._to_settings(self.user_repo.get_settings(user_id))

    def save_settings(self, settings_in: UserSettingsUpdate, user_id: str) -> UserSettingsOut:
        """Partial upsert; fields left out keep their stored value."""
        try:
            self.logger.info(f"Saving settings for user {user_id}")

            values = settings_in.model_dump(exclude_unset=True)
            data: Dict[str, Any] = {}
            if values.get("theme") is not None:
                data["theme"] = values["theme"]
            if values.get("dashboard_layout") is not None:
                data["dashboard_layout"] = values["dashboard_layout"]
            if values.get("notifications") is not None:
                data["notifications_enabled"] = values["notifications"]
            if "location" in values:
                location = settings_in.location
                data["location"] = location.model_dump(by_alias=True, exclude_none=True) if location else None

            row = self.user_repo.upsert_settings(user_id, data)
            self.commit()

            if "dashboard_layout" in data:
                self.preferences(user_id).set_dashboard_layout(data["dashboard_layout"])

            self.logger.info(f"Settings saved for user {user_id}")
            return self._to_settings(row)

        except Exception as e:
            self.rollback()
            self.logger.error(f"Failed to save settings: {str(e)}")
            raise

    def _get_user(self, user_id: str):
        user = self.user_repo.get(user_id)
        if not user:
            raise NotFoundError("User", user_id)
        return user

    def get_profile(self, user_id: str) -> ProfileOut:
        user = self._get_user(user_id)
        return ProfileOut(username=user.username, email=user.email, avatar_emoji=user.avatar_emoji)

    def update_profile(self, user_id: str, update_data: Dict[str, Any]) -> ProfileOut:
        try:
            self.logger.info(f"Updating profile for user {user_id}")

            user = self._get_user(user_id)
            if "email" in update_data:
                email = (update_data["email"] or "").strip().lower()
                if "@" not in email:
                    raise ValidationError("A valid email address is required")
                other = self.user_repo.get_by_email(email)
                if other and other.id != user_id:
                    raise ConflictError(f"Email '{email}' is already in use")
                update_data["email"] = email
            if "username" in update_data and update_data["username"] is not None:
                update_data["username"] = update_data["username"].strip() or None

            user = self.user_repo.update(user, update_data)
            self.commit()

            return ProfileOut(username=user.username, email=user.email, avatar_emoji=user.avatar_emoji)

        except Exception as e:
            self.rollback()
            self.logger.error(f"Failed to update profile: {str(e)}")
            raise

    def get_preferences(self, user_id: str) -> PreferencesOut:
        prefs = self.preferences(user_id)
        return PreferencesOut(
            task_order=prefs.task_order(),
            dashboard_layout=prefs.dashboard_layout(),
            is_first_time_user=prefs.is_first_time_user(),
        )

    def is_first_time_user(self, user_id: str) -> bool:
        return self.preferences(user_id).is_first_time_user()

    def mark_onboarding_complete(self, user_id: str) -> PreferencesOut:
        self.logger.info(f"Onboarding complete for user {user_id}")
        self.preferences(user_id).mark_onboarding_complete()
        return self.get_preferences(user_id)
