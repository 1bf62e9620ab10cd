import pytest

from myday.exceptions import ConflictError, ValidationError
from myday.schemas import Location, UserSettingsUpdate
from myday.services import SettingsService


class TestSettingsService:
    """Test settings, profile and preferences."""

    def test_defaults_without_saved_settings(self, test_db, users):
        alice, _ = users
        settings = SettingsService(test_db).get_settings(alice.id)

        assert settings.theme == "purple"
        assert settings.dashboard_layout == "uniform"
        assert settings.notifications is True
        assert settings.location is None

    def test_partial_save_keeps_other_fields(self, test_db, users):
        alice, _ = users
        service = SettingsService(test_db)
        service.save_settings(
            UserSettingsUpdate(theme="ocean", location=Location(city="Lisbon", country="PT")), alice.id
        )

        saved = service.save_settings(UserSettingsUpdate(dashboard_layout="masonry"), alice.id)

        assert saved.theme == "ocean"
        assert saved.dashboard_layout == "masonry"
        assert saved.location.city == "Lisbon"
        assert service.get_preferences(alice.id).dashboard_layout == "masonry"

    def test_clear_location(self, test_db, users):
        alice, _ = users
        service = SettingsService(test_db)
        service.save_settings(UserSettingsUpdate(location=Location(zip_code="10001")), alice.id)

        saved = service.save_settings(UserSettingsUpdate(location=None), alice.id)

        assert saved.location is None

    def test_profile_update(self, test_db, users):
        alice, _ = users
        service = SettingsService(test_db)

        profile = service.update_profile(alice.id, {"username": " ali ", "email": "ALICE@Example.org"})

        assert profile.username == "ali"
        assert profile.email == "alice@example.org"

    def test_profile_email_conflict(self, test_db, users):
        alice, bob = users
        service = SettingsService(test_db)

        with pytest.raises(ConflictError):
            service.update_profile(alice.id, {"email": bob.email})
        with pytest.raises(ValidationError):
            service.update_profile(alice.id, {"email": "not-an-email"})

    def test_onboarding(self, test_db, users):
        alice, _ = users
        service = SettingsService(test_db)
        assert service.is_first_time_user(alice.id) is True

        prefs = service.mark_onboarding_complete(alice.id)

        assert prefs.is_first_time_user is False
        assert service.is_first_time_user(alice.id) is False
