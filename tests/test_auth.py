import pytest

from myday.core import settings
from myday.exceptions import ValidationError
from myday.repositories import UserRepository
from myday.services.auth import SessionService


@pytest.fixture
def jwt_secret(monkeypatch):
    monkeypatch.setattr(settings, "jwt_secret", "unit-test-secret")
    return "unit-test-secret"


class TestSessionService:
    def test_token_round_trip(self, jwt_secret):
        service = SessionService()
        token = service.create_session_token("user_1", "one@example.com", "One")

        data = service.verify_session_token(token)

        assert data["user_id"] == "user_1"
        assert data["email"] == "one@example.com"

    def test_tampered_token_is_rejected(self, jwt_secret):
        service = SessionService()
        token = service.create_session_token("user_1", "one@example.com", "One")

        assert service.verify_session_token(token + "x") is None

    def test_missing_secret(self, monkeypatch):
        monkeypatch.setattr(settings, "jwt_secret", None)
        with pytest.raises(ValidationError):
            SessionService().create_session_token("user_1", "one@example.com", "One")

    def test_dev_session_upserts_user(self, jwt_secret, test_db):
        service = SessionService()

        first = service.verify_session_token(service.create_dev_session_token(test_db, "dev@example.com", "Dev"))
        second = service.verify_session_token(service.create_dev_session_token(test_db, "dev@example.com", "Dev"))

        assert first["user_id"] == second["user_id"]
        assert UserRepository(test_db).get_by_email("dev@example.com").name == "Dev"

    def test_local_cookies_are_not_secure(self, monkeypatch):
        monkeypatch.setattr(settings, "environment", "development")
        cookie = SessionService().get_cookie_settings()
        assert cookie["secure"] is False
        assert cookie["httponly"] is True
