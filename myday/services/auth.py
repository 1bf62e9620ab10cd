"""Session token service."""
import jwt
from typing import Optional, Dict, Any
from datetime import datetime, timedelta
from sqlalchemy.orm import Session

from myday.core import settings, get_logger
from myday.exceptions import ValidationError
from myday.repositories import UserRepository

logger = get_logger(__name__)

SESSION_DAYS = 7


class SessionService:
    """Signs and verifies the HS256 session cookie.

    Identity comes from an upstream provider; this service only trusts the
    token it issued.
    """

    def create_session_token(self, user_id: str, email: str, name: Optional[str]) -> str:
        """Create a JWT session token for the user."""
        if not settings.jwt_secret:
            raise ValidationError("JWT_SECRET is not configured")

        payload = {
            "user_id": user_id,
            "email": email,
            "name": name,
            "exp": datetime.utcnow() + timedelta(days=SESSION_DAYS),
        }
        return jwt.encode(payload, settings.jwt_secret, algorithm="HS256")

    def create_dev_session_token(self, db: Session, email: str, name: str) -> str:
        """Upsert a user by email and sign a session for them (development only)."""
        user = UserRepository(db).upsert_by_email(email, name)
        db.commit()
        logger.info(f"Dev session issued for user {user.id}")
        return self.create_session_token(user.id, user.email, user.name)

    def get_cookie_settings(self) -> Dict[str, Any]:
        """Get cookie settings appropriate for the current environment."""
        is_local = settings.environment.lower() in ["development", "local"]

        cookie_settings = {
            "httponly": True,
            "max_age": SESSION_DAYS * 24 * 60 * 60,
            "path": "/",
        }

        if is_local:
            # Plain HTTP: Secure cookies would be dropped by the browser
            cookie_settings["samesite"] = "lax"
            cookie_settings["secure"] = False
        else:
            cookie_settings["samesite"] = "none"
            cookie_settings["secure"] = True
            if settings.session_cookie_domain:
                cookie_settings["domain"] = settings.session_cookie_domain

        return cookie_settings

    def verify_session_token(self, token: str) -> Optional[Dict[str, Any]]:
        """Verify and decode a session token."""
        if not settings.jwt_secret:
            return None

        try:
            return jwt.decode(token, settings.jwt_secret, algorithms=["HS256"])
        except jwt.ExpiredSignatureError:
            logger.warning("Session token expired")
            return None
        except jwt.InvalidTokenError:
            logger.warning("Invalid session token")
            return None
