"""Session endpoints and the authentication dependency."""
from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.orm import Session
from typing import Any, Dict

from myday.core import settings, get_logger
from myday.db import get_db
from myday.exceptions import AuthenticationRequiredError, NotFoundError
from myday.repositories import UserRepository
from myday.schemas import DevLoginRequest, UserOut
from myday.services.auth import SessionService

logger = get_logger(__name__)
router = APIRouter()

# Global session service instance (initialized lazily)
session_service = None


def get_session_service() -> SessionService:
    """Get or create session service instance."""
    global session_service
    if session_service is None:
        session_service = SessionService()
    return session_service


# Dependency for authenticated routes
def get_current_user_dep(request: Request) -> Dict[str, Any]:
    """Dependency to get current authenticated user with user_id."""
    token = request.cookies.get(settings.session_cookie_name)
    if not token:
        raise AuthenticationRequiredError()

    token_data = get_session_service().verify_session_token(token)
    if not token_data or "user_id" not in token_data:
        raise AuthenticationRequiredError("Invalid or expired session")

    return {
        "user_id": token_data["user_id"],
        "email": token_data.get("email"),
        "name": token_data.get("name"),
    }


@router.post("/dev-login")
def dev_login(payload: DevLoginRequest, response: Response, db: Session = Depends(get_db)):
    """Development-only login endpoint for local testing."""
    if not settings.dev_login_enabled:
        raise NotFoundError("Route", "dev-login")

    session_svc = get_session_service()
    session_token = session_svc.create_dev_session_token(db, payload.email, payload.name)
    response.set_cookie(
        key=settings.session_cookie_name,
        value=session_token,
        **session_svc.get_cookie_settings()
    )

    logger.info(f"Dev login successful for: {payload.email}")
    return {
        "status": "success",
        "message": "Development login successful",
        "user": {"email": payload.email, "name": payload.name},
    }


@router.post("/logout")
def logout(response: Response):
    """Logout user by clearing session cookie."""
    cookie_settings = get_session_service().get_cookie_settings()
    cookie_settings["max_age"] = 0

    response.set_cookie(
        key=settings.session_cookie_name,
        value="",
        **cookie_settings
    )

    logger.info("User logged out")
    return {"status": "logged_out"}


@router.get("/me", response_model=UserOut)
def get_current_user(
    current_user: Dict[str, Any] = Depends(get_current_user_dep),
    db: Session = Depends(get_db)
):
    """Get current authenticated user information from database."""
    user = UserRepository(db).get(current_user["user_id"])
    if user:
        return UserOut(id=user.id, email=user.email, name=user.name)

    return UserOut(
        id=current_user["user_id"],
        email=current_user.get("email") or "",
        name=current_user.get("name"),
    )
