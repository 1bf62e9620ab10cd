from __future__ import annotations

import os
import tempfile
from fastapi import FastAPI
from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from myday.core import settings
from myday.db import Base
from myday.exceptions import AuthenticationRequiredError

TEST_USERS = {
    "user_test": {"email": "test@example.com", "name": "Test User"},
    "user_other": {"email": "other@example.com", "name": "Other User"},
}


def is_test_mode() -> bool:
    return os.getenv("MYDAY_TEST_MODE") == "1"


def configure_test_overrides(app: FastAPI) -> None:
    from myday.api.v1.auth import get_current_user_dep
    from myday.db import get_db as real_get_db
    from myday.models import User

    test_engine = create_engine(
        "sqlite:///./test.db",
        connect_args={"check_same_thread": False},
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)

    Base.metadata.drop_all(bind=test_engine)
    Base.metadata.create_all(bind=test_engine)

    # Preferences and local-mode data go to a throwaway directory
    settings.local_storage_dir = tempfile.mkdtemp(prefix="myday-test-")

    with TestingSessionLocal() as db:
        for user_id, info in TEST_USERS.items():
            if db.query(User).filter(User.id == user_id).first():
                continue
            db.add(User(id=user_id, email=info["email"], name=info["name"]))
        db.commit()

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    def override_current_user_dep(request: Request):
        user_id = request.headers.get("x-test-user-id") or "user_test"
        if user_id == "anonymous":
            raise AuthenticationRequiredError()
        info = TEST_USERS.get(user_id, TEST_USERS["user_test"])
        if user_id not in TEST_USERS:
            user_id = "user_test"
        return {"user_id": user_id, "email": info["email"], "name": info["name"]}

    app.dependency_overrides[real_get_db] = override_get_db
    app.dependency_overrides[get_current_user_dep] = override_current_user_dep
