import os
import sys

import pytest

# Enable application test-mode overrides (isolated DB + header-selected user)
os.environ.setdefault("MYDAY_TEST_MODE", "1")

# Ensure project root is on sys.path so `import myday` works in all environments
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402

from myday.core import settings  # noqa: E402
from myday.db import Base  # noqa: E402
from myday.models import User  # noqa: E402


@pytest.fixture(autouse=True)
def local_storage_dir(tmp_path, monkeypatch):
    """Point preferences and local-mode data at a per-test directory."""
    path = tmp_path / "local_data"
    monkeypatch.setattr(settings, "local_storage_dir", str(path))
    return path


@pytest.fixture
def test_db():
    """Create an in-memory SQLite database for testing."""
    engine = create_engine("sqlite:///:memory:", echo=False)
    Base.metadata.create_all(engine)

    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = SessionLocal()

    yield session

    session.close()


@pytest.fixture
def users(test_db):
    """Two users who can see nothing of each other's data."""
    alice = User(id="user_alice", email="alice@example.com", name="Alice")
    bob = User(id="user_bob", email="bob@example.com", name="Bob")
    test_db.add_all([alice, bob])
    test_db.commit()
    return alice, bob


@pytest.fixture
def sample_task_data():
    """Sample task data for testing."""
    return {
        "name": "Morning walk",
        "description": "Around the block",
        "category": "Health",
        "weightage": 6,
        "frequency": "daily",
    }
