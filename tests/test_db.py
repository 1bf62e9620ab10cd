from sqlalchemy import text

from myday.db import get_db, get_db_context


def test_db_context_yields_working_session():
    with get_db_context() as db:
        assert db.execute(text("SELECT 1")).scalar() == 1


def test_get_db_dependency_closes_session():
    dependency = get_db()
    db = next(dependency)
    assert db.execute(text("SELECT 1")).scalar() == 1
    dependency.close()
