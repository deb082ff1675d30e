"""Shared test configuration: a throwaway SQLite database for integration tests"""
import os
import tempfile
from pathlib import Path

import pytest

# Must be set before app.database is imported
TEST_DB_PATH = Path(tempfile.gettempdir()) / f"student_records_test_{os.getpid()}.db"
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{TEST_DB_PATH}"
os.environ["AUTO_CREATE_TABLES"] = "true"


def remove_test_database():
    if TEST_DB_PATH.exists():
        TEST_DB_PATH.unlink()


@pytest.fixture(scope="function")
async def db_session():
    """Fresh database with tables created, and a session on it"""
    from app.database import AsyncSessionLocal, init_db

    remove_test_database()
    await init_db()

    async with AsyncSessionLocal() as session:
        yield session

    remove_test_database()


@pytest.fixture(scope="function")
def client():
    """TestClient over a fresh database; lifespan creates the tables"""
    from fastapi.testclient import TestClient
    from main import app

    remove_test_database()
    with TestClient(app) as test_client:
        yield test_client
    remove_test_database()
