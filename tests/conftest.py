"""Pytest fixtures and configuration for planmyday tests."""

import pytest
from datetime import datetime, timezone
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient
import uuid

from planmyday.database.database import Base, get_db
from planmyday.database.repository import TaskRepository
from planmyday.database.task_group_repository import TaskGroupRepository
from planmyday.database.user_repository import UserRepository
from planmyday.models.schedule_hours import ScheduleHours
from planmyday.models.task import TaskStatus


# Use in-memory SQLite database for tests
TEST_DATABASE_URL = "sqlite:///:memory:"

# A fixed Monday keeps weekday lookups deterministic
BASE_TIME = datetime(2024, 1, 1, 8, 0, tzinfo=timezone.utc)


@pytest.fixture
def test_user_id():
    """Test user ID for multi-user testing."""
    return "test-user-123"


@pytest.fixture
def test_user(test_user_id):
    """Test user, awake all day in UTC."""
    from planmyday.models.user import User
    return User(
        id=test_user_id,
        email="test@example.com",
        name="Test User",
        timezone="UTC",
        awake_hours=ScheduleHours.every_day(0, 24),
        created_at=BASE_TIME,
        updated_at=BASE_TIME,
    )


@pytest.fixture(scope="function")
def db_session(test_user):
    """Create a database session for testing.

    Uses an in-memory SQLite database that is created fresh for each test.
    Also creates the test user in the database.
    """
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )

    @event.listens_for(engine, "connect")
    def set_sqlite_pragmas(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    # Required for foreign key constraints
    UserRepository(session).create_or_update(test_user)

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def task_repository(db_session: Session):
    """Create a TaskRepository instance for testing."""
    return TaskRepository(db_session)


@pytest.fixture
def group_repository(db_session: Session):
    return TaskGroupRepository(db_session)


@pytest.fixture
def sample_task_base(test_user_id):
    """Base task data for creating test tasks.

    Returns a dict with default task attributes that can be overridden.
    """
    return {
        "id": str(uuid.uuid4()),
        "user_id": test_user_id,
        "title": "Test Task",
        "description": None,
        "status": TaskStatus.PENDING,
        "priority": 3,
        "duration": 30,
        "scheduled_start": None,
        "scheduled_end": None,
        "due_date": None,
        "locked": False,
        "group_id": None,
        "parent_task_id": None,
        "ignored": False,
        "created_at": BASE_TIME,
        "updated_at": BASE_TIME,
    }


@pytest.fixture
def sample_group_base(test_user_id):
    """Base group data for creating test groups."""
    return {
        "id": "group-work",
        "user_id": test_user_id,
        "name": "Work",
        "parent_group_id": None,
        "is_parent_group": False,
        "auto_schedule_enabled": False,
        "auto_schedule_hours": None,
        "created_at": BASE_TIME,
        "updated_at": BASE_TIME,
    }


@pytest.fixture
def test_client(db_session: Session, test_user):
    """Create a FastAPI test client with overridden database dependency and authentication."""
    from planmyday.api.app import app
    from planmyday.auth.dependencies import get_current_user

    # Override the get_db dependency to use our test database session
    def override_get_db():
        try:
            yield db_session
        finally:
            pass  # Don't close the session here, let the fixture handle it

    # Override authentication to return test user
    def override_get_current_user():
        return test_user

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user] = override_get_current_user

    with TestClient(app) as client:
        yield client

    # Clean up dependency overrides
    app.dependency_overrides.clear()
