"""Shared fixtures for API tests."""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from planner.api.main import create_app
from planner.db.database import SessionLocal
from planner.db.models import Job, Mover
from planner.models import JobStatus, JobType


# --- Test API Key Fixture ---
@pytest.fixture
def test_api_key():
    """Valid API key for testing."""
    return "test-api-key"

@pytest.fixture
def api_headers(test_api_key):
    return {"api-key": test_api_key}

# --- Mock Settings Fixture ---
@pytest.fixture
def mock_settings(test_api_key):
    """Mock settings for API tests."""
    return {
        "database_url": "sqlite:///:memory:",
        "api_keys": [test_api_key],
        "log_level": "INFO",
        "average_speed_kmh": 40.0,
        "base_job_minutes": 30.0,
        "job_minutes_per_m3": 15.0,
        "schedule_timezone": "UTC",
        "require_full_slot": False,
    }

# --- Database Session Fixture ---
@pytest.fixture
def db_session():
    """A session on the in-memory test database, emptied before each test."""
    session = SessionLocal()
    session.query(Job).delete()
    session.query(Mover).delete()
    session.commit()
    try:
        yield session
    finally:
        session.close()

# --- Test Client Fixture ---
@pytest.fixture
def client(mock_settings, db_session):
    """
    Create a FastAPI TestClient with mocked settings on the in-memory database.
    """
    with patch("planner.api.deps.get_settings", return_value=mock_settings), \
            patch("planner.api.routes.get_settings", return_value=mock_settings):
        app = create_app()
        with TestClient(app) as test_client:
            yield test_client


@pytest.fixture
def next_monday():
    """10:00 UTC on the next Monday strictly after today."""
    now = datetime.now(timezone.utc)
    days_ahead = (7 - now.weekday()) % 7 or 7
    return (now + timedelta(days=days_ahead)).replace(hour=10, minute=0, second=0, microsecond=0)


@pytest.fixture
def mover(db_session):
    """A mover available Monday 09:00-17:00."""
    mover = Mover(id=1, name="Test Mover", availability={"MON": [["09:00", "17:00"]]})
    db_session.add(mover)
    db_session.commit()
    return mover


@pytest.fixture
def mover_without_availability(db_session):
    mover = Mover(id=2, name="New Mover", availability=None)
    db_session.add(mover)
    db_session.commit()
    return mover


def make_db_job(job_id, scheduled_time, pickup=(49.2606, -123.2460), dropoff=(49.2620, -123.2480),
                volume=1.0, price=60.0, status=JobStatus.AVAILABLE):
    return Job(
        id=job_id,
        order_id=100 + job_id,
        student_id=200 + job_id,
        job_type=JobType.STORAGE,
        status=status,
        volume=volume,
        price=price,
        pickup_lat=pickup[0],
        pickup_lon=pickup[1],
        pickup_address="2205 Lower Mall, Vancouver",
        dropoff_lat=dropoff[0],
        dropoff_lon=dropoff[1],
        dropoff_address="4700 Kingsway, Burnaby",
        scheduled_time=scheduled_time,
    )


@pytest.fixture
def monday_job(db_session, next_monday):
    """One valid job next Monday at 10:00 near the mover."""
    job = make_db_job(1, next_monday)
    db_session.add(job)
    db_session.commit()
    return job


@pytest.fixture
def make_job():
    """Factory for Job rows; tests add and commit them."""
    return make_db_job
