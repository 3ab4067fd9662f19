# tests/conftest.py
"""Shared fixtures: in-memory SQLite sessions and fake gateways."""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

# Must be set before app.config is imported anywhere
os.environ["DATABASE_URL"] = "sqlite://"

import uuid
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from app.database import create_tables
from app.models.user import User, UserRole


class RecordingGateway:
    """Stands in for ConnectionManager; keeps every published event."""

    def __init__(self):
        self.global_events = []
        self.user_events = []

    async def broadcast_global(self, event, payload):
        self.global_events.append((event, payload))
        return 1

    async def send_to_user(self, user_id, event, payload):
        self.user_events.append((user_id, event, payload))
        return 1

    def names(self):
        return [name for name, _ in self.global_events]


class FailingGateway:
    async def broadcast_global(self, event, payload):
        raise ConnectionError("socket server down")

    async def send_to_user(self, user_id, event, payload):
        raise ConnectionError("socket server down")


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_tables(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def make_user(db):
    def _make(first_name="Test", last_name="User", role=UserRole.STUDENT, qr_code=None):
        user = User(
            email=f"{uuid.uuid4().hex[:8]}@example.edu",
            first_name=first_name,
            last_name=last_name,
            role=role,
            qr_code=qr_code or f"QR-{uuid.uuid4().hex}",
        )
        db.add(user)
        db.commit()
        return user
    return _make


@pytest.fixture
def gateway():
    return RecordingGateway()


@pytest.fixture
def failing_gateway():
    return FailingGateway()


@pytest.fixture
def file_session_factory(tmp_path):
    """Sessions on separate connections to one SQLite file, for interleaving tests."""
    engine = create_engine(f"sqlite:///{tmp_path / 'occupancy.db'}")
    create_tables(bind=engine)
    yield sessionmaker(bind=engine, autocommit=False, autoflush=False)
    engine.dispose()
