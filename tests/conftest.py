"""Shared test fixtures and configuration."""
import os
import tempfile
import pytest
from unittest.mock import AsyncMock
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

# Set test environment variables before importing app
_test_db_dir = tempfile.mkdtemp(prefix="tutor-tests-")
os.environ.setdefault("DATABASE_URL", f"sqlite+aiosqlite:///{_test_db_dir}/tutor.db")
os.environ.setdefault("RESET_DB_ON_STARTUP", "true")

from tutor.main import app
from tutor.db.models import Base
from tutor.services.companions.models import CompanionCreate
from tutor.services.voice_session import manager
from tutor.services.voice_session.client import RelayVoiceClient
from tutor.services.voice_session.controller import SessionController
from tutor.services.voice_session.models import SessionParameters
from tutor.services.voice_session.notifier import PersistenceNotifier


# Test database URL (in-memory SQLite)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
async def test_db_engine():
    """Create test database engine."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Drop all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def test_session_factory(test_db_engine):
    """Session factory bound to the test engine."""
    return async_sessionmaker(
        test_db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    """Create test database session."""
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def companion_data():
    """Valid companion form data."""
    return {
        "name": "Neura the Brainy Explorer",
        "subject": "science",
        "topic": "Neural networks of the brain",
        "voice": "female",
        "style": "casual",
        "duration": 20,
    }


@pytest.fixture
def companion_create(companion_data):
    """Validated companion input."""
    return CompanionCreate(**companion_data)


@pytest.fixture
def user_headers():
    """Headers identifying the test user."""
    return {"X-User-Id": "user_123"}


@pytest.fixture
def test_client():
    """Create FastAPI test client; startup empties the test database."""
    with TestClient(app) as client:
        yield client
    manager._sessions.clear()


@pytest.fixture
def session_parameters():
    """Parameters for a session with a test companion."""
    return SessionParameters(
        companion_id="companion-1",
        subject="maths",
        topic="Derivatives and Integrals",
        name="Countsy, the Number Wizard",
        style="formal",
        voice="male",
        user_name="Ada",
    )


@pytest.fixture
def voice_client():
    """Voice client double driven by emit()."""
    return RelayVoiceClient()


@pytest.fixture
def recorder():
    """Mock session history recorder."""
    return AsyncMock()


@pytest.fixture
async def controller(voice_client, recorder):
    """Activated session controller, closed after the test."""
    controller = SessionController(
        voice_client, PersistenceNotifier(recorder), session_id="test-session"
    )
    controller.activate()
    yield controller
    controller.close()


@pytest.fixture
def emit():
    """Deliver a voice client event and wait until it is applied."""
    async def _emit(controller: SessionController, event: str, payload=None) -> None:
        controller.client.emit(event, payload)
        await controller.settle()
    return _emit


# Pytest configuration
def pytest_configure(config):
    """Configure pytest."""
    config.addinivalue_line(
        "markers", "asyncio: mark test as an asyncio test"
    )
