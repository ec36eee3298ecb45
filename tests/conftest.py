"""Test configuration and fixtures.

This module provides test configuration, database setup, fixtures,
and test data factories for testing the user record store.
"""

import pytest
from typing import Generator
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, Session, create_engine
from sqlmodel.pool import StaticPool

from conference_users.config import Settings
from conference_users.database import ConnectionProvider, enable_sqlite_foreign_keys
from conference_users.models import Event, Report, Role, User, UserCreate, UserHasEvent
from conference_users.repositories import UserRecordStore


# Test database configuration
TEST_DATABASE_URL = "sqlite:///:memory:"
UNREACHABLE_DATABASE_URL = "sqlite:////nonexistent-directory/conferences.db"


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """Create test settings with test database configuration."""
    return Settings(
        database_url=TEST_DATABASE_URL,
        debug=True,
        log_level="DEBUG",
    )


@pytest.fixture(scope="function")
def test_engine() -> Generator[Engine, None, None]:
    """Create test database engine with in-memory SQLite."""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False  # Set to True for SQL debugging
    )
    enable_sqlite_foreign_keys(engine)

    # Create all tables
    SQLModel.metadata.create_all(engine)

    yield engine

    # Clean up
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope="function")
def provider(test_engine: Engine) -> ConnectionProvider:
    """Create connection provider over the test engine."""
    return ConnectionProvider(test_engine)


@pytest.fixture(scope="function")
def user_store(provider: ConnectionProvider) -> UserRecordStore:
    """Create UserRecordStore instance for testing."""
    return UserRecordStore(provider)


@pytest.fixture(scope="function")
def unreachable_store() -> Generator[UserRecordStore, None, None]:
    """Create a store whose database cannot be opened."""
    engine = create_engine(UNREACHABLE_DATABASE_URL)
    yield UserRecordStore(ConnectionProvider(engine))
    engine.dispose()


def _persist(engine: Engine, *rows: SQLModel) -> None:
    """Insert rows in a short-lived session and load their generated ids."""
    with Session(engine, expire_on_commit=False) as session:
        for row in rows:
            session.add(row)
        session.commit()
        for row in rows:
            session.refresh(row)


@pytest.fixture(scope="function")
def sample_user_data() -> UserCreate:
    """Create sample user data for testing."""
    return UserCreate(
        email="test@example.com",
        password="5f4dcc3b5aa765d61d8327deb882cf99",
        name="Test",
        surname="User",
    )


@pytest.fixture(scope="function")
def test_user(test_engine: Engine, sample_user_data: UserCreate) -> User:
    """Create a test user in the database."""
    user = User(**sample_user_data.model_dump())
    _persist(test_engine, user)
    return user


@pytest.fixture(scope="function")
def multiple_test_users(test_engine: Engine) -> list[User]:
    """Create users with different names and roles in the database."""
    users = [
        User(email="anna@example.com", password="h1", name="Anna", surname="Zorn",
             role_id=Role.VISITOR.value),
        User(email="boris@example.com", password="h2", name="Boris", surname="Young",
             role_id=Role.SPEAKER.value),
        User(email="carla@example.com", password="h3", name="Carla", surname="Xu",
             role_id=Role.VISITOR.value),
        User(email="dmytro@example.com", password="h4", name="Dmytro", surname="Wolf",
             role_id=Role.ORGANIZER.value),
    ]
    _persist(test_engine, *users)
    return users


@pytest.fixture(scope="function")
def test_event(test_engine: Engine) -> Event:
    """Create a test event in the database."""
    event = Event(title="Python Conference")
    _persist(test_engine, event)
    return event


@pytest.fixture(scope="function")
def other_event(test_engine: Engine) -> Event:
    """Create a second event in the database."""
    event = Event(title="Data Summit")
    _persist(test_engine, event)
    return event


@pytest.fixture(scope="function")
def event_participants(
    test_engine: Engine, test_event: Event, multiple_test_users: list[User]
) -> dict[str, list[User]]:
    """Register visitors and assign a speaker to the test event.

    Anna and Carla are registered visitors; Boris speaks twice at the event.
    """
    anna, boris, carla, _ = multiple_test_users
    _persist(
        test_engine,
        UserHasEvent(user_id=anna.id, event_id=test_event.id),
        UserHasEvent(user_id=carla.id, event_id=test_event.id),
        Report(topic="Typing at scale", event_id=test_event.id, speaker_id=boris.id),
        Report(topic="Packaging", event_id=test_event.id, speaker_id=boris.id),
        Report(topic="Unassigned talk", event_id=test_event.id),
    )
    return {"visitors": [anna, carla], "speakers": [boris]}


class TestDataFactory:
    """Factory class for creating test data."""

    @staticmethod
    def create_user_data(
        email: str = "factory@example.com",
        password: str = "hashed-password",
        name: str = "Factory",
        surname: str = "User",
    ) -> UserCreate:
        """Create user data with customizable fields."""
        return UserCreate(email=email, password=password, name=name, surname=surname)

    @staticmethod
    def create_user(
        email: str = "factory@example.com",
        password: str = "hashed-password",
        name: str = "Factory",
        surname: str = "User",
    ) -> User:
        """Create an unsaved User table instance."""
        return User(email=email, password=password, name=name, surname=surname)


@pytest.fixture(scope="function")
def test_data_factory() -> TestDataFactory:
    """Provide test data factory."""
    return TestDataFactory()
