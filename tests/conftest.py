"""Shared test fixtures."""

import json
from datetime import UTC, date, datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

from courtside.auth import UserSession
from courtside.core.database import get_session
from courtside.engine.orchestrator import SyncOrchestrator
from courtside.main import app
from courtside.models import Game, Participant, Profile
from courtside.store.games import GameStore
from courtside.store.policy import WritePolicy

BASE_JOIN_TIME = datetime(2020, 1, 1, 9, 0, tzinfo=UTC)
GAME_DATE = date(2026, 5, 2)


@pytest.fixture(name="engine")
def engine_fixture():
    """Create an in-memory SQLite database for testing."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="session")
def session_fixture(engine):
    """Create a new database session for each test."""
    with Session(engine) as session:
        yield session


@pytest.fixture(name="store")
def store_fixture(session: Session) -> GameStore:
    """A store that enforces the row-level write policy."""
    return GameStore(session, WritePolicy(enforce=True))


@pytest.fixture(name="orchestrator")
def orchestrator_fixture(store: GameStore) -> SyncOrchestrator:
    return SyncOrchestrator(store)


@pytest.fixture(name="client")
def client_fixture(session: Session):
    """Create a test client with the test database session."""

    def get_session_override():
        return session

    app.dependency_overrides[get_session] = get_session_override
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture(name="user")
def user_fixture():
    """Build signed-in sessions by user id."""

    def _user(user_id: str) -> UserSession:
        return UserSession(user_id)

    return _user


@pytest.fixture(name="seed_game")
def seed_game_fixture(session: Session):
    """
    Insert a game and its participants directly, bypassing the policy.

    Players join one minute apart in the order given. ``votes`` defaults to
    everyone voting for the primary time. ``candidate_times`` may be a list
    (stored as JSON) or a raw string stored as-is.
    """

    def _seed(
        players: list[str],
        primary_time: str = "18:00",
        candidate_times=None,
        votes: list[str | None] | None = None,
        status: str = "scheduled",
        tentative: bool | None = None,
        host_id: str | None = None,
    ) -> Game:
        if isinstance(candidate_times, list):
            stored_times = json.dumps(candidate_times)
        else:
            stored_times = candidate_times

        game = Game(
            game_date=GAME_DATE,
            primary_time=primary_time,
            candidate_times=stored_times,
            tentative=bool(candidate_times) if tentative is None else tentative,
            status=status,
            host_id=host_id if host_id is not None else (players[0] if players else None),
        )
        session.add(game)
        session.flush()

        for i, user_id in enumerate(players):
            session.add(
                Participant(
                    game_id=game.id,
                    user_id=user_id,
                    joined_at=BASE_JOIN_TIME + timedelta(minutes=i),
                    voted_time=votes[i] if votes is not None else primary_time,
                )
            )
        session.commit()
        session.refresh(game)
        return game

    return _seed


@pytest.fixture(name="profiles")
def profiles_fixture(session: Session) -> list[Profile]:
    """Profiles for alice and bob only; other players have none."""
    profiles = [
        Profile(user_id="alice", display_name="Alice", avatar_url="https://example.com/a.png"),
        Profile(user_id="bob", display_name="Bob"),
    ]
    for profile in profiles:
        session.add(profile)
    session.commit()
    return profiles

