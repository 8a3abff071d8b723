"""Shared fixtures: a throwaway SQLite file per test, the app, and an HTTP client."""

from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from task_manager import accounts, auth
from task_manager.config import Settings
from task_manager.database import build_engine, create_db_and_tables
from task_manager.main import create_app


@pytest.fixture(autouse=True)
def fast_password_hashing(monkeypatch):
    # Minimum bcrypt cost keeps the suite quick; hashes stay valid bcrypt
    monkeypatch.setattr(auth, "ROUNDS", 4)


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(database_url=f"sqlite:///{tmp_path / 'tasks.db'}")


@pytest.fixture()
def engine(settings: Settings):
    engine = build_engine(settings)
    create_db_and_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture()
def alice(session) -> dict:
    """A registered user, as the {id, username} identity the API returns."""
    return accounts.register(session, "alice", "pw1")


@pytest.fixture()
def app(settings: Settings):
    return create_app(settings)


@pytest.fixture()
def client(app):
    # Entering the context runs the startup hook that creates the tables
    with TestClient(app) as c:
        yield c
