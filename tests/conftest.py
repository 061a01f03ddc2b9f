# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from typing import Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from mirutasu.app import create_app
from mirutasu.config import Settings

from .helpers import signup


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    """Settings against a throwaway SQLite file; bcrypt at its cheapest cost."""
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'mirutasu-test.db'}",
        bcrypt_rounds=4,
        cors_origins=["http://testserver"],
    )


@pytest.fixture()
def app(settings: Settings) -> FastAPI:
    return create_app(settings)


@pytest.fixture()
def db(app: FastAPI) -> Iterator[Session]:
    session = app.state.SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def other_client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def user(client: TestClient) -> dict:
    """Signed-up user; ``client`` now carries their session cookie."""
    return signup(client, "alice")


@pytest.fixture()
def other_user(other_client: TestClient) -> dict:
    return signup(other_client, "bobby")
