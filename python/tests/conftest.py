"""Shared fixtures.

Database:
- DATABASE_URL selects a PostgreSQL test database; without it the suite
  runs against in-memory SQLite. The schema comes from the ORM metadata.
- db_session: savepoint-isolated session, rolled back after each test.
- direct_db: committing sessions on separate connections, for locking and
  concurrency tests. PostgreSQL only.

HTTP:
- app / api_client: full app with JWT auth (test secret) whose get_db is
  bound to db_session, so rows created through factories are visible to
  requests and vanish with the test.
"""

import os
import sys
from collections.abc import Generator
from pathlib import Path

# Repo root on sys.path so apps.api.main is importable
_repo_root = Path(__file__).parent.parent.parent
if str(_repo_root) not in sys.path:
    sys.path.insert(0, str(_repo_root))

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import Engine
from sqlalchemy.orm import Session

from photoreview.app import create_app
from photoreview.auth.verifier import JwtVerifier
from photoreview.config import clear_settings_cache
from photoreview.db.engine import create_db_engine
from photoreview.db.models import Base
from photoreview.db.session import get_db
from tests.helpers import TEST_JWT_SECRET
from tests.utils.db import DirectSessionManager, savepoint_session

IN_MEMORY_SQLITE = "sqlite+pysqlite:///:memory:"


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_db_engine(os.environ.get("DATABASE_URL") or IN_MEMORY_SQLITE)
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(engine: Engine) -> Generator[Session, None, None]:
    """Savepoint-isolated session; nothing it writes outlives the test."""
    with savepoint_session(engine) as session:
        yield session


@pytest.fixture
def direct_db(engine: Engine) -> Generator[DirectSessionManager, None, None]:
    """Committing sessions on independent connections (PostgreSQL only).

    On SQLite every session shares the single in-memory connection, so
    there is nothing to race against.
    """
    if engine.dialect.name != "postgresql":
        pytest.skip("requires PostgreSQL (set DATABASE_URL)")
    manager = DirectSessionManager(engine)
    yield manager
    manager.cleanup()


@pytest.fixture
def test_verifier() -> JwtVerifier:
    """Accepts tokens minted by tests.helpers."""
    return JwtVerifier(secret=TEST_JWT_SECRET)


@pytest.fixture
def authenticated_app(test_verifier: JwtVerifier, db_session: Session) -> FastAPI:
    app = create_app(token_verifier=test_verifier)

    def _test_db() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[get_db] = _test_db
    return app


@pytest.fixture
def authenticated_client(authenticated_app: FastAPI) -> Generator[TestClient, None, None]:
    """Client for the authenticated app; pass auth_headers(user_id) per request."""
    with TestClient(authenticated_app) as client:
        yield client


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    clear_settings_cache()
    yield
    clear_settings_cache()
