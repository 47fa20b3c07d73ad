"""Sessions and transaction boundaries.

A Session is the unit of work handed to every service call. Services that
write open `with transaction(db):` around the whole operation, so the
checks and the mutation commit or roll back together:

- project creation (project row + owner membership)
- review upsert
- membership changes gated by the owner guard
- every other single-entity write

Sessions are created with expire_on_commit=False: services return
response models built from ORM objects after their transaction commits.
"""

from collections.abc import Generator
from contextlib import contextmanager

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from photoreview.db.engine import get_engine
from photoreview.logging import get_logger

logger = get_logger(__name__)


def create_session_factory(engine: Engine | None = None) -> sessionmaker[Session]:
    return sessionmaker(bind=engine or get_engine(), autoflush=False, expire_on_commit=False)


_session_factory: sessionmaker[Session] | None = None


def get_session_factory() -> sessionmaker[Session]:
    """Lazily build the settings-bound factory."""
    global _session_factory
    if _session_factory is None:
        _session_factory = create_session_factory()
    return _session_factory


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency: one session per request, closed afterwards."""
    with get_session_factory()() as db:
        yield db


@contextmanager
def transaction(db: Session) -> Generator[None, None, None]:
    """Commit on normal exit, roll back and re-raise on error.

    A `return` from inside the block also commits; services use that to
    hand back a refusal after read-only checks.
    """
    try:
        yield
    except Exception:
        db.rollback()
        logger.debug("transaction_rolled_back")
        raise
    db.commit()
