from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from querykit.config import settings
from querykit.logging import get_logger

logger = get_logger(__name__)


class Base(DeclarativeBase):
    pass


_engine = None


def get_engine():
    global _engine
    if _engine is None:
        if settings.is_sqlite:
            # Required for SQLite when sessions cross threads
            _engine = create_engine(
                settings.database_url,
                echo=settings.db_echo,
                connect_args={"check_same_thread": False},
            )
        else:
            _engine = create_engine(
                settings.database_url,
                echo=settings.db_echo,
                pool_pre_ping=True,
                pool_size=settings.db_pool_size,
                max_overflow=settings.db_max_overflow,
                pool_timeout=settings.db_pool_timeout,
                pool_recycle=settings.db_pool_recycle,
            )
    return _engine


SessionLocal = sessionmaker(bind=get_engine(), autoflush=False, autocommit=False)


def get_db() -> Iterator[Session]:
    """Yield a session and ensure it is closed afterwards.

    The caller decides when to commit. Use ``transaction()`` when the unit of
    work should commit on success and roll back on failure.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(session_factory: sessionmaker | None = None) -> Iterator[Session]:
    """Transaction boundary for repository calls.

    - Opens a new session
    - Commits on successful exit
    - Rolls back on exception and re-raises
    - Closes the session in every case

    Usage:
        with transaction() as db:
            members.save(db, MemberCreate(username="member1", age=10))
    """
    factory = session_factory or SessionLocal
    db = factory()
    try:
        yield db
        db.commit()
    except Exception:
        logger.debug("transaction_rollback")
        db.rollback()
        raise
    finally:
        db.close()


def clear_cache(db: Session) -> None:
    """Expire every object held by the session.

    Bulk updates and deletes bypass the identity map, so objects loaded before
    them keep their old values until this is called.
    """
    db.expire_all()
