import os

import pytest
from dotenv import load_dotenv
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

load_dotenv(os.path.join(os.getcwd(), ".env"))

from querykit.db import Base  # noqa: E402
from querykit.models import Member, Team  # noqa: E402


@pytest.fixture(scope="session")
def engine():
    database_url = os.getenv("TEST_DATABASE_URL")
    if database_url:
        engine = create_engine(database_url)
    else:
        engine = create_engine(
            "sqlite+pysqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )

        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, _connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    Base.metadata.create_all(engine)

    return engine


@pytest.fixture()
def db_session(engine):
    connection = engine.connect()
    transaction = connection.begin()
    SessionLocal = sessionmaker(bind=connection, autoflush=False, autocommit=False)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()
        transaction.rollback()
        connection.close()


@pytest.fixture()
def teams(db_session):
    team_a = Team(name="teamA")
    team_b = Team(name="teamB")
    db_session.add_all([team_a, team_b])
    db_session.flush()
    return {"teamA": team_a, "teamB": team_b}


@pytest.fixture()
def members(db_session, teams):
    """member1..member4 aged 10..40; the first two in teamA, the rest in teamB."""
    rows = [
        Member(username="member1", age=10, team=teams["teamA"]),
        Member(username="member2", age=20, team=teams["teamA"]),
        Member(username="member3", age=30, team=teams["teamB"]),
        Member(username="member4", age=40, team=teams["teamB"]),
    ]
    db_session.add_all(rows)
    db_session.flush()
    return rows
