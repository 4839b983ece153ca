import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from match_backend import repo
from match_backend.database import init_db
from match_backend.traits import TraitProfile


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )

    # pysqlite needs these for SAVEPOINT support and ON DELETE CASCADE.
    @event.listens_for(eng, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(eng, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")

    init_db(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


@pytest.fixture
def db(session_factory):
    with session_factory() as session:
        yield session


def _profile(traits=None, interests=(), values=()) -> dict:
    return TraitProfile(
        personality_traits=dict(traits or {}),
        interests=frozenset(interests),
        values=frozenset(values),
    ).to_dict()


@pytest.fixture
def make_profile():
    return _profile


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(community_id: int, name: str | None = None, trait_profile: dict | None = None, bio: str | None = "bio"):
        counter["n"] += 1
        n = counter["n"]
        user = repo.create_user(
            db,
            email=f"user{n}@example.com",
            password_hash="x",
            name=name or f"User {n}",
            community_id=community_id,
            bio=bio if trait_profile is not None else None,
            trait_profile=trait_profile,
        )
        db.commit()
        return user

    return _make


@pytest.fixture
def community(db):
    c = repo.create_community(db, "Columbia", "columbia")
    db.commit()
    return c
