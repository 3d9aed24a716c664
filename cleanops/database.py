"""
Database engine, sessions and declarative base.

Schema source of truth: cleanops.models. On startup, Base.metadata.create_all(bind=engine)
creates all tables from the current models.

There is no module-level engine: create_app() (or a script) builds one with make_engine()
and hands the session factory to every component that needs a database.
"""
from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

Base = declarative_base()


def make_engine(database_url: str, echo: bool = False):
    if database_url.startswith("sqlite"):
        # SQLite (tests, local dev): one shared connection across threads
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
            echo=echo,
        )
    return create_engine(database_url, pool_pre_ping=True, echo=echo)


def make_session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine, expire_on_commit=False)


def init_db(engine) -> None:
    # Import models so Base.metadata has all tables before create_all
    import cleanops.models  # noqa: F401

    Base.metadata.create_all(bind=engine)


def get_db(request: Request):
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
