from sqlmodel import SQLModel, create_engine, Session
from .config import settings
from .db import models  # noqa: F401  (registers tables on SQLModel.metadata)


def build_engine(db_url: str, echo: bool = False):
    """Choose engine options based on database scheme"""
    engine_kwargs = {}
    if db_url.startswith("sqlite"):
        # SQLite specific connect args
        engine_kwargs.update({
            "connect_args": {"check_same_thread": False}
        })
    else:
        # Better resiliency for managed MySQL/Postgres
        engine_kwargs.update({
            "pool_pre_ping": True,
            "pool_recycle": 300,
            "pool_size": 5,
            "max_overflow": 10,
        })
    return create_engine(db_url, echo=echo, **engine_kwargs)


engine = build_engine(settings.DATABASE_URL, echo=settings.DEBUG)


def create_db_and_tables():
    """Create tables directly; only used for SQLite development databases.

    Server databases are migrated with `alembic upgrade head`.
    """
    SQLModel.metadata.create_all(engine)


def get_session():
    with Session(engine) as session:
        yield session
