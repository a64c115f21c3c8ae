from typing import Iterator

from fastapi import Request
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine


def make_engine(database_url: str, echo: bool = False) -> Engine:
    if not database_url.startswith("sqlite"):
        return create_engine(database_url, echo=echo, pool_pre_ping=True)
    kwargs = {"connect_args": {"check_same_thread": False}}
    # in-memory databases live in a single connection
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        kwargs["poolclass"] = StaticPool
    return create_engine(database_url, echo=echo, **kwargs)


def init_db(engine: Engine) -> None:
    from codepractice import models  # ensure models are imported
    SQLModel.metadata.create_all(engine)


def get_session(request: Request) -> Iterator[Session]:
    with Session(request.app.state.engine) as session:
        yield session
