"""Relational store: declarative base, engine/session ownership and schema helpers.

A ``Store`` is created once by the composition root (the web app, the CLI or a
test fixture) and handed to every handler that needs persistence.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from uuid import uuid4

import structlog
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

logger = structlog.get_logger(__name__)


class Base(DeclarativeBase):
    pass


def new_id() -> str:
    return str(uuid4())


def utcnow() -> datetime:
    return datetime.now(UTC)


def _build_engine(database_url: str, echo: bool = False) -> Engine:
    if not database_url.startswith("sqlite"):
        return create_engine(database_url, echo=echo, pool_pre_ping=True)

    connect_args = {"check_same_thread": False, "timeout": 30}
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        # A single shared connection, otherwise every session sees its own empty database
        return create_engine(database_url, echo=echo, connect_args=connect_args, poolclass=StaticPool)

    engine = create_engine(database_url, echo=echo, connect_args=connect_args)

    # Every transaction takes the write lock up front; writers wait on the busy timeout
    @event.listens_for(engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _begin_immediate(connection):
        connection.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


class Store:
    """Owns the engine and hands out sessions and units of work."""

    def __init__(self, database_url: str, echo: bool = False):
        self.database_url = database_url
        self.engine = _build_engine(database_url, echo=echo)
        self._session_factory = sessionmaker(bind=self.engine, expire_on_commit=False)

    def session(self) -> Session:
        """A plain session for read-only work; use it as a context manager."""
        return self._session_factory()

    @contextmanager
    def unit_of_work(self) -> Iterator[Session]:
        """One transaction: commit when the block completes, roll back on any exception."""
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def dispose(self) -> None:
        self.engine.dispose()


def _load_models() -> None:
    # Importing the model modules registers their tables on Base.metadata
    import catalogue.product.product  # noqa: F401
    import identity.user.user  # noqa: F401
    import ordering.cart.cart  # noqa: F401
    import ordering.order.order  # noqa: F401


def setup_db(store: Store) -> None:
    """Create all tables."""
    _load_models()
    Base.metadata.create_all(store.engine)
    logger.info("database_schema_created", database_url=store.engine.url.render_as_string(hide_password=True))


def drop_db(store: Store) -> None:
    """Drop all tables."""
    _load_models()
    Base.metadata.drop_all(store.engine)
    logger.info("database_schema_dropped", database_url=store.engine.url.render_as_string(hide_password=True))
