"""Database helpers for the flights reservation store."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Dict, Iterator, Optional, Tuple

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from .config import DEFAULT_URL, Settings
from .errors import StorageError
from .models import Base

logger = logging.getLogger(__name__)

# execution option asking SQLite to take the write lock when the transaction starts
BEGIN_IMMEDIATE = "flights_db_begin_immediate"


def _install_sqlite_transaction_hooks(engine: Engine) -> None:
    """Let SQLAlchemy emit BEGIN itself so write transactions can start IMMEDIATE."""

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record) -> None:
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _on_begin(conn) -> None:
        if conn.get_execution_options().get(BEGIN_IMMEDIATE):
            conn.exec_driver_sql("BEGIN IMMEDIATE")
        else:
            conn.exec_driver_sql("BEGIN")


def create_session_factory(
    db_url: str = DEFAULT_URL,
    *,
    echo: bool = False,
    connect_args: Dict[str, object] | None = None,
    username: Optional[str] = None,
    password: Optional[str] = None,
    timeout: Optional[float] = None,
) -> Tuple[Engine, sessionmaker[Session]]:
    """Return an engine/session factory pair configured for SQLite by default."""

    url = make_url(db_url)
    if username:
        url = url.set(username=username)
    if password:
        url = url.set(password=password)

    is_sqlite = url.get_backend_name() == "sqlite"
    if is_sqlite:
        final_connect_args: Dict[str, object] = {"check_same_thread": False}
        if timeout:
            final_connect_args["timeout"] = timeout
    elif url.get_backend_name() == "postgresql" and timeout:
        millis = int(timeout * 1000)
        final_connect_args = {"options": f"-c statement_timeout={millis} -c lock_timeout={millis}"}
    else:
        final_connect_args = {}
    if connect_args:
        final_connect_args.update(connect_args)

    if is_sqlite and url.database in (None, "", ":memory:"):
        engine = create_engine(
            url,
            echo=echo,
            connect_args=final_connect_args,
            poolclass=StaticPool,
        )
    else:
        engine = create_engine(
            url,
            echo=echo,
            connect_args=final_connect_args,
            pool_pre_ping=not is_sqlite,
        )
    if is_sqlite:
        _install_sqlite_transaction_hooks(engine)
    logger.debug("created engine for %s", url.render_as_string(hide_password=True))
    session_factory = sessionmaker(bind=engine, expire_on_commit=False)
    return engine, session_factory


def engine_from_settings(settings: Settings) -> Tuple[Engine, sessionmaker[Session]]:
    return create_session_factory(
        settings.url,
        echo=settings.echo,
        username=settings.username,
        password=settings.password,
        timeout=settings.transaction_timeout,
    )


def init_db(engine: Engine) -> None:
    """Create any missing tables; failures are raised as :class:`StorageError`."""

    try:
        Base.metadata.create_all(engine)
    except SQLAlchemyError as exc:
        logger.error("could not create tables: %s", exc)
        raise StorageError(f"storage failure: {exc}") from exc


@contextmanager
def session_scope(session_factory: sessionmaker[Session], *, immediate: bool = False) -> Iterator[Session]:
    """Provide a transactional scope around a series of operations.

    With ``immediate`` the transaction takes the database write lock as soon as it
    begins on SQLite; other backends rely on explicit row locks. Storage failures
    are rolled back and re-raised as :class:`StorageError`.
    """

    session = session_factory()
    try:
        if immediate:
            session.connection(execution_options={BEGIN_IMMEDIATE: True})
        yield session
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        logger.error("transaction rolled back: %s", exc)
        raise StorageError(f"storage failure: {exc}") from exc
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
