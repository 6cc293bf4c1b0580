"""
Module: inventory_kernel.db.engine
Responsibility: Owns the process-wide engine and session factory and the
    commit-or-rollback transaction scope.
Architecture position: Kernel > DB.  Imports db/base.py and, lazily, the
    model package so table creation sees every mapped class.

Backends:
    - PostgreSQL (production): READ COMMITTED; the stock ledger takes
      SELECT ... FOR UPDATE row locks on product rows it touches.
    - SQLite (development, tests): foreign keys switched on per connection
      and every transaction opened with BEGIN IMMEDIATE, so concurrent
      writers queue on the database lock instead of racing.

Failure modes:
    - RuntimeError from get_engine()/get_session_factory() before
      init_engine_from_url().
"""

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import Session, sessionmaker

from inventory_kernel.logging_config import configure_logging, get_logger

logger = get_logger("db.engine")

_engine: Engine | None = None
_session_factory: sessionmaker[Session] | None = None

_NOT_INITIALIZED = "Database engine not initialized; call init_engine_from_url() first"


def init_engine_from_url(
    database_url: str,
    echo: bool = False,
    pool_size: int = 20,
    max_overflow: int = 10,
    pool_timeout: int = 30,
    pool_recycle: int = 1800,
) -> Engine:
    """
    Create the engine and session factory, replacing any previous ones.

    Sessions do not expire on commit: services hand ORM rows to DTO
    conversion after the transaction has closed.
    """
    global _engine, _session_factory
    reset_engine()

    url = make_url(database_url)
    backend = url.get_backend_name()
    options: dict = {
        "echo": echo,
        "pool_pre_ping": True,
        "pool_recycle": pool_recycle,
    }
    # In-memory SQLite gets SQLAlchemy's single-connection pool, which takes no sizing
    if url.database not in (None, "", ":memory:"):
        options.update(
            pool_size=pool_size,
            max_overflow=max_overflow,
            pool_timeout=pool_timeout,
        )
    if backend == "sqlite":
        options["connect_args"] = {"check_same_thread": False, "timeout": 30}
    else:
        options["isolation_level"] = "READ COMMITTED"

    _engine = create_engine(database_url, **options)
    if backend == "sqlite":
        _serialize_sqlite_writers(_engine)
    _session_factory = sessionmaker(bind=_engine, expire_on_commit=False)

    configure_logging()
    logger.info(
        "engine_initialized",
        extra={"dialect": backend, "pool_size": pool_size, "echo": echo},
    )
    return _engine


def _serialize_sqlite_writers(engine: Engine) -> None:
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        # pysqlite's own implicit BEGIN is disabled; the "begin" hook below issues it
        dbapi_connection.isolation_level = None
        dbapi_connection.execute("PRAGMA foreign_keys=ON")

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def get_engine() -> Engine:
    if _engine is None:
        raise RuntimeError(_NOT_INITIALIZED)
    return _engine


def get_session_factory() -> sessionmaker[Session]:
    if _session_factory is None:
        raise RuntimeError(_NOT_INITIALIZED)
    return _session_factory


@contextmanager
def session_scope(
    session_factory: sessionmaker[Session] | None = None,
) -> Iterator[Session]:
    """
    One transaction: commit on clean exit, roll back and re-raise otherwise.

    Uses the module-level factory unless one is passed in.
    """
    session = (session_factory or get_session_factory())()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        logger.warning("transaction_rolled_back", exc_info=True)
        raise
    finally:
        session.close()


def create_tables() -> None:
    from inventory_kernel.db.base import Base
    import inventory_kernel.models  # noqa: F401

    Base.metadata.create_all(get_engine())
    logger.info("tables_created", extra={"tables": sorted(Base.metadata.tables)})


def drop_tables() -> None:
    from inventory_kernel.db.base import Base
    import inventory_kernel.models  # noqa: F401

    Base.metadata.drop_all(get_engine())


def reset_engine() -> None:
    """Dispose pooled connections and forget the engine (tests, shutdown)."""
    global _engine, _session_factory
    if _engine is not None:
        _engine.dispose()
    _engine = None
    _session_factory = None
