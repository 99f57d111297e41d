"""Database session management."""
from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from scorecard_engine.config.settings import settings


def enable_sqlite_savepoints(engine: Engine) -> Engine:
    """
    Let SQLAlchemy own transaction boundaries on pysqlite.

    The driver's implicit BEGIN handling otherwise turns the RELEASE of an
    outermost SAVEPOINT into a commit, which breaks the upsert's savepoint.
    """

    @event.listens_for(engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return engine


def build_engine(url: str, echo: bool = False, **kwargs) -> Engine:
    if url.startswith("sqlite"):
        # Sync routes run in a threadpool, so connections cross threads
        connect_args = kwargs.pop("connect_args", {})
        connect_args.setdefault("check_same_thread", False)
        return enable_sqlite_savepoints(
            create_engine(url, echo=echo, connect_args=connect_args, **kwargs)
        )
    return create_engine(url, echo=echo, pool_pre_ping=True, **kwargs)


engine = build_engine(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """
    Dependency function that yields a database session.

    Usage in FastAPI endpoints:
        @router.get("/items/")
        def read_items(db: Session = Depends(get_db)):
            ...
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind: Engine = None) -> None:
    """Create tables for every registered model (development and tests)."""
    from scorecard_engine.db.base import Base, import_models

    import_models()
    Base.metadata.create_all(bind=bind or engine)
