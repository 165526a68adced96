from __future__ import annotations

from collections.abc import Generator

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import Session, sessionmaker

from estatehub.settings import Settings, get_settings


def enable_sqlite_foreign_keys(engine: Engine) -> None:
    """SQLite only enforces FOREIGN KEY constraints when asked to, per connection."""

    @event.listens_for(engine, "connect")
    def _set_foreign_keys(dbapi_connection, connection_record) -> None:
        cursor = dbapi_connection.cursor()
        try:
            cursor.execute("PRAGMA foreign_keys=ON")
        finally:
            cursor.close()


def build_engine(settings: Settings) -> Engine:
    url = settings.resolved_db_url()
    if not url.startswith("sqlite"):
        return create_engine(url, pool_pre_ping=True)

    # SQLite connections are shared across the threadpool FastAPI runs sync routes on.
    engine = create_engine(url, connect_args={"check_same_thread": False}, pool_pre_ping=True)
    enable_sqlite_foreign_keys(engine)
    return engine


engine = build_engine(get_settings())

SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, class_=Session)


def get_db() -> Generator[Session, None, None]:
    """
    Request-scoped session.

    Gateways commit their own writes; nothing stays on the session once the
    request is done.
    """

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
