from __future__ import annotations

from typing import Iterator

from sqlalchemy import Engine, create_engine, event
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from catalog_admin.core.config import settings


class Base(DeclarativeBase):
    pass


class StoreHandle:
    """Engine plus session factory for one database; created by init_store()."""

    def __init__(self, engine: Engine):
        self.engine = engine
        self.session_factory = sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)

    def session(self) -> Session:
        return self.session_factory()

    def dispose(self) -> None:
        self.engine.dispose()


_store: StoreHandle | None = None


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_store_engine(url: str, **kwargs) -> Engine:
    engine = create_engine(url, echo=bool(kwargs.pop("echo", settings.DATABASE_ECHO)), **kwargs)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def init_store(url: str | None = None, **engine_kwargs) -> StoreHandle:
    global _store
    if _store is not None:
        return _store
    db_url = url or settings.DATABASE_URL
    if db_url.startswith("sqlite"):
        engine_kwargs.setdefault("connect_args", {"check_same_thread": False})
    _store = StoreHandle(create_store_engine(db_url, **engine_kwargs))
    return _store


def dispose_store() -> None:
    global _store
    if _store is None:
        return
    _store.dispose()
    _store = None


def get_store() -> StoreHandle:
    if _store is None:
        raise RuntimeError("Store is not initialized; call init_store() first")
    return _store


def get_db() -> Iterator[Session]:
    db = get_store().session()
    try:
        yield db
    finally:
        db.close()
