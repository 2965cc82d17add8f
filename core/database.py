# app/core/database.py
from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from core.config import settings
from core.store import RecordStore
from models.base import Base


def build_engine(database_url: str, **kwargs) -> AsyncEngine:
    engine = create_async_engine(
        database_url,
        echo=settings.DEBUG,      # dev only
        future=True,
        **kwargs,
    )

    if engine.dialect.name == "sqlite":
        # SQLite leaves foreign keys unenforced unless asked per connection
        @event.listens_for(engine.sync_engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(
        bind=bind,
        class_=AsyncSession,
        expire_on_commit=False,
    )


engine = build_engine(settings.DATABASE_URL)

AsyncSessionLocal = build_session_factory(engine)


async def create_tables(bind: AsyncEngine = engine) -> None:
    import models  # noqa: F401  registers every table on Base.metadata

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_store() -> RecordStore:
    return RecordStore(AsyncSessionLocal)
