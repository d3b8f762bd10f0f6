'''
Database Engine file.
1- Engine: creates and manages the connection pool
2- AsyncSessionLocal: Session Creator (with engine as bind)
3- get_db_session: Dependency to create, yield and manage the life-cycle of a session.
4- get_session_factory: Dependency handing out the factory itself, for websockets.
'''
from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, AsyncEngine, async_sessionmaker
from sqlalchemy.pool import StaticPool
from typing import AsyncGenerator
from ..common.config import settings
from ..common.logger import log

# Created by the app's lifespan.
engine: AsyncEngine | None = None
AsyncSessionLocal: async_sessionmaker[AsyncSession] | None = None


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(url: str) -> AsyncEngine:
    """
    Creates an async engine for the given URL.
    SQLite (used by the test-suite) gets a single shared connection with
    foreign keys switched on; everything else gets a pooled engine.
    """
    if url.startswith("sqlite"):
        new_engine = create_async_engine(
            url,
            echo=False,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        event.listen(new_engine.sync_engine, "connect", _enable_sqlite_foreign_keys)
        return new_engine

    return create_async_engine(
        url,
        echo=False,
        pool_size=5,
        max_overflow=10,
        pool_timeout=30,
        pool_recycle=-1,
        pool_pre_ping=True
    )


def build_session_factory(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=bind,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


def create_db_engine_and_session_factory():
    """
    Creates the engine and session factory.
    This is called by the app's lifespan event.
    """
    global engine, AsyncSessionLocal

    log.info("Creating database engine for URL...")
    try:
        engine = build_engine(settings.database_url)
        AsyncSessionLocal = build_session_factory(engine)
        log.info("Async database engine and session factory created successfully.")
    except Exception as e:
        log.critical(f"Failed to create async database engine: {e}", exc_info=True)
        raise

async def dispose_db_engine():
    """Disposes of the engine. Called by the app's lifespan."""
    global engine, AsyncSessionLocal
    if engine:
        await engine.dispose()
        log.info("Database engine disposed.")
    engine = None
    AsyncSessionLocal = None

async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    The session is committed when the request succeeds, rolled back when
    anything raises, and always closed.
    """
    if AsyncSessionLocal is None:
        log.error("AsyncSessionLocal is not initialized. App lifespan may not have run.")
        raise RuntimeError("Database session factory is not available.")

    session = AsyncSessionLocal()
    try:
        yield session
        await session.commit()
    except Exception as e:
        await session.rollback()
        log.error(f"Database session rolled back due to error: {e}")
        raise
    finally:
        await session.close()

def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """
    FastAPI dependency for long-lived connections (websockets) that open a
    short session per unit of work instead of holding one for their lifetime.
    """
    if AsyncSessionLocal is None:
        log.error("AsyncSessionLocal is not initialized. App lifespan may not have run.")
        raise RuntimeError("Database session factory is not available.")
    return AsyncSessionLocal
