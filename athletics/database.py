import logging

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy import event, text

from athletics.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)

# SQLite pragmas - several workers may race on sent_notifications
SQLITE_PRAGMAS = [
    ("journal_mode", "WAL"),          # Concurrent reads during writes
    ("synchronous", "NORMAL"),
    ("busy_timeout", "30000"),         # Wait 30s on lock instead of failing a claim
    ("foreign_keys", "ON"),
    ("temp_store", "MEMORY"),
]


def set_sqlite_pragmas(dbapi_conn, connection_record):
    """Set SQLite pragmas on a new connection"""
    cursor = dbapi_conn.cursor()
    for pragma, value in SQLITE_PRAGMAS:
        cursor.execute(f"PRAGMA {pragma}={value};")
    cursor.close()


# Note: Pool settings don't apply to SQLite in-memory databases
_is_sqlite_memory = ":memory:" in settings.database_url or "mode=memory" in settings.database_url

if _is_sqlite_memory:
    # In-memory SQLite (testing) - use StaticPool
    from sqlalchemy.pool import StaticPool
    engine = create_async_engine(
        settings.database_url,
        echo=settings.debug,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
elif "sqlite" in settings.database_url:
    engine = create_async_engine(settings.database_url, echo=settings.debug)
else:
    engine = create_async_engine(
        settings.database_url,
        echo=settings.debug,
        pool_size=10,
        max_overflow=20,
        pool_timeout=30,
        pool_recycle=1800,         # Recycle connections every 30 min
        pool_pre_ping=True,
    )

# Apply SQLite pragmas on every connection (skip for in-memory test databases)
if "sqlite" in settings.database_url and not _is_sqlite_memory:
    @event.listens_for(engine.sync_engine, "connect")
    def on_connect(dbapi_conn, connection_record):
        set_sqlite_pragmas(dbapi_conn, connection_record)


async_session_maker = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    pass


async def get_db() -> AsyncSession:
    async with async_session_maker() as session:
        try:
            yield session
        finally:
            await session.close()


async def init_db():
    """Initialize database and create tables"""
    # Import models so their tables are registered on Base.metadata
    import athletics.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    if "sqlite" in settings.database_url:
        async with async_session_maker() as session:
            result = await session.execute(text("PRAGMA journal_mode;"))
            mode = result.scalar()
            logger.info(f"SQLite journal mode: {mode}")


async def close_db():
    """Release pooled connections on shutdown"""
    await engine.dispose()
