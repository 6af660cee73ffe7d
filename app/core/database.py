import logging
import ssl
from urllib.parse import urlparse

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine, async_sessionmaker
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

from app.core.config import DATABASE_URL

logger = logging.getLogger(__name__)


def normalize_database_url(database_url: str) -> str:
    """
    Turn a plain postgres URL into one usable by the asyncpg driver.

    asyncpg fails if it sees "sslmode" in the URL, so the parameter is dropped
    here and SSL is configured through connect_args instead.
    """
    if "?sslmode=" in database_url:
        database_url = database_url.split("?sslmode=")[0]

    if database_url.startswith("postgres://"):
        database_url = database_url.replace("postgres://", "postgresql+asyncpg://", 1)
    elif database_url.startswith("postgresql://"):
        database_url = database_url.replace("postgresql://", "postgresql+asyncpg://", 1)

    return database_url


def build_connect_args(database_url: str) -> dict:
    """SSL for remote postgres hosts, nothing for local/docker or sqlite."""
    if not database_url.startswith("postgresql"):
        return {}

    host = urlparse(database_url).hostname or ""
    if host in ("db", "localhost", "127.0.0.1"):
        logger.info("[DB] Local/Docker database detected, SSL disabled")
        return {}

    logger.info("[DB] Creating SSL context for remote database")
    ssl_context = ssl.create_default_context()
    ssl_context.check_hostname = False
    ssl_context.verify_mode = ssl.CERT_NONE
    return {"ssl": ssl_context}


# Backends with INSERT ... ON CONFLICT support (view de-duplication relies on it)
SUPPORTED_DIALECTS = ("postgresql", "sqlite")


def ensure_supported_dialect(dialect_name: str) -> None:
    if dialect_name not in SUPPORTED_DIALECTS:
        raise ValueError(
            f"Unsupported database dialect '{dialect_name}', "
            f"expected one of: {', '.join(SUPPORTED_DIALECTS)}"
        )


def enable_sqlite_foreign_keys(engine: AsyncEngine) -> None:
    """
    Turn on foreign key enforcement for every new SQLite connection.

    SQLite ignores ON DELETE actions unless the pragma is set per connection.
    No-op for other backends.
    """
    if engine.dialect.name != "sqlite":
        return

    @event.listens_for(engine.sync_engine, "connect")
    def _set_sqlite_pragma(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


if not DATABASE_URL:
    raise ValueError("DATABASE_URL is missing")

database_url = normalize_database_url(DATABASE_URL)

engine = create_async_engine(
    database_url,
    echo=False,
    connect_args=build_connect_args(database_url),
    poolclass=NullPool,  # Disable pooling for serverless deployments
)
ensure_supported_dialect(engine.dialect.name)
enable_sqlite_foreign_keys(engine)

# Create the session factory (Session Local)
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    expire_on_commit=False,
)


# Base class for models (Tables)
class Base(DeclarativeBase):
    pass


# Dependency to get DB session in FastAPI endpoints
async def get_db():
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()
