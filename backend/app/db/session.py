"""Database session. SQLite compatible with connection pooling."""
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker

from app.core.config import settings

connect_args = (
    {"check_same_thread": False}
    if settings.DATABASE_URL.startswith("sqlite")
    else {}
)

# Configure connection pooling for better concurrency
if settings.DATABASE_URL.startswith("sqlite"):
    # SQLite: Use NullPool for thread-safety
    from sqlalchemy.pool import NullPool
    engine = create_engine(
        settings.DATABASE_URL,
        connect_args=connect_args,
        poolclass=NullPool
    )
else:
    # PostgreSQL/MySQL: Use QueuePool with sensible defaults
    engine = create_engine(
        settings.DATABASE_URL,
        connect_args=connect_args,
        pool_size=5,  # Number of persistent connections
        max_overflow=10,  # Max temporary connections
        pool_timeout=30,  # Seconds to wait for connection
        pool_recycle=3600,  # Recycle connections after 1 hour
        pool_pre_ping=True  # Verify connection health
    )


def _unicode_lower(value):
    return value.lower() if isinstance(value, str) else value


def configure_sqlite_connection(target_engine) -> None:
    """Per-connection SQLite setup.

    - foreign_keys pragma, otherwise ON DELETE rules are ignored
    - lower() replaced with a Unicode-aware one; the builtin folds ASCII only
    """
    if target_engine.dialect.name != "sqlite":
        return

    @event.listens_for(target_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.create_function("lower", 1, _unicode_lower, deterministic=True)
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


configure_sqlite_connection(engine)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
