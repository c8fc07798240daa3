from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from agency.core.config import settings
import os
from contextlib import contextmanager


if os.getenv("PYTEST_RUN") == "1":
    SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"
else:
    SQLALCHEMY_DATABASE_URL = settings.SQLALCHEMY_DATABASE_URL

is_sqlite = SQLALCHEMY_DATABASE_URL.startswith("sqlite")
is_memory = is_sqlite and ":memory:" in SQLALCHEMY_DATABASE_URL

# Avoid stale idle connections causing first-hit failures after inactivity
engine_kwargs: dict = {"pool_pre_ping": True}
if is_sqlite:
    engine_kwargs["connect_args"] = {"check_same_thread": False, "timeout": 15}
    if is_memory:
        # One shared connection, otherwise every checkout sees an empty database
        engine_kwargs["poolclass"] = StaticPool
else:
    engine_kwargs.update(
        {
            "pool_size": int(os.getenv("DB_POOL_SIZE") or 5),
            "max_overflow": int(os.getenv("DB_MAX_OVERFLOW") or 5),
            "pool_recycle": int(os.getenv("DB_POOL_RECYCLE") or 300),
        }
    )

engine = create_engine(SQLALCHEMY_DATABASE_URL, **engine_kwargs)


def apply_sqlite_pragmas(dbapi_connection, connection_record) -> None:  # noqa: ANN001
    """Enable foreign keys and WAL so concurrent confirmations back off on locks."""
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA foreign_keys=ON;")
        cursor.execute("PRAGMA journal_mode=WAL;")
        cursor.execute("PRAGMA busy_timeout=15000;")
    finally:
        cursor.close()


if is_sqlite:
    event.listen(engine, "connect", apply_sqlite_pragmas)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


# Dependency
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def get_db_session():
    """Provide a short-lived SessionLocal with guaranteed close.

    Used where FastAPI ``Depends`` is unavailable, e.g. the readiness probe
    and the settings bootstrap at startup.
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
