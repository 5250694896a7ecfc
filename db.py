from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker
import os

from settings import SETTINGS


def _set_sqlite_pragmas(dbapi_connection, connection_record):
    """Configure SQLite for better concurrent read/write behavior."""
    cursor = dbapi_connection.cursor()
    # Wait for locks instead of failing immediately.
    cursor.execute("PRAGMA busy_timeout=5000")
    # Better concurrency (readers not blocked by writers).
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA synchronous=NORMAL")
    cursor.close()


DB_PATH = os.path.join(os.path.dirname(__file__), "data", "insider_filings.db")
SQLALCHEMY_DATABASE_URL = str(SETTINGS.get("DATABASE_URL") or f"sqlite:///{DB_PATH}")


def make_engine(url: str = SQLALCHEMY_DATABASE_URL):
    if not url.startswith("sqlite"):
        return create_engine(url, pool_pre_ping=True)

    if url == f"sqlite:///{DB_PATH}":
        os.makedirs(os.path.dirname(DB_PATH), exist_ok=True)
    eng = create_engine(
        url,
        connect_args={"check_same_thread": False, "timeout": 30},
        pool_pre_ping=True,
    )
    event.listen(eng, "connect", _set_sqlite_pragmas)
    return eng


engine = make_engine()
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()
