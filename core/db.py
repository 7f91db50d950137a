"""
core/db.py -- SQLAlchemy engine construction shared by every store.

Both auth/store.py and board/store.py point at the same DATABASE_URL and
each creates only its own tables on top of the engine built here.
"""

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine

# SQLite INTEGER is a signed 64-bit value; binding anything larger raises
# OverflowError inside the driver.
MAX_ROW_ID = 2**63 - 1


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety.

    WAL (Write-Ahead Logging) allows readers to proceed without blocking
    during writes. Set per-connection because SQLite PRAGMAs are not
    inherited by new connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def make_engine(db_url: str) -> Engine:
    """Create an Engine; SQLite URLs get cross-thread access and WAL mode.

    check_same_thread=False is required because FastAPI runs sync route
    handlers in a thread pool.
    """
    connect_args: dict = {}
    if db_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    engine = create_engine(db_url, connect_args=connect_args)
    if db_url.startswith("sqlite"):
        event.listen(engine, "connect", _set_wal_mode)
    return engine
