"""
Database connection management.

The usage ledger lives in a single SQLite file; every operation opens its
own short-lived connection so the file can be shared by a server process
and the operator CLI.
"""

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

DEFAULT_DB_PATH = "devlog_guard.db"


def get_connection(db_path: str = DEFAULT_DB_PATH) -> sqlite3.Connection:
    """Open a connection, creating the database's parent directory if needed.

    Args:
        db_path: Path to SQLite database file

    Returns:
        SQLite connection
    """
    path = Path(db_path)
    if not path.parent.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
    return sqlite3.connect(str(path))


@contextmanager
def connection(db_path: str = DEFAULT_DB_PATH) -> Iterator[sqlite3.Connection]:
    """Connection that is always closed on exit; commits are left to the caller."""
    conn = get_connection(db_path)
    try:
        yield conn
    finally:
        conn.close()
