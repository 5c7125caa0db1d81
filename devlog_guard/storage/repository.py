"""
Repository pattern for data access.

Stores the usage ledger as one row per month holding the JSON-serialized
MonthlyUsageRecord. The whole map is read at once and rewritten at once.
"""

import json
import sqlite3
from typing import Dict

from .db import DEFAULT_DB_PATH, connection
from .models import MonthlyUsageRecord


class UsageRepository:
    """Repository for the per-month usage ledger.

    The map is rewritten in a single transaction on every save, so a
    reader never observes a partially written ledger.
    """

    def __init__(self, db_path: str = DEFAULT_DB_PATH):
        """Initialize the repository with a database path.

        Args:
            db_path: Path to SQLite database file
        """
        self.db_path = db_path

    def initialize_schema(self) -> None:
        """Create the monthly_usage table if it doesn't exist."""
        with connection(self.db_path) as conn:
            _create_table(conn)
            conn.commit()

    def load_all(self) -> Dict[str, MonthlyUsageRecord]:
        """Load every month's record.

        A missing table is treated as an empty ledger.

        Returns:
            Mapping of month ("YYYY-MM") to its record

        Raises:
            sqlite3.DatabaseError: If the database file is unreadable
            ValueError: If a stored payload is not valid JSON or is malformed
        """
        with connection(self.db_path) as conn:
            try:
                rows = conn.execute("SELECT month, payload FROM monthly_usage").fetchall()
            except sqlite3.OperationalError as e:
                if "no such table" in str(e).lower():
                    return {}
                raise

        records: Dict[str, MonthlyUsageRecord] = {}
        for month, payload in rows:
            try:
                records[month] = MonthlyUsageRecord.from_dict(json.loads(payload))
            except (KeyError, TypeError, ArithmeticError) as e:
                raise ValueError(f"Malformed usage record for {month}: {e}") from e
        return records

    def save_all(self, records: Dict[str, MonthlyUsageRecord]) -> None:
        """Replace the stored ledger with the given map atomically.

        Args:
            records: Mapping of month to record
        """
        rows = [(month, json.dumps(record.to_dict())) for month, record in sorted(records.items())]
        with connection(self.db_path) as conn:
            _create_table(conn)
            try:
                conn.execute("BEGIN")
                conn.execute("DELETE FROM monthly_usage")
                conn.executemany("INSERT INTO monthly_usage (month, payload) VALUES (?, ?)", rows)
                conn.commit()
            except sqlite3.Error:
                conn.rollback()
                raise


def _create_table(conn: sqlite3.Connection) -> None:
    conn.execute("""
        CREATE TABLE IF NOT EXISTS monthly_usage (
            month TEXT PRIMARY KEY,
            payload TEXT NOT NULL
        )
    """)
