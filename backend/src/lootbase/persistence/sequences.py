"""Sequence management for record ID generation.

Provides sequential ID generation with format: {ABBREV}-{SEQUENCE}
Example: USR-00001, GRP-00042
"""

import sqlite3


class SequenceService:
    """Manages one sequence per collection."""

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn
        self._ensure_table()

    def _ensure_table(self) -> None:
        """Create the sequences table if it doesn't exist."""
        self.conn.execute("""
            CREATE TABLE IF NOT EXISTS _sequences (
                collection TEXT PRIMARY KEY,
                next_value INTEGER NOT NULL DEFAULT 1
            )
        """)
        self.conn.commit()

    def next_id(self, collection: str, abbreviation: str) -> str:
        """Generate the next ID for a collection.

        Returns:
            Formatted ID like "GRP-00001"
        """
        # Format: ABBREV-NNNNN (5 digits, zero-padded)
        return f"{abbreviation}-{self._get_and_increment(collection):05d}"

    def _get_and_increment(self, collection: str) -> int:
        """Get the next sequence value and increment it.

        Callers serialise access to the connection.
        """
        cursor = self.conn.execute(
            "SELECT next_value FROM _sequences WHERE collection = ?",
            [collection],
        )
        row = cursor.fetchone()

        if row:
            current_value = row[0]
            self.conn.execute(
                "UPDATE _sequences SET next_value = next_value + 1 WHERE collection = ?",
                [collection],
            )
        else:
            current_value = 1
            self.conn.execute(
                "INSERT INTO _sequences (collection, next_value) VALUES (?, 2)",
                [collection],
            )

        self.conn.commit()
        return current_value
