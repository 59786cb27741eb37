"""Database configuration and store factory."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from lootbase.persistence.adapter import RecordStore


@dataclass
class DatabaseConfig:
    """Database connection configuration.

    Supports sqlite:/// URLs.
    """

    url: str

    @classmethod
    def from_env(cls, base_path: Path | None = None) -> DatabaseConfig:
        """Create config from environment variables.

        Resolution order:
        1. DATABASE_URL env var (standard)
        2. LOOTBASE_DB_PATH env var (converted to sqlite:/// URL)
        3. Default: sqlite:///{base_path}/data/lootbase.db
        """
        url = os.environ.get("DATABASE_URL")
        if url:
            return cls(url=url)

        db_path = os.environ.get("LOOTBASE_DB_PATH")
        if db_path:
            return cls(url=f"sqlite:///{db_path}")

        if base_path:
            return cls(url=f"sqlite:///{base_path / 'data' / 'lootbase.db'}")

        return cls(url="sqlite:///lootbase.db")

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    @property
    def sqlite_path(self) -> str:
        """Filesystem path of a sqlite:/// URL (":memory:" when empty)."""
        return self.url.replace("sqlite:///", "", 1) or ":memory:"


def create_store(config: DatabaseConfig) -> RecordStore:
    """Create a record store based on the database URL scheme.

    Args:
        config: Database configuration with URL.

    Returns:
        A RecordStore instance (not yet connected).

    Raises:
        ValueError: For unsupported URL schemes.
    """
    if config.is_sqlite:
        from lootbase.persistence.sqlite import SQLiteRecordStore

        return SQLiteRecordStore(config.sqlite_path)

    raise ValueError(f"Unsupported database URL scheme: {config.url}")
