"""Persistence layer - record stores and configuration."""

from lootbase.persistence.adapter import RecordStore
from lootbase.persistence.config import DatabaseConfig, create_store

__all__ = ["DatabaseConfig", "RecordStore", "create_store"]
