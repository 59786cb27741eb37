"""lootbase — record-store hooks for group loot-split backends."""

__version__ = "0.1.0"
