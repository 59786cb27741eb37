"""Records and the create/update/auth request pipeline."""

from lootbase.records.types import Record

__all__ = ["Record"]
