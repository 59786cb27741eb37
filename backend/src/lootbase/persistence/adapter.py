"""RecordStore Protocol — the narrow store interface hooks depend on."""

from typing import Any, Protocol, runtime_checkable

from lootbase.metadata.loader import CollectionModel
from lootbase.records.types import Record


@runtime_checkable
class RecordStore(Protocol):
    """Interface all record stores must implement.

    save() is a compare-and-swap on Record.version: it raises
    VersionConflictError when the stored record changed since it was read.
    """

    conn: Any

    def connect(self) -> None: ...

    def close(self) -> None: ...

    def initialize_collection(self, collection: CollectionModel) -> None: ...

    def find_by_id(self, collection: str, id: str) -> Record: ...

    def find_first(self, collection: str, field: str, value: Any) -> Record | None: ...

    def save(self, record: Record) -> Record: ...
