"""Record type shared by the store, the request pipeline and hooks."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class Record:
    """A single persisted entity instance within a named collection.

    Attributes:
        collection: Name of the collection the record belongs to
        data: Field values keyed by field name (includes "id" once saved)
        version: Store-managed revision; 0 means never persisted
    """

    collection: str
    data: dict[str, Any] = field(default_factory=dict)
    version: int = 0

    @property
    def id(self) -> str | None:
        return self.data.get("id")

    @property
    def is_new(self) -> bool:
        return self.version == 0

    def get(self, name: str, default: Any = None) -> Any:
        return self.data.get(name, default)

    def set(self, name: str, value: Any) -> None:
        self.data[name] = value

    def update(self, values: dict[str, Any]) -> None:
        self.data.update(values)

    def get_string(self, name: str) -> str:
        """Return the field as a string, "" when unset."""
        value = self.data.get(name)
        if value is None:
            return ""
        return str(value)

    def get_bool(self, name: str) -> bool:
        return bool(self.data.get(name))

    def get_string_list(self, name: str) -> list[str]:
        """Return a relation-list field as a fresh list of ids."""
        value = self.data.get(name)
        if not value:
            return []
        if isinstance(value, str):
            return [value]
        return [str(v) for v in value]

    def copy(self) -> "Record":
        data = {
            k: list(v) if isinstance(v, list) else v for k, v in self.data.items()
        }
        return Record(collection=self.collection, data=data, version=self.version)
