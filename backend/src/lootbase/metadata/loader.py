"""Load and resolve collection metadata from YAML files."""

import logging
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from lootbase.hooks.types import HookEvent

logger = logging.getLogger(__name__)

FIELD_TYPES = ("text", "bool", "number", "datetime", "relation", "relations")


@dataclass
class RelationConfig:
    """Configuration for a relation field."""

    collection: str  # The related collection name


@dataclass
class FieldDefinition:
    name: str
    type: str = "text"
    primary_key: bool = False
    relation: RelationConfig | None = None

    @property
    def is_list(self) -> bool:
        return self.type == "relations"


@dataclass
class HookConfig:
    """Hook binding from YAML metadata."""

    name: str
    description: str = ""


@dataclass
class CollectionModel:
    name: str
    primary_key: str
    fields: list[FieldDefinition]
    abbreviation: str = ""
    auth: bool = False  # Auth collections receive authSuccess events
    hooks: dict[HookEvent, list[HookConfig]] = field(default_factory=dict)

    @property
    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]

    def get_field(self, name: str) -> FieldDefinition | None:
        for f in self.fields:
            if f.name == name:
                return f
        return None

    def hooks_for(self, event: HookEvent) -> list[HookConfig]:
        return self.hooks.get(event, [])


class MetadataLoader:
    """Loads collection definitions from YAML files."""

    def __init__(self, metadata_path: Path):
        self.metadata_path = metadata_path
        self.collections: dict[str, CollectionModel] = {}

    def load_all(self) -> None:
        """Load all collections and check cross-collection constraints."""
        self._load_collections()
        self._validate_abbreviations()
        self._validate_relations()

    def _load_collections(self) -> None:
        collections_path = self.metadata_path / "collections"
        if not collections_path.exists():
            return

        for yaml_file in sorted(collections_path.glob("*.yaml")):
            with open(yaml_file) as f:
                data = yaml.safe_load(f)
                if data and "collection" in data:
                    collection = self._resolve_collection(data)
                    self.collections[collection.name] = collection

    def _validate_abbreviations(self) -> None:
        """Validate collection abbreviations are unique and properly formatted."""
        seen: dict[str, str] = {}  # abbreviation -> collection name

        for name, collection in self.collections.items():
            abbrev = collection.abbreviation
            if len(abbrev) < 2 or len(abbrev) > 5 or not abbrev.isalnum():
                raise ValueError(
                    f"Collection '{name}' abbreviation '{abbrev}' must be "
                    "2-5 alphanumeric characters"
                )
            if abbrev in seen:
                raise ValueError(
                    f"Duplicate abbreviation '{abbrev}' used by both "
                    f"'{seen[abbrev]}' and '{name}'"
                )
            seen[abbrev] = name

    def _validate_relations(self) -> None:
        for name, collection in self.collections.items():
            for f in collection.fields:
                if f.relation and f.relation.collection not in self.collections:
                    raise ValueError(
                        f"Field '{name}.{f.name}' relates to unknown "
                        f"collection '{f.relation.collection}'"
                    )

    def _resolve_collection(self, data: dict) -> CollectionModel:
        name = data["collection"]
        fields = [self._resolve_field(name, f) for f in data.get("fields", [])]

        primary_key = "id"
        for f in fields:
            if f.primary_key:
                primary_key = f.name
                break

        abbreviation = data.get("abbreviation") or name[:3]

        return CollectionModel(
            name=name,
            primary_key=primary_key,
            fields=fields,
            abbreviation=abbreviation.upper(),
            auth=data.get("auth", False),
            hooks=self._resolve_hooks(name, data.get("hooks") or {}),
        )

    def _resolve_field(self, collection: str, data: dict) -> FieldDefinition:
        field_type = data.get("type", "text")
        if field_type not in FIELD_TYPES:
            raise ValueError(
                f"Field '{collection}.{data['name']}' has unknown type '{field_type}'"
            )

        relation = None
        if field_type in ("relation", "relations"):
            target = data.get("relation", {}).get("collection")
            if not target:
                raise ValueError(
                    f"Relation field '{collection}.{data['name']}' needs relation.collection"
                )
            relation = RelationConfig(collection=target)

        return FieldDefinition(
            name=data["name"],
            type=field_type,
            primary_key=data.get("primaryKey", False),
            relation=relation,
        )

    def _resolve_hooks(
        self, collection: str, data: dict
    ) -> dict[HookEvent, list[HookConfig]]:
        """Convert the hooks mapping from YAML to HookConfig lists by event."""
        hooks: dict[HookEvent, list[HookConfig]] = {}
        for event_name, hook_list in data.items():
            try:
                event = HookEvent(event_name)
            except ValueError:
                logger.warning(
                    "Collection '%s' binds hooks to unknown event '%s', ignoring",
                    collection,
                    event_name,
                )
                continue
            if isinstance(hook_list, list):
                hooks[event] = [
                    HookConfig(name=h["name"], description=h.get("description", ""))
                    for h in hook_list
                ]
        return hooks

    def get_collection(self, name: str) -> CollectionModel | None:
        """Get a resolved collection by name."""
        return self.collections.get(name)

    def list_collections(self) -> list[str]:
        """List all collection names."""
        return list(self.collections.keys())
