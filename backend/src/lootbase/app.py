"""Composition root: builds the store, metadata, hooks and request pipeline."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from lootbase.handlers import register_builtin_hooks
from lootbase.handlers.invitation_acceptance import DEFAULT_MAX_ATTEMPTS
from lootbase.hooks import HookDispatcher, HookRegistry
from lootbase.metadata.loader import MetadataLoader
from lootbase.persistence import DatabaseConfig, RecordStore, create_store
from lootbase.records.service import RecordService

logger = logging.getLogger(__name__)


def resolve_base_path() -> Path:
    """Resolve the project root from cwd (the backend/ dir or the root itself)."""
    cwd = Path.cwd()
    if cwd.name == "backend":
        return cwd.parent
    return cwd


@dataclass
class AppConfig:
    """Application configuration.

    Attributes:
        database: Record store connection settings
        metadata_path: Directory holding collections/*.yaml
        membership_max_attempts: Save attempts when adding a group member
    """

    database: DatabaseConfig
    metadata_path: Path
    membership_max_attempts: int = DEFAULT_MAX_ATTEMPTS

    @classmethod
    def from_env(cls, base_path: Path | None = None) -> "AppConfig":
        """Create config from environment variables.

        LOOTBASE_METADATA_PATH overrides {base_path}/metadata and
        LOOTBASE_MEMBERSHIP_MAX_ATTEMPTS overrides the retry budget.
        """
        base_path = base_path or resolve_base_path()
        metadata_path = os.environ.get("LOOTBASE_METADATA_PATH")
        attempts = os.environ.get("LOOTBASE_MEMBERSHIP_MAX_ATTEMPTS")

        try:
            max_attempts = int(attempts) if attempts else DEFAULT_MAX_ATTEMPTS
        except ValueError:
            raise ValueError(
                f"LOOTBASE_MEMBERSHIP_MAX_ATTEMPTS must be an integer, got '{attempts}'"
            ) from None
        if max_attempts < 1:
            raise ValueError("LOOTBASE_MEMBERSHIP_MAX_ATTEMPTS must be at least 1")

        return cls(
            database=DatabaseConfig.from_env(base_path),
            metadata_path=Path(metadata_path) if metadata_path else base_path / "metadata",
            membership_max_attempts=max_attempts,
        )


@dataclass
class LootbaseApp:
    """The wired application."""

    config: AppConfig
    metadata_loader: MetadataLoader
    store: RecordStore
    registry: HookRegistry
    dispatcher: HookDispatcher
    records: RecordService
    warnings: list[str] = field(default_factory=list)

    def close(self) -> None:
        self.store.close()


def build_app(config: AppConfig, store: RecordStore | None = None) -> LootbaseApp:
    """Build and connect the application.

    Loads collection metadata, connects the store and creates tables,
    registers the built-in hooks and checks that every hook bound in
    metadata is registered.
    """
    metadata_loader = MetadataLoader(config.metadata_path)
    metadata_loader.load_all()

    if store is None:
        if config.database.is_sqlite:
            sqlite_path = config.database.sqlite_path
            if sqlite_path != ":memory:":
                Path(sqlite_path).parent.mkdir(parents=True, exist_ok=True)
        store = create_store(config.database)
    store.connect()

    for name in metadata_loader.list_collections():
        store.initialize_collection(metadata_loader.get_collection(name))

    registry = HookRegistry()
    register_builtin_hooks(registry, config.membership_max_attempts)

    warnings = unbound_hook_warnings(metadata_loader, registry)
    for warning in warnings:
        logger.warning(warning)

    dispatcher = HookDispatcher(registry)
    return LootbaseApp(
        config=config,
        metadata_loader=metadata_loader,
        store=store,
        registry=registry,
        dispatcher=dispatcher,
        records=RecordService(store, metadata_loader, dispatcher),
        warnings=warnings,
    )


def unbound_hook_warnings(metadata_loader: MetadataLoader, registry: HookRegistry) -> list[str]:
    """List hooks bound in metadata that no code registered."""
    warnings = []
    for name in metadata_loader.list_collections():
        collection = metadata_loader.get_collection(name)
        for event, hooks in collection.hooks.items():
            for h in hooks:
                if not registry.is_registered(h.name):
                    warnings.append(
                        f"Hook '{h.name}' bound to {name}/{event.value} is not registered"
                    )
    return warnings
