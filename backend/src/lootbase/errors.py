"""Exception hierarchy shared by the store, the hook dispatcher and handlers."""


class LootbaseError(Exception):
    """Base class for all lootbase errors."""


class AuthorizationError(LootbaseError):
    """The request has no (or the wrong) authenticated actor."""


class ReferenceResolutionError(LootbaseError):
    """A record referenced by another record could not be resolved."""


class RecordNotFoundError(LootbaseError):
    """Point lookup by id found nothing."""

    def __init__(self, collection: str, record_id: str):
        self.collection = collection
        self.record_id = record_id
        super().__init__(f"Record '{record_id}' not found in '{collection}'")


class PersistenceError(LootbaseError):
    """Saving a record failed."""


class VersionConflictError(PersistenceError):
    """The record changed in the store since it was read."""

    def __init__(self, collection: str, record_id: str, expected_version: int):
        self.collection = collection
        self.record_id = record_id
        self.expected_version = expected_version
        super().__init__(
            f"Record '{record_id}' in '{collection}' was modified concurrently "
            f"(expected version {expected_version})"
        )


class HookAbortError(LootbaseError):
    """A hook aborted the triggering operation without raising."""
