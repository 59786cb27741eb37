"""Hook system types for lootbase.

Defines the core data structures for the record lifecycle hook system:
- HookEvent: the lifecycle points hooks can be bound to
- HookDefinition: a named hook bound to a collection event
- HookContext: runtime state passed to hook functions
- HookResult: return value from hook functions
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from lootbase.auth.types import ExternalAuthMeta, UserContext
from lootbase.records.types import Record


class HookEvent(Enum):
    """Record lifecycle events hooks can be bound to.

    AUTH_SUCCESS: A user of an auth collection authenticated with an external provider
    CREATE_REQUEST: A new record was submitted, before it is first persisted
    UPDATE_REQUEST: Changes were applied to a record in memory, before they are persisted
    """

    AUTH_SUCCESS = "authSuccess"
    CREATE_REQUEST = "createRequest"
    UPDATE_REQUEST = "updateRequest"


@dataclass
class HookDefinition:
    """A hook bound to a collection event.

    Attributes:
        name: Registered hook name (e.g., "acceptInvitation")
        description: Human-readable description
    """

    name: str
    description: str = ""


@dataclass
class HookContext:
    """Runtime context passed to every hook function.

    Attributes:
        collection: Name of the collection the event fired for
        event: The lifecycle event
        record: Current in-memory record state
        original: Persisted state before the request (update only)
        changes: Fields changed by the request (update only)
        user_context: Authenticated actor of the request, if any
        auth_meta: Provider metadata (authSuccess only)
        store: Record store for hooks that read or write other records
    """

    collection: str
    event: HookEvent
    record: Record
    original: Record | None = None
    changes: dict[str, Any] | None = None
    user_context: UserContext | None = None
    auth_meta: ExternalAuthMeta | None = None
    store: Any = None  # RecordStore (avoids circular import)


@dataclass
class HookResult:
    """Return value from hook functions.

    Attributes:
        update: Fields to merge into the record
        abort: Error message that aborts the triggering operation
        error: The exception that caused the abort, if any
    """

    update: dict[str, Any] | None = None
    abort: str | None = None
    error: Exception | None = None


def compute_changes(
    data: dict[str, Any], original: dict[str, Any] | None
) -> dict[str, Any] | None:
    """Compute a diff of changed fields between data and original.

    Returns None if original is None (create operations).
    Returns a dict of {field: new_value} for fields that differ.
    """
    if original is None:
        return None

    changes: dict[str, Any] = {}
    for key, value in data.items():
        if key not in original or original[key] != value:
            changes[key] = value

    return changes
