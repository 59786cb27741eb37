"""lootbase record lifecycle hook system.

Provides extension points for logic that runs inside the request that
triggered a record event:
- authSuccess: After a user authenticated with an external provider
- createRequest: Before a new record is persisted (can modify record, can abort)
- updateRequest: After changes are applied in memory, before persist (can abort)

Usage:
    from lootbase.hooks import HookContext, HookRegistry, HookResult

    registry = HookRegistry()

    @registry.hook("normalizeDisplayName")
    async def normalize_display_name(ctx: HookContext) -> HookResult:
        return HookResult(update={"displayName": "Alice"})
"""

from lootbase.hooks.dispatcher import HookDispatcher
from lootbase.hooks.registry import HookFn, HookRegistry
from lootbase.hooks.types import (
    HookContext,
    HookDefinition,
    HookEvent,
    HookResult,
    compute_changes,
)

__all__ = [
    "HookContext",
    "HookDefinition",
    "HookDispatcher",
    "HookEvent",
    "HookFn",
    "HookRegistry",
    "HookResult",
    "compute_changes",
]
