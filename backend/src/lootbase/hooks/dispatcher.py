"""Hook dispatch for lootbase.

Runs the hooks bound to a collection event sequentially, merging field
updates and turning hook failures into aborts of the triggering request.
"""

import logging
from typing import Any

from lootbase.hooks.registry import HookRegistry
from lootbase.hooks.types import HookContext, HookDefinition, HookResult

logger = logging.getLogger(__name__)


class HookDispatcher:
    """Dispatches hooks for record lifecycle events.

    Hooks for an event execute sequentially in declared order.
    Each hook's update output is merged into the record before the next
    hook runs.
    """

    def __init__(self, registry: HookRegistry):
        self.registry = registry

    async def dispatch(
        self,
        definitions: list[HookDefinition],
        context: HookContext,
    ) -> HookResult | None:
        """Execute hooks bound to the context's event.

        Args:
            definitions: Hooks bound to the event (in declared order)
            context: The hook context with current record state

        Returns:
            Merged HookResult with all updates applied, or None if nothing
            changed. If any hook aborts or raises, returns immediately with
            the abort message and the causing error.
        """
        if not definitions:
            return None

        merged_updates: dict[str, Any] = {}

        for definition in definitions:
            try:
                hook_fn = self.registry.get(definition.name)
            except ValueError:
                logger.warning(
                    "Hook '%s' bound to %s/%s is not registered, skipping",
                    definition.name,
                    context.collection,
                    context.event.value,
                )
                continue

            try:
                result = await hook_fn(context)
            except Exception as e:
                logger.info(
                    "Hook '%s' aborted %s on '%s': %s",
                    definition.name,
                    context.event.value,
                    context.collection,
                    e,
                )
                return HookResult(abort=f"Hook '{definition.name}' failed: {e}", error=e)

            if result is None:
                continue

            if result.abort:
                return result

            # Merge updates into context record (compounding)
            if result.update:
                context.record.update(result.update)
                merged_updates.update(result.update)

        if merged_updates:
            return HookResult(update=merged_updates)

        return None
