"""Hook registry for lootbase.

Provides registration and lookup for hook implementations. A registry is
an ordinary instance built by the composition root, so tests and
applications each wire their own set of hooks.
"""

from collections.abc import Awaitable, Callable

from lootbase.hooks.types import HookContext, HookResult

# Hook function signature: async (HookContext) -> HookResult | None
HookFn = Callable[[HookContext], Awaitable[HookResult | None]]


class HookRegistry:
    """Registry for hook implementations.

    Hooks must be registered before collection metadata can reference
    them by name.

    Example:
        registry = HookRegistry()

        @registry.hook("normalizeDisplayName")
        async def normalize_display_name(ctx: HookContext) -> HookResult:
            ...
    """

    def __init__(self) -> None:
        self._hooks: dict[str, HookFn] = {}

    def register(self, name: str, hook_fn: HookFn) -> None:
        """Register a hook function by name.

        Idempotent — re-registering the same name is a no-op.

        Args:
            name: Unique identifier for the hook
            hook_fn: Async function implementing the hook
        """
        if name in self._hooks:
            return
        self._hooks[name] = hook_fn

    def get(self, name: str) -> HookFn:
        """Get a registered hook function by name.

        Raises:
            ValueError: If hook is not registered
        """
        if name not in self._hooks:
            raise ValueError(
                f"Hook '{name}' is not registered. "
                "Hooks must be registered when the application is built."
            )
        return self._hooks[name]

    def is_registered(self, name: str) -> bool:
        """Check if a hook is registered."""
        return name in self._hooks

    def list_registered(self) -> list[str]:
        """List all registered hook names."""
        return sorted(self._hooks.keys())

    def hook(self, name: str) -> Callable[[HookFn], HookFn]:
        """Decorator to register a hook function on this registry."""

        def decorator(fn: HookFn) -> HookFn:
            self.register(name, fn)
            return fn

        return decorator
