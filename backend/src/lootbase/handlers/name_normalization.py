"""Strip the discriminator suffix from display names of new users."""

from lootbase.hooks.types import HookContext, HookResult

DISPLAY_NAME_FIELD = "displayName"
DISCRIMINATOR_SEPARATOR = "#"


def strip_discriminator(name: str, separator: str = DISCRIMINATOR_SEPARATOR) -> str:
    """Return name truncated before the first separator.

    >>> strip_discriminator("Alice#1234")
    'Alice'
    """
    idx = name.find(separator)
    if idx == -1:
        return name
    return name[:idx]


async def normalize_display_name(ctx: HookContext) -> HookResult | None:
    name = ctx.record.get_string(DISPLAY_NAME_FIELD)
    normalized = strip_discriminator(name)
    if normalized == name:
        return None
    return HookResult(update={DISPLAY_NAME_FIELD: normalized})
