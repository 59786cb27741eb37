"""Built-in hooks.

Each hook is registered under the name collection metadata binds it by:
- linkExternalIdentity (users, authSuccess)
- normalizeDisplayName (users, createRequest)
- acceptInvitation (group_invitations, updateRequest)
"""

from lootbase.handlers.identity_link import link_external_identity
from lootbase.handlers.invitation_acceptance import (
    DEFAULT_MAX_ATTEMPTS,
    add_group_member,
    create_accept_invitation,
)
from lootbase.handlers.name_normalization import normalize_display_name, strip_discriminator
from lootbase.hooks.registry import HookRegistry


def register_builtin_hooks(
    registry: HookRegistry,
    membership_max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> None:
    """Register the built-in hooks on a registry."""
    registry.register("linkExternalIdentity", link_external_identity)
    registry.register("normalizeDisplayName", normalize_display_name)
    registry.register("acceptInvitation", create_accept_invitation(membership_max_attempts))


__all__ = [
    "add_group_member",
    "create_accept_invitation",
    "link_external_identity",
    "normalize_display_name",
    "register_builtin_hooks",
    "strip_discriminator",
]
