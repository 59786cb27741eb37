"""Turn an accepted invitation into group membership.

When an invitation update carries accepted=true and used=true, the acting
user is appended to the invited group's members. The append is idempotent:
the contains-check runs against the group as currently stored, so a
repeated delivery of the same update neither duplicates the member nor
saves the group again.

Two acceptances for the same group can race between reading and saving
members. The store's save is a compare-and-swap on the group version, so
the losing request re-reads the group and tries again instead of
overwriting the other member.
"""

import logging

from lootbase.errors import (
    AuthorizationError,
    LootbaseError,
    PersistenceError,
    RecordNotFoundError,
    ReferenceResolutionError,
    VersionConflictError,
)
from lootbase.hooks.registry import HookFn
from lootbase.hooks.types import HookContext, HookResult
from lootbase.persistence.adapter import RecordStore

logger = logging.getLogger(__name__)

GROUPS_COLLECTION = "groups"
MEMBERS_FIELD = "members"
DEFAULT_MAX_ATTEMPTS = 5


def is_acceptance(ctx: HookContext) -> bool:
    """True when the invitation is both accepted and used."""
    invitation = ctx.record
    return invitation.get_bool("accepted") and invitation.get_bool("used")


def add_group_member(
    store: RecordStore,
    group_id: str,
    user_id: str,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> bool:
    """Append user_id to the group's members unless already present.

    Returns:
        True if the group was saved, False if the user already was a member

    Raises:
        ReferenceResolutionError: If the group cannot be loaded
        PersistenceError: If saving fails or conflicts persist past max_attempts
    """
    if not group_id:
        raise ReferenceResolutionError("Invitation has no group reference")

    for attempt in range(1, max_attempts + 1):
        try:
            group = store.find_by_id(GROUPS_COLLECTION, group_id)
        except RecordNotFoundError as e:
            raise ReferenceResolutionError(f"Group '{group_id}' not found") from e
        except LootbaseError as e:
            raise ReferenceResolutionError(f"Failed to load group '{group_id}': {e}") from e

        members = group.get_string_list(MEMBERS_FIELD)
        if user_id in members:
            return False

        group.set(MEMBERS_FIELD, [*members, user_id])
        try:
            store.save(group)
        except VersionConflictError:
            logger.info(
                "Group %s changed while adding %s (attempt %d/%d), retrying",
                group_id,
                user_id,
                attempt,
                max_attempts,
            )
            continue
        return True

    raise PersistenceError(
        f"Could not add '{user_id}' to group '{group_id}' after {max_attempts} attempts"
    )


def create_accept_invitation(max_attempts: int = DEFAULT_MAX_ATTEMPTS) -> HookFn:
    """Build the acceptInvitation hook with the given retry budget."""

    async def accept_invitation(ctx: HookContext) -> HookResult | None:
        if not is_acceptance(ctx):
            return None

        if ctx.user_context is None or not ctx.user_context.user_id:
            raise AuthorizationError("missing authenticated user on invitation acceptance")

        user_id = ctx.user_context.user_id
        group_id = ctx.record.get_string("group")

        if add_group_member(ctx.store, group_id, user_id, max_attempts):
            logger.info(
                "Invitation %s accepted: added %s to group %s",
                ctx.record.id,
                user_id,
                group_id,
            )
        else:
            logger.debug("User %s already in group %s", user_id, group_id)
        return None

    return accept_invitation
