"""Link the external identity provider's user id to the local user record."""

import logging

from lootbase.errors import PersistenceError
from lootbase.hooks.types import HookContext, HookResult

logger = logging.getLogger(__name__)

EXTERNAL_ID_FIELD = "externalId"


async def link_external_identity(ctx: HookContext) -> HookResult | None:
    """Store the provider id on the user when it differs from the stored one.

    Linking is best-effort: a failed save is logged and authentication
    continues.
    """
    meta = ctx.auth_meta
    if meta is None or not meta.has_provider_id:
        logger.debug("No provider id in auth metadata for user %s", ctx.record.id)
        return None

    user = ctx.record
    if user.get_string(EXTERNAL_ID_FIELD) == meta.provider_id:
        return None

    linked = user.copy()
    linked.set(EXTERNAL_ID_FIELD, meta.provider_id)
    try:
        ctx.store.save(linked)
    except PersistenceError as e:
        logger.error("Failed to save %s to user record %s: %s", EXTERNAL_ID_FIELD, user.id, e)
        return None

    user.data = linked.data
    user.version = linked.version
    logger.info("Linked user %s to external id %s", user.id, meta.provider_id)
    return None
