"""Record request pipeline.

Runs the create, update and auth-success flows for a collection: builds
the hook context, dispatches the hooks bound in collection metadata and
persists the result. A hook that aborts rejects the whole request and
its error is raised to the caller.
"""

import logging
from typing import Any

from lootbase.auth.types import ExternalAuthMeta, UserContext
from lootbase.errors import AuthorizationError, HookAbortError, LootbaseError
from lootbase.hooks.dispatcher import HookDispatcher
from lootbase.hooks.types import (
    HookContext,
    HookDefinition,
    HookEvent,
    HookResult,
    compute_changes,
)
from lootbase.metadata.loader import CollectionModel, MetadataLoader
from lootbase.persistence.adapter import RecordStore
from lootbase.records.types import Record

logger = logging.getLogger(__name__)


class RecordService:
    """Create, update and authenticate records with hooks applied."""

    def __init__(
        self,
        store: RecordStore,
        metadata_loader: MetadataLoader,
        dispatcher: HookDispatcher,
    ):
        self.store = store
        self.metadata_loader = metadata_loader
        self.dispatcher = dispatcher

    async def create(
        self,
        collection: str,
        data: dict[str, Any],
        user_context: UserContext | None = None,
    ) -> Record:
        """Create a record; createRequest hooks run before it is persisted."""
        model = self._collection(collection)
        record = Record(collection=collection, data=dict(data))

        ctx = HookContext(
            collection=collection,
            event=HookEvent.CREATE_REQUEST,
            record=record,
            user_context=user_context,
            store=self.store,
        )
        await self._run_hooks(model, ctx)

        self.store.save(ctx.record)
        logger.debug("Created %s/%s", collection, ctx.record.id)
        return ctx.record

    async def update(
        self,
        collection: str,
        id: str,
        changes: dict[str, Any],
        user_context: UserContext | None = None,
    ) -> Record:
        """Apply changes to a record; updateRequest hooks run before it is persisted.

        The stored record is left untouched when a hook aborts.

        Raises:
            ValueError: If changes try to move the record to another primary key
        """
        model = self._collection(collection)
        new_id = changes.get(model.primary_key, id)
        if new_id != id:
            raise ValueError(
                f"Cannot change {model.primary_key} of {collection}/{id} to '{new_id}'"
            )
        original = self.store.find_by_id(collection, id)
        record = original.copy()
        record.update(changes)

        ctx = HookContext(
            collection=collection,
            event=HookEvent.UPDATE_REQUEST,
            record=record,
            original=original,
            changes=compute_changes(record.data, original.data),
            user_context=user_context,
            store=self.store,
        )
        await self._run_hooks(model, ctx)

        self.store.save(ctx.record)
        logger.debug("Updated %s/%s", collection, id)
        return ctx.record

    def find_first(self, collection: str, field: str, value: Any) -> Record | None:
        """Look a record up by a unique field, e.g. an invitation by its token."""
        self._collection(collection)
        return self.store.find_first(collection, field, value)

    async def authenticate(self, collection: str, id: str, meta: Any = None) -> Record:
        """Handle a successful external-provider authentication for a user.

        Args:
            collection: Auth collection of the user record
            id: ID of the authenticated user record
            meta: Untyped provider metadata as received

        Returns:
            The user record as left by authSuccess hooks
        """
        model = self._collection(collection)
        if not model.auth:
            raise AuthorizationError(f"Collection '{collection}' is not an auth collection")

        user = self.store.find_by_id(collection, id)
        ctx = HookContext(
            collection=collection,
            event=HookEvent.AUTH_SUCCESS,
            record=user,
            user_context=UserContext(user_id=id, collection=collection),
            auth_meta=ExternalAuthMeta.from_payload(meta),
            store=self.store,
        )
        await self._run_hooks(model, ctx)
        return ctx.record

    async def _run_hooks(self, model: CollectionModel, ctx: HookContext) -> HookResult | None:
        definitions = [
            HookDefinition(name=h.name, description=h.description)
            for h in model.hooks_for(ctx.event)
        ]
        result = await self.dispatcher.dispatch(definitions, ctx)
        if result and result.abort:
            if isinstance(result.error, LootbaseError):
                raise result.error
            raise HookAbortError(result.abort) from result.error
        return result

    def _collection(self, name: str) -> CollectionModel:
        model = self.metadata_loader.get_collection(name)
        if model is None:
            raise ValueError(f"Unknown collection: {name}")
        return model
