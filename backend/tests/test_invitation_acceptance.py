"""Tests for turning accepted invitations into group membership."""

import asyncio
import threading
from pathlib import Path
from unittest.mock import patch

import pytest

from lootbase.app import AppConfig, build_app
from lootbase.auth.types import UserContext
from lootbase.errors import (
    AuthorizationError,
    PersistenceError,
    ReferenceResolutionError,
    VersionConflictError,
)
from lootbase.handlers.invitation_acceptance import add_group_member
from lootbase.persistence import DatabaseConfig
from lootbase.persistence.sqlite import SQLiteRecordStore
from lootbase.records.types import Record

METADATA_PATH = Path(__file__).resolve().parents[2] / "metadata"

ACCEPT = {"accepted": True, "used": True}


class InterleavingStore(SQLiteRecordStore):
    """Simulates another request adding a member between our read and save."""

    def __init__(self, db_path=":memory:"):
        super().__init__(db_path)
        self.intruder: str | None = None

    def find_by_id(self, collection, id):
        record = super().find_by_id(collection, id)
        if collection == "groups" and self.intruder:
            other = super().find_by_id(collection, id)
            other.set("members", [*other.get_string_list("members"), self.intruder])
            self.intruder = None
            super().save(other)
        return record


def make_config(**kwargs) -> AppConfig:
    return AppConfig(
        database=DatabaseConfig(url="sqlite:///:memory:"),
        metadata_path=METADATA_PATH,
        **kwargs,
    )


@pytest.fixture
def app():
    app = build_app(make_config())
    yield app
    app.close()


def seed(app, members=("u1",)):
    """Create group g1 with members and a pending invitation i1 to it."""
    app.store.save(
        Record("groups", {"id": "g1", "name": "Hunters", "owner": "u1", "members": list(members)})
    )
    app.store.save(
        Record(
            "group_invitations",
            {"id": "i1", "group": "g1", "inviter": "u1", "token": "tok-1"},
        )
    )


def group_saves(save_spy) -> int:
    return sum(1 for c in save_spy.call_args_list if c.args[0].collection == "groups")


class TestPendingInvitations:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "changes",
        [
            {"accepted": False, "used": False},
            {"accepted": True, "used": False},
            {"accepted": False, "used": True},
        ],
        ids=["pending", "accepted-unused", "declined"],
    )
    async def test_group_unchanged(self, app, changes):
        seed(app)
        with patch.object(app.store, "save", wraps=app.store.save) as save_spy:
            invitation = await app.records.update(
                "group_invitations", "i1", changes, UserContext(user_id="u2")
            )

        assert group_saves(save_spy) == 0
        assert app.store.find_by_id("groups", "g1").get("members") == ["u1"]
        assert invitation.get("used") is changes["used"]

    @pytest.mark.asyncio
    async def test_pending_without_actor_is_allowed(self, app):
        seed(app)
        await app.records.update("group_invitations", "i1", {"token": "tok-2"})
        assert app.store.find_by_id("group_invitations", "i1").get("token") == "tok-2"


class TestAcceptance:
    @pytest.mark.asyncio
    async def test_adds_actor_to_group(self, app):
        seed(app)
        await app.records.update("group_invitations", "i1", ACCEPT, UserContext(user_id="u2"))

        members = app.store.find_by_id("groups", "g1").get("members")
        assert set(members) == {"u1", "u2"}
        assert len(members) == 2

    @pytest.mark.asyncio
    async def test_invitation_is_persisted(self, app):
        seed(app)
        await app.records.update("group_invitations", "i1", ACCEPT, UserContext(user_id="u2"))

        invitation = app.store.find_by_id("group_invitations", "i1")
        assert invitation.get("accepted") is True
        assert invitation.get("used") is True

    @pytest.mark.asyncio
    async def test_repeated_delivery_is_idempotent(self, app):
        seed(app)
        actor = UserContext(user_id="u2")
        await app.records.update("group_invitations", "i1", ACCEPT, actor)

        with patch.object(app.store, "save", wraps=app.store.save) as save_spy:
            await app.records.update("group_invitations", "i1", ACCEPT, actor)

        assert group_saves(save_spy) == 0
        assert sorted(app.store.find_by_id("groups", "g1").get("members")) == ["u1", "u2"]

    @pytest.mark.asyncio
    async def test_existing_member_is_not_saved_again(self, app):
        seed(app, members=("u1", "u2"))
        with patch.object(app.store, "save", wraps=app.store.save) as save_spy:
            await app.records.update(
                "group_invitations", "i1", ACCEPT, UserContext(user_id="u2")
            )

        assert group_saves(save_spy) == 0

    @pytest.mark.asyncio
    async def test_accept_invitation_found_by_token(self, app):
        seed(app)
        invitation = app.records.find_first("group_invitations", "token", "tok-1")
        assert invitation.id == "i1"

        await app.records.update(
            "group_invitations", invitation.id, ACCEPT, UserContext(user_id="u2")
        )
        assert sorted(app.store.find_by_id("groups", "g1").get("members")) == ["u1", "u2"]

    def test_unknown_token_finds_nothing(self, app):
        seed(app)
        assert app.records.find_first("group_invitations", "token", "tok-404") is None

    @pytest.mark.asyncio
    async def test_empty_group_gets_first_member(self, app):
        seed(app, members=())
        await app.records.update("group_invitations", "i1", ACCEPT, UserContext(user_id="u2"))
        assert app.store.find_by_id("groups", "g1").get("members") == ["u2"]


class TestAcceptanceFailures:
    @pytest.mark.asyncio
    async def test_missing_actor_raises_authorization_error(self, app):
        seed(app)
        with pytest.raises(AuthorizationError, match="missing authenticated user"):
            await app.records.update("group_invitations", "i1", ACCEPT)

        assert app.store.find_by_id("groups", "g1").get("members") == ["u1"]
        assert app.store.find_by_id("group_invitations", "i1").get("used") is False

    @pytest.mark.asyncio
    async def test_empty_actor_id_raises_authorization_error(self, app):
        seed(app)
        with pytest.raises(AuthorizationError, match="missing authenticated user"):
            await app.records.update(
                "group_invitations", "i1", ACCEPT, UserContext(user_id="")
            )

        assert app.store.find_by_id("groups", "g1").get("members") == ["u1"]
        assert app.store.find_by_id("group_invitations", "i1").get("accepted") is False

    @pytest.mark.asyncio
    async def test_missing_group_raises_reference_error(self, app):
        seed(app)
        app.store.save(Record("group_invitations", {"id": "i2", "group": "g404"}))

        with pytest.raises(ReferenceResolutionError, match="g404"):
            await app.records.update(
                "group_invitations", "i2", ACCEPT, UserContext(user_id="u2")
            )

        assert app.store.find_by_id("group_invitations", "i2").get("accepted") is False

    @pytest.mark.asyncio
    async def test_empty_group_reference_raises_reference_error(self, app):
        app.store.save(Record("group_invitations", {"id": "i3"}))
        with pytest.raises(ReferenceResolutionError):
            await app.records.update(
                "group_invitations", "i3", ACCEPT, UserContext(user_id="u2")
            )

    @pytest.mark.asyncio
    async def test_group_save_failure_rejects_update(self, app):
        seed(app)
        original_save = app.store.save

        def failing_save(record):
            if record.collection == "groups":
                raise PersistenceError("disk full")
            return original_save(record)

        with patch.object(app.store, "save", side_effect=failing_save):
            with pytest.raises(PersistenceError, match="disk full"):
                await app.records.update(
                    "group_invitations", "i1", ACCEPT, UserContext(user_id="u2")
                )

        assert app.store.find_by_id("group_invitations", "i1").get("used") is False
        assert app.store.find_by_id("groups", "g1").get("members") == ["u1"]


class TestConcurrentAcceptance:
    @pytest.mark.asyncio
    async def test_conflicting_write_is_retried(self):
        store = InterleavingStore()
        app = build_app(make_config(), store=store)
        try:
            seed(app)
            store.intruder = "u3"
            await app.records.update(
                "group_invitations", "i1", ACCEPT, UserContext(user_id="u2")
            )

            members = app.store.find_by_id("groups", "g1").get("members")
            assert sorted(members) == ["u1", "u2", "u3"]
        finally:
            app.close()

    def test_persistent_conflicts_exhaust_attempts(self, app):
        seed(app)
        original_save = app.store.save
        attempts = []

        def conflicting_save(record):
            if record.collection == "groups":
                attempts.append(record.version)
                raise VersionConflictError("groups", record.id, record.version)
            return original_save(record)

        with patch.object(app.store, "save", side_effect=conflicting_save):
            with pytest.raises(PersistenceError, match="after 3 attempts"):
                add_group_member(app.store, "g1", "u2", max_attempts=3)

        assert len(attempts) == 3

    def test_parallel_acceptances_keep_every_member(self):
        app = build_app(make_config(membership_max_attempts=50))
        users = [f"u{i}" for i in range(2, 10)]
        try:
            app.store.save(Record("groups", {"id": "g1", "name": "Hunters", "members": ["u1"]}))
            for user in users:
                app.store.save(
                    Record("group_invitations", {"id": f"inv-{user}", "group": "g1"})
                )

            errors = []
            barrier = threading.Barrier(len(users))

            def accept(user):
                barrier.wait()
                try:
                    asyncio.run(
                        app.records.update(
                            "group_invitations",
                            f"inv-{user}",
                            ACCEPT,
                            UserContext(user_id=user),
                        )
                    )
                except Exception as e:  # collected for the assertion below
                    errors.append(e)

            threads = [threading.Thread(target=accept, args=(u,)) for u in users]
            for t in threads:
                t.start()
            for t in threads:
                t.join()

            assert errors == []
            members = app.store.find_by_id("groups", "g1").get("members")
            assert sorted(members) == sorted(["u1", *users])
        finally:
            app.close()


class TestAddGroupMember:
    def test_returns_whether_group_was_saved(self, app):
        seed(app)
        assert add_group_member(app.store, "g1", "u2") is True
        assert add_group_member(app.store, "g1", "u2") is False
