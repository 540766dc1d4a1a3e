"""
AppBackend — Ownership Guard Tests
===================================

What we test:
    ✅ Own parent → granted
    ✅ Parent of another user → ForbiddenError
    ✅ Optional null or dangling parent → granted
    ✅ Required null or dangling parent → NotFoundError
    ✅ The walk is transitive: a foreign grandparent is denied
    ✅ require_exists overrides the registry flag for the first link
"""

import uuid

import pytest

from appbackend.exceptions import ForbiddenError, NotFoundError
from appbackend.models import Box, Device, Feed, FeedEntry, Plant
from appbackend.services.ownership import OwnershipGuard
from appbackend.services.registry import ResourceKind


class TestDirectParent:

    def setup_method(self):
        self.guard = OwnershipGuard()

    @pytest.mark.asyncio
    async def test_own_parent_is_granted(self, db_session, make_user, make_resource):
        alice = await make_user("alice")
        feed = await make_resource(Feed, alice)

        await self.guard.check_access(db_session, alice.id, ResourceKind.FEED_ENTRY, feed.id)

    @pytest.mark.asyncio
    async def test_foreign_parent_is_forbidden(self, db_session, make_user, make_resource):
        alice = await make_user("alice")
        bob = await make_user("bob")
        feed = await make_resource(Feed, bob)

        with pytest.raises(ForbiddenError) as exc_info:
            await self.guard.check_access(db_session, alice.id, ResourceKind.FEED_ENTRY, feed.id)

        assert exc_info.value.context["resource"] == "feeds"
        assert exc_info.value.context["resource_id"] == str(feed.id)

    @pytest.mark.asyncio
    async def test_optional_null_parent_is_granted(self, db_session, make_user):
        alice = await make_user("alice")
        await self.guard.check_access(db_session, alice.id, ResourceKind.PLANT, None)

    @pytest.mark.asyncio
    async def test_optional_dangling_parent_is_granted(self, db_session, make_user):
        alice = await make_user("alice")
        await self.guard.check_access(db_session, alice.id, ResourceKind.PLANT, uuid.uuid4())

    @pytest.mark.asyncio
    async def test_root_kind_has_nothing_to_check(self, mock_db_session):
        await self.guard.check_access(mock_db_session, uuid.uuid4(), ResourceKind.DEVICE, None)
        mock_db_session.execute.assert_not_awaited()


class TestRequiredParent:

    def setup_method(self):
        self.guard = OwnershipGuard()

    @pytest.mark.asyncio
    async def test_box_without_device_is_not_found(self, db_session, make_user):
        alice = await make_user("alice")
        with pytest.raises(NotFoundError):
            await self.guard.check_access(db_session, alice.id, ResourceKind.BOX, None)

    @pytest.mark.asyncio
    async def test_box_with_missing_device_is_not_found(self, db_session, make_user):
        alice = await make_user("alice")
        missing = uuid.uuid4()
        with pytest.raises(NotFoundError) as exc_info:
            await self.guard.check_access(db_session, alice.id, ResourceKind.BOX, missing)
        assert exc_info.value.context["resource_id"] == str(missing)

    @pytest.mark.asyncio
    async def test_require_exists_override(self, db_session, make_user):
        alice = await make_user("alice")
        with pytest.raises(NotFoundError):
            await self.guard.check_access(
                db_session, alice.id, ResourceKind.PLANT, uuid.uuid4(), require_exists=True
            )
        await self.guard.check_access(
            db_session, alice.id, ResourceKind.BOX, None, require_exists=False
        )


class TestTransitiveWalk:

    def setup_method(self):
        self.guard = OwnershipGuard()

    @pytest.mark.asyncio
    async def test_full_chain_owned(self, db_session, make_user, make_resource):
        alice = await make_user("alice")
        device = await make_resource(Device, alice)
        box = await make_resource(Box, alice, device_id=device.id)
        plant = await make_resource(Plant, alice, box_id=box.id)

        await self.guard.check_access(db_session, alice.id, ResourceKind.TIMELAPSE, plant.id)

    @pytest.mark.asyncio
    async def test_foreign_grandparent_is_forbidden(self, db_session, make_user, make_resource):
        alice = await make_user("alice")
        bob = await make_user("bob")
        # Alice's box sits on Bob's device
        device = await make_resource(Device, bob)
        box = await make_resource(Box, alice, device_id=device.id)

        with pytest.raises(ForbiddenError) as exc_info:
            await self.guard.check_access(db_session, alice.id, ResourceKind.PLANT, box.id)

        assert exc_info.value.context["resource"] == "devices"

    @pytest.mark.asyncio
    async def test_required_link_above_parent_is_enforced(
        self, db_session, make_user, make_resource
    ):
        alice = await make_user("alice")
        # A box whose device reference points nowhere
        box = await make_resource(Box, alice, device_id=uuid.uuid4())

        with pytest.raises(NotFoundError):
            await self.guard.check_access(db_session, alice.id, ResourceKind.PLANT, box.id)

    @pytest.mark.asyncio
    async def test_optional_link_above_parent_stops_walk(
        self, db_session, make_user, make_resource
    ):
        alice = await make_user("alice")
        entry = await make_resource(FeedEntry, alice, feed_id=uuid.uuid4())

        await self.guard.check_access(db_session, alice.id, ResourceKind.FEED_MEDIA, entry.id)
