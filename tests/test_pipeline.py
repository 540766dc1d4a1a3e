"""
AppBackend — Insert Pipeline Tests
===================================

What we test:
    ✅ Malformed bodies fail before any write
    ✅ Owned kinds need an identity; the client's userID is overwritten
    ✅ Identity is stamped before pre-checks run
    ✅ Foreign parents are denied for every guarded kind, with no row written
    ✅ Optional parents may be null
    ✅ The Plant/B1 scenario
    ✅ Post-action failures keep the row and carry id and headers
    ✅ Storage failures roll back and surface as InternalError
"""

import json
import uuid

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from appbackend.exceptions import (
    AuthenticationError,
    ForbiddenError,
    InternalError,
    PostActionError,
    ValidationError,
)
from appbackend.models import (
    Box,
    Device,
    Feed,
    FeedEntry,
    FeedMedia,
    Plant,
    PlantSharing,
    Timelapse,
)
from appbackend.services.identity import Identity
from appbackend.services.ownership import check_parent_access
from appbackend.services.pipeline import InsertPipeline
from appbackend.services.registry import ResourceKind


async def count_rows(db, model, *where) -> int:
    result = await db.execute(select(func.count()).select_from(model).where(*where))
    return result.scalar()


def body(**fields) -> bytes:
    return json.dumps(fields).encode()


# Guarded kinds: the parent model and the JSON key referencing it
GUARDED = [
    (ResourceKind.BOX, Box, Device, "deviceID"),
    (ResourceKind.PLANT, Plant, Box, "boxID"),
    (ResourceKind.TIMELAPSE, Timelapse, Plant, "plantID"),
    (ResourceKind.FEED_ENTRY, FeedEntry, Feed, "feedID"),
    (ResourceKind.FEED_MEDIA, FeedMedia, FeedEntry, "feedEntryID"),
    (ResourceKind.PLANT_SHARING, PlantSharing, FeedEntry, "feedEntryID"),
]


class TestDecodeAndIdentity:

    @pytest.mark.asyncio
    async def test_malformed_json_is_validation_error(self, mock_db_session):
        pipeline = InsertPipeline(ResourceKind.FEED)
        with pytest.raises(ValidationError):
            await pipeline.run(mock_db_session, b"{not json")
        mock_db_session.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_wrong_type_reports_field(self, mock_db_session):
        pipeline = InsertPipeline(ResourceKind.PLANT)
        with pytest.raises(ValidationError) as exc_info:
            await pipeline.run(mock_db_session, body(boxID="not-a-uuid"), None)
        assert exc_info.value.context["errors"][0]["loc"] == ["boxID"]

    @pytest.mark.asyncio
    async def test_owned_kind_requires_identity(self, db_session):
        pipeline = InsertPipeline(ResourceKind.FEED)
        with pytest.raises(AuthenticationError):
            await pipeline.run(db_session, body(name="journal"), None)
        assert await count_rows(db_session, Feed) == 0

    @pytest.mark.asyncio
    async def test_client_user_id_is_overwritten(self, db_session, make_user, identity_of):
        alice = await make_user("alice")
        pipeline = InsertPipeline(ResourceKind.FEED)

        result = await pipeline.run(
            db_session, body(userID=str(uuid.uuid4()), name="journal"), identity_of(alice)
        )

        feed = await db_session.get(Feed, result.id)
        assert feed.user_id == alice.id

    @pytest.mark.asyncio
    async def test_identity_is_stamped_before_pre_checks(
        self, db_session, make_user, identity_of
    ):
        alice = await make_user("alice")
        seen = []

        async def record(ctx):
            seen.append(ctx.obj.user_id)

        pipeline = InsertPipeline(ResourceKind.DEVICE, pre_checks=[record])
        await pipeline.run(db_session, body(name="controller"), identity_of(alice))

        assert seen == [alice.id]


class TestOwnershipInPipeline:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("kind,model,parent_model,key", GUARDED)
    async def test_foreign_parent_is_forbidden_and_nothing_written(
        self, kind, model, parent_model, key,
        db_session, make_user, make_resource, identity_of,
    ):
        alice = await make_user("alice")
        bob = await make_user("bob")
        parent = await make_resource(parent_model, bob)
        before = await count_rows(db_session, model)

        pipeline = InsertPipeline(kind, pre_checks=[check_parent_access()])
        with pytest.raises(ForbiddenError):
            await pipeline.run(db_session, body(**{key: str(parent.id)}), identity_of(alice))

        assert await count_rows(db_session, model) == before

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "kind,model",
        [(k, m) for k, m, _, _ in GUARDED if k is not ResourceKind.BOX],
    )
    async def test_optional_null_parent_succeeds(
        self, kind, model, db_session, make_user, identity_of
    ):
        alice = await make_user("alice")
        pipeline = InsertPipeline(kind, pre_checks=[check_parent_access()])

        result = await pipeline.run(db_session, b"{}", identity_of(alice))

        assert await count_rows(db_session, model, model.id == result.id) == 1

    @pytest.mark.asyncio
    async def test_plant_b1_scenario(self, db_session, make_user, make_resource, identity_of):
        a = await make_user("A")
        a2 = await make_user("A2")
        device = await make_resource(Device, a)
        b1 = await make_resource(Box, a, device_id=device.id)
        pipeline = InsertPipeline(ResourceKind.PLANT, pre_checks=[check_parent_access()])

        result = await pipeline.run(db_session, body(boxID=str(b1.id)), identity_of(a))
        p1 = await db_session.get(Plant, result.id)
        assert p1.user_id == a.id
        assert p1.box_id == b1.id

        with pytest.raises(ForbiddenError):
            await pipeline.run(db_session, body(boxID=str(b1.id)), identity_of(a2))
        assert await count_rows(db_session, Plant) == 1
        assert await count_rows(db_session, Plant, Plant.user_id == a2.id) == 0


class TestFailureAfterWrite:

    @pytest.mark.asyncio
    async def test_post_action_failure_keeps_row(self, db_session, make_user, identity_of):
        alice = await make_user("alice")

        async def mint(ctx):
            ctx.headers["x-sgl-token"] = "minted"

        async def explode(ctx):
            raise RuntimeError("mirror table unavailable")

        pipeline = InsertPipeline(ResourceKind.FEED, post_actions=[mint, explode])
        with pytest.raises(PostActionError) as exc_info:
            await pipeline.run(db_session, body(name="journal"), identity_of(alice))

        err = exc_info.value
        assert err.headers == {"x-sgl-token": "minted"}
        assert isinstance(err.cause, RuntimeError)
        assert await count_rows(db_session, Feed, Feed.id == uuid.UUID(err.resource_id)) == 1

    @pytest.mark.asyncio
    async def test_later_post_actions_do_not_run(self, db_session, make_user, identity_of):
        alice = await make_user("alice")
        ran = []

        async def explode(ctx):
            raise RuntimeError("boom")

        async def after(ctx):
            ran.append(True)

        pipeline = InsertPipeline(ResourceKind.FEED, post_actions=[explode, after])
        with pytest.raises(PostActionError):
            await pipeline.run(db_session, b"{}", identity_of(alice))
        assert ran == []

    @pytest.mark.asyncio
    async def test_commit_failure_is_internal_error(self, mock_db_session):
        mock_db_session.commit.side_effect = OperationalError("INSERT", {}, Exception("disk full"))
        identity = Identity(user_id=uuid.uuid4())
        pipeline = InsertPipeline(ResourceKind.FEED)

        with pytest.raises(InternalError) as exc_info:
            await pipeline.run(mock_db_session, b"{}", identity)

        assert not isinstance(exc_info.value, PostActionError)
        mock_db_session.rollback.assert_awaited_once()
