"""
AppBackend — Per-Device Fan-Out
================================

What:  Materializes the mirror rows ("userend objects") that tell each of a
       user's devices which resources it still has to pull.
How:   Two complementary writers:

    FanoutReplicator.snapshot   new device  × every existing resource
    UserEndObjectSync           new resource × every existing device

    Together every device ends up with a dirty mirror row for each resource
    that existed, or was created, while it was enrolled. There is no bound
    on when, and no transaction around the whole operation.

Idempotence:
    Neither writer deduplicates. Calling `snapshot` twice for the same
    (user, device) doubles the mirror rows; the enrollment post-action is its
    only caller and runs it once per freshly created UserEnd.
"""

import logging
import uuid
from typing import Mapping, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from appbackend.models import UserEnd
from appbackend.services.registry import (
    FANOUT_KINDS,
    REGISTRY,
    ResourceDescriptor,
    ResourceKind,
)

logger = logging.getLogger(__name__)


class FanoutReplicator:
    """Copies a user's existing resources into a new device's mirror tables."""

    def __init__(
        self,
        kinds: Sequence[ResourceKind] = FANOUT_KINDS,
        registry: Mapping[ResourceKind, ResourceDescriptor] = REGISTRY,
    ):
        self.descriptors = [registry[kind] for kind in kinds]

    async def snapshot(
        self, db: AsyncSession, user_id: uuid.UUID, userend_id: uuid.UUID
    ) -> int:
        """
        Creates one dirty mirror row per resource of `user_id` for `userend_id`.

        Collections are committed one at a time; a failure part-way leaves
        the earlier collections replicated.

        Returns:
            Number of mirror rows created.
        """
        total = 0
        for descriptor in self.descriptors:
            model = descriptor.model
            result = await db.execute(select(model.id).where(model.user_id == user_id))
            object_ids = result.scalars().all()
            for object_id in object_ids:
                db.add(descriptor.mirror_model.for_object(userend_id, object_id))
            await db.commit()
            total += len(object_ids)
            logger.debug(
                "Snapshot %s: %d rows for userend %s",
                descriptor.collection, len(object_ids), userend_id,
            )

        logger.info("Snapshot for userend %s: %d mirror rows", userend_id, total)
        return total


class UserEndObjectSync:
    """
    Post-action for mirrored kinds: one dirty mirror row of the new resource
    for every device the owner has already enrolled.
    """

    __name__ = "userend_object_sync"

    async def __call__(self, ctx) -> None:
        descriptor = ctx.descriptor
        if descriptor.mirror_model is None:
            return

        result = await ctx.db.execute(
            select(UserEnd.id).where(UserEnd.user_id == ctx.obj.user_id)
        )
        userend_ids = result.scalars().all()
        for userend_id in userend_ids:
            ctx.db.add(descriptor.mirror_model.for_object(userend_id, ctx.inserted_id))
        await ctx.db.commit()

        logger.debug(
            "Mirrored %s %s to %d userends",
            descriptor.collection, ctx.inserted_id, len(userend_ids),
        )


fanout_replicator = FanoutReplicator()
userend_object_sync = UserEndObjectSync()
