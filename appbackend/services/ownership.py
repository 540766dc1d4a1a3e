"""
AppBackend — Ownership Guard
=============================

What:  Verifies that the acting user owns the parent a new resource points
       to, and transitively every ancestor of that parent.
How:   Walks the registry's parent relation from the new resource's declared
       parent up to a root, loading each ancestor fresh from the store.

Decision table for one link of the chain:
    reference null or row missing, link required  → NotFoundError
    reference null or row missing, link optional  → granted, walk stops
    row.user_id != acting user                    → ForbiddenError
    otherwise                                     → continue with row's parent

Every call hits the store (populate_existing): nothing is cached across
requests, and an ancestor checked earlier in the same request is checked
again.
"""

import logging
import uuid
from typing import Any, Callable, Mapping, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from appbackend.exceptions import ForbiddenError, NotFoundError
from appbackend.services.registry import REGISTRY, ResourceDescriptor, ResourceKind

logger = logging.getLogger(__name__)


class OwnershipGuard:
    """Stateless; safe to share between requests."""

    def __init__(self, registry: Mapping[ResourceKind, ResourceDescriptor] = REGISTRY):
        self.registry = registry

    async def _load(self, db: AsyncSession, kind: ResourceKind, object_id: uuid.UUID) -> Any:
        model = self.registry[kind].model
        result = await db.execute(
            select(model)
            .where(model.id == object_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def check_access(
        self,
        db: AsyncSession,
        user_id: uuid.UUID,
        kind: ResourceKind,
        parent_id: Optional[uuid.UUID],
        require_exists: Optional[bool] = None,
    ) -> None:
        """
        Grants (returns) or denies (raises) creating a `kind` under `parent_id`.

        Args:
            db:             Request session
            user_id:        The acting user
            kind:           Kind of the resource being created
            parent_id:      Value of its parent reference (may be None)
            require_exists: Overrides the registry's required-parent flag for
                            the first link only

        Raises:
            NotFoundError:  A required ancestor is missing
            ForbiddenError: An ancestor belongs to another user
        """
        descriptor = self.registry[kind]
        if descriptor.parent is None:
            return

        required = descriptor.require_parent if require_exists is None else require_exists
        current_kind: Optional[ResourceKind] = descriptor.parent
        current_id = parent_id

        # Each step moves to a strictly higher kind of an acyclic graph
        # (validate_ownership_graph), so the walk ends at a root.
        while current_kind is not None:
            if current_id is None:
                if required:
                    raise NotFoundError(resource=current_kind.value)
                return

            row = await self._load(db, current_kind, current_id)
            if row is None:
                if required:
                    raise NotFoundError(resource=current_kind.value, resource_id=str(current_id))
                return

            if row.user_id != user_id:
                logger.warning(
                    "Ownership denied: user %s creating %s under %s %s",
                    user_id, kind.value, current_kind.value, current_id,
                )
                raise ForbiddenError(resource=current_kind.value, resource_id=str(current_id))

            parent_descriptor = self.registry[current_kind]
            current_kind = parent_descriptor.parent
            current_id = parent_descriptor.parent_id(row)
            required = parent_descriptor.require_parent


ownership_guard = OwnershipGuard()


def check_parent_access(guard: OwnershipGuard = ownership_guard) -> Callable:
    """
    Pre-check stage: guards the declared parent of the resource in the context.

    Usage:
        InsertPipeline(ResourceKind.PLANT, pre_checks=[check_parent_access()])
    """

    async def check(ctx) -> None:
        await guard.check_access(
            ctx.db,
            ctx.identity.user_id,
            ctx.descriptor.kind,
            ctx.descriptor.parent_id(ctx.obj),
        )

    check.__name__ = "check_parent_access"
    return check
