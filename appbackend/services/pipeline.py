"""
AppBackend — Generic Insert Pipeline
=====================================

What:  The single create-operation executor behind every POST endpoint.
How:   Strictly ordered steps, short-circuiting on the first exception:

    ┌──────────┐  ┌──────────┐  ┌────────────┐  ┌────────┐  ┌──────────────┐
    │ 1 Decode │─▶│ 2 Stamp  │─▶│ 3 Pre-     │─▶│ 4 Write│─▶│ 6 Post-      │
    │   body   │  │ identity │  │   checks   │  │ +commit│  │   actions    │
    └──────────┘  └──────────┘  └────────────┘  └────────┘  └──────────────┘
     Validation    Authentication  Forbidden/     Internal     PostActionError
     Error         Error           NotFound/                   (row kept)
                                   Conflict

Stages:
    Pre-checks and post-actions are async callables `stage(ctx) -> None`
    that raise to fail. They receive the request's InsertContext:

        field           written by              read by
        ─────────────   ─────────────────────   ──────────────────────────────
        descriptor      constructor             every stage
        db, identity    run()                   every stage
        body, obj       step 1                  step 2, pre-checks, step 4
        obj.user_id     step 2                  pre-checks, post-actions
        inserted_id     step 5                  post-actions, response
        headers         post-actions            response

Failure policy:
    Nothing is written before step 4, so a failed decode, identity or
    pre-check leaves no row behind. Once step 4 has committed, post-action
    failures are reported as PostActionError and the row stays: fan-out gaps
    are repaired out of band, never by undoing the primary write.
"""

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Optional, Sequence

import pydantic
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from appbackend.exceptions import InternalError, PostActionError, ValidationError
from appbackend.services.identity import Identity, stamp_identity
from appbackend.services.registry import ResourceDescriptor, ResourceKind, get_descriptor

logger = logging.getLogger(__name__)


@dataclass
class InsertContext:
    """Request-scoped state threaded through every pipeline stage."""

    descriptor: ResourceDescriptor
    db: AsyncSession
    identity: Optional[Identity]
    body: Optional[pydantic.BaseModel] = None
    obj: Any = None
    inserted_id: Optional[uuid.UUID] = None
    headers: Dict[str, str] = field(default_factory=dict)


Stage = Callable[[InsertContext], Awaitable[None]]


@dataclass(frozen=True)
class InsertResult:
    id: uuid.UUID
    headers: Dict[str, str]


def _stage_name(stage: Stage) -> str:
    return getattr(stage, "__name__", type(stage).__name__)


class InsertPipeline:
    """
    Create executor for one resource kind.

    Example:
        create_plant = InsertPipeline(
            ResourceKind.PLANT,
            pre_checks=[check_parent_access()],
            post_actions=[userend_object_sync],
        )
        result = await create_plant.run(db, b'{"boxID": "..."}', identity)
    """

    def __init__(
        self,
        kind: ResourceKind,
        pre_checks: Sequence[Stage] = (),
        post_actions: Sequence[Stage] = (),
    ):
        self.descriptor = get_descriptor(kind)
        self.pre_checks = tuple(pre_checks)
        self.post_actions = tuple(post_actions)

    def decode(self, raw_body: bytes) -> pydantic.BaseModel:
        """Step 1: raw JSON → the kind's body model."""
        try:
            return self.descriptor.schema.model_validate_json(raw_body or b"")
        except pydantic.ValidationError as e:
            raise ValidationError(
                message=f"Invalid {self.descriptor.collection} body",
                context={
                    "errors": [
                        {"loc": list(err["loc"]), "msg": err["msg"]}
                        for err in e.errors(include_url=False)
                    ]
                },
            )

    async def _persist(self, ctx: InsertContext) -> None:
        """Step 4: the only write of the happy path, committed on its own."""
        ctx.obj.id = uuid.uuid4()
        ctx.db.add(ctx.obj)
        try:
            await ctx.db.commit()
        except SQLAlchemyError as e:
            await ctx.db.rollback()
            logger.error(
                "Insert into %s failed: %s", self.descriptor.collection, str(e), exc_info=True
            )
            raise InternalError(
                message=f"Could not store the {self.descriptor.collection} entry",
                context={"error_type": type(e).__name__},
            )

    async def run(
        self,
        db: AsyncSession,
        raw_body: bytes,
        identity: Optional[Identity] = None,
    ) -> InsertResult:
        """
        Executes steps 1-7 for one request.

        Returns:
            InsertResult with the new id and the headers set by post-actions.

        Raises:
            ValidationError, AuthenticationError, ForbiddenError, NotFoundError,
            ConflictError: before any write.
            InternalError: the primary write failed.
            PostActionError: the row exists but a post-action failed.
        """
        ctx = InsertContext(descriptor=self.descriptor, db=db, identity=identity)

        # ── Step 1: Decode ────────────────────────────────────────────────
        ctx.body = self.decode(raw_body)
        ctx.obj = self.descriptor.build(ctx.body)

        # ── Step 2: Identity, before any other check ──────────────────────
        stamp_identity(ctx)

        # ── Step 3: Pre-checks ────────────────────────────────────────────
        for check in self.pre_checks:
            await check(ctx)

        # ── Step 4: Persist ───────────────────────────────────────────────
        await self._persist(ctx)

        # ── Step 5: Expose the new id ─────────────────────────────────────
        ctx.inserted_id = ctx.obj.id
        logger.info("Created %s %s", self.descriptor.collection, ctx.inserted_id)

        # ── Step 6: Post-actions ──────────────────────────────────────────
        for action in self.post_actions:
            try:
                await action(ctx)
            except Exception as e:
                logger.error(
                    "Post-action %s failed for %s %s: %s",
                    _stage_name(action),
                    self.descriptor.collection,
                    ctx.inserted_id,
                    str(e),
                    exc_info=True,
                )
                try:
                    await db.rollback()
                except SQLAlchemyError:
                    logger.error("Rollback after failed post-action also failed")
                raise PostActionError(
                    resource=self.descriptor.collection,
                    resource_id=str(ctx.inserted_id),
                    headers=ctx.headers,
                    cause=e,
                ) from e

        # ── Step 7: Response ──────────────────────────────────────────────
        return InsertResult(id=ctx.inserted_id, headers=dict(ctx.headers))
