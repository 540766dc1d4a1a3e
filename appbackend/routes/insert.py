"""
AppBackend — Create Endpoints
==============================

What:  The POST endpoints that create users, devices and journal resources.
How:   One InsertPipeline per kind, assembled below from the shared stages;
       a single endpoint factory turns each pipeline into a route. The raw
       body goes to the pipeline undecoded so a malformed body surfaces as
       its ValidationError.

Endpoint table:
    path            kind            pre-checks                   post-actions
    /user           users           unique nickname, hash pwd    -
    /userend        userends        -                            enrollment
    /box            boxes           parent device (required)     mirror
    /plant          plants          parent box                   mirror
    /timelapse      timelapses      parent plant                 mirror
    /device         devices         -                            mirror
    /feed           feeds           -                            mirror
    /feedEntry      feedentries     parent feed                  mirror
    /feedMedia      feedmedias      parent feed entry            mirror
    /plantsharing   plantsharings   parent feed entry            -
"""

import logging
from typing import Dict, Optional

from fastapi import APIRouter, Depends, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from appbackend.database import get_db_session
from appbackend.routes.deps import get_optional_identity, signer
from appbackend.schemas.responses import ErrorResponse, InsertResponse
from appbackend.services.enrollment import DeviceEnrollment
from appbackend.services.fanout import fanout_replicator, userend_object_sync
from appbackend.services.identity import Identity
from appbackend.services.ownership import check_parent_access
from appbackend.services.pipeline import InsertPipeline
from appbackend.services.registry import ResourceKind
from appbackend.services.users import hash_user_password, unique_nickname

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Insert"])


# ── Pipelines ─────────────────────────────────────────────────────────────

PIPELINES: Dict[str, InsertPipeline] = {
    "/user": InsertPipeline(
        ResourceKind.USER,
        pre_checks=[unique_nickname, hash_user_password],
    ),
    "/userend": InsertPipeline(
        ResourceKind.USEREND,
        post_actions=[DeviceEnrollment(signer, fanout_replicator)],
    ),
    "/box": InsertPipeline(
        ResourceKind.BOX,
        pre_checks=[check_parent_access()],
        post_actions=[userend_object_sync],
    ),
    "/plant": InsertPipeline(
        ResourceKind.PLANT,
        pre_checks=[check_parent_access()],
        post_actions=[userend_object_sync],
    ),
    "/timelapse": InsertPipeline(
        ResourceKind.TIMELAPSE,
        pre_checks=[check_parent_access()],
        post_actions=[userend_object_sync],
    ),
    "/device": InsertPipeline(
        ResourceKind.DEVICE,
        post_actions=[userend_object_sync],
    ),
    "/feed": InsertPipeline(
        ResourceKind.FEED,
        post_actions=[userend_object_sync],
    ),
    "/feedEntry": InsertPipeline(
        ResourceKind.FEED_ENTRY,
        pre_checks=[check_parent_access()],
        post_actions=[userend_object_sync],
    ),
    "/feedMedia": InsertPipeline(
        ResourceKind.FEED_MEDIA,
        pre_checks=[check_parent_access()],
        post_actions=[userend_object_sync],
    ),
    "/plantsharing": InsertPipeline(
        ResourceKind.PLANT_SHARING,
        pre_checks=[check_parent_access()],
    ),
}


def insert_endpoint(pipeline: InsertPipeline):
    """Builds the route handler running `pipeline` for one request."""

    async def endpoint(
        request: Request,
        response: Response,
        db: AsyncSession = Depends(get_db_session),
        identity: Optional[Identity] = Depends(get_optional_identity),
    ) -> InsertResponse:
        result = await pipeline.run(db, await request.body(), identity)
        for name, value in result.headers.items():
            response.headers[name] = value
        return InsertResponse(id=str(result.id))

    endpoint.__name__ = f"create_{pipeline.descriptor.collection}"
    return endpoint


for path, pipeline in PIPELINES.items():
    router.add_api_route(
        path,
        insert_endpoint(pipeline),
        methods=["POST"],
        response_model=InsertResponse,
        responses={
            400: {"description": "Malformed body", "model": ErrorResponse},
            401: {"description": "Missing or invalid credential", "model": ErrorResponse},
            403: {"description": "Parent owned by another user", "model": ErrorResponse},
            404: {"description": "Required parent missing", "model": ErrorResponse},
            409: {"description": "Duplicate", "model": ErrorResponse},
            500: {"description": "Storage or follow-up failure", "model": ErrorResponse},
        },
        summary=f"Create a {pipeline.descriptor.collection} entry",
    )
