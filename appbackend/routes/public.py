"""
AppBackend — Public Browsing Routes
====================================

What:  Read-only, unauthenticated access to plants flagged public and to the
       entries and medias of their feeds.
How:   Thin handlers over PublicService; out-of-range `offset`/`limit` are
       reported by the service as ValidationError (400).
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from appbackend.database import get_db_session
from appbackend.schemas.responses import (
    ErrorResponse,
    FeedEntryResponse,
    FeedMediaResponse,
    PlantResponse,
    PublicFeedEntriesResponse,
    PublicFeedMediasResponse,
    PublicPlantsResponse,
)
from appbackend.services.public_service import public_service

router = APIRouter(prefix="/public", tags=["Public"])


@router.get(
    "/plants",
    response_model=PublicPlantsResponse,
    responses={400: {"description": "Bad offset or limit", "model": ErrorResponse}},
    summary="List public plants with their latest picture",
)
async def list_public_plants(
    offset: int = Query(default=0, description="Number of plants to skip"),
    limit: int = Query(default=10, description="Page size"),
    db: AsyncSession = Depends(get_db_session),
) -> PublicPlantsResponse:
    plants = await public_service.list_plants(db, offset=offset, limit=limit)
    return PublicPlantsResponse(plants=plants)


@router.get(
    "/plant/{plant_id}",
    response_model=PlantResponse,
    responses={404: {"description": "No such public plant", "model": ErrorResponse}},
)
async def get_public_plant(
    plant_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> PlantResponse:
    plant = await public_service.get_plant(db, plant_id)
    return PlantResponse.model_validate(plant)


@router.get(
    "/plant/{plant_id}/feedEntries",
    response_model=PublicFeedEntriesResponse,
    responses={400: {"description": "Bad offset or limit", "model": ErrorResponse}},
)
async def list_public_feed_entries(
    plant_id: UUID,
    offset: int = Query(default=0),
    limit: int = Query(default=10),
    db: AsyncSession = Depends(get_db_session),
) -> PublicFeedEntriesResponse:
    entries = await public_service.list_feed_entries(db, plant_id, offset=offset, limit=limit)
    return PublicFeedEntriesResponse(
        entries=[FeedEntryResponse.model_validate(e) for e in entries]
    )


@router.get(
    "/feedEntry/{feed_entry_id}/feedMedias",
    response_model=PublicFeedMediasResponse,
)
async def list_public_feed_medias(
    feed_entry_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> PublicFeedMediasResponse:
    medias = await public_service.list_feed_medias(db, feed_entry_id)
    return PublicFeedMediasResponse(
        medias=[FeedMediaResponse.model_validate(m) for m in medias]
    )


@router.get(
    "/feedMedia/{feed_media_id}",
    response_model=FeedMediaResponse,
    responses={404: {"description": "No such public media", "model": ErrorResponse}},
)
async def get_public_feed_media(
    feed_media_id: UUID,
    db: AsyncSession = Depends(get_db_session),
) -> FeedMediaResponse:
    media = await public_service.get_feed_media(db, feed_media_id)
    return FeedMediaResponse.model_validate(media)
