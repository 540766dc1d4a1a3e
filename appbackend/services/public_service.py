"""
AppBackend — Public Browsing Service
=====================================

What:  Read-only queries behind the /public endpoints: plants flagged public,
       their feed entries and medias.
How:   Plain filtered, ordered, offset/limit selects. No identity, no
       ownership checks, no fan-out. Media paths are returned as stored.
Who:   Called by routes/public.py.

Visibility rule:
    An entry or media is public when it belongs to the feed of a plant with
    `is_public = true`.
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from appbackend.config import settings
from appbackend.exceptions import InternalError, NotFoundError, ValidationError
from appbackend.models import FeedEntry, FeedMedia, Plant
from appbackend.schemas.responses import PublicPlantItem

logger = logging.getLogger(__name__)

# Entry types generated by the app itself, never shown publicly
HIDDEN_ENTRY_TYPES = ("FE_TOWELIE_INFO", "FE_PRODUCTS")


def validate_page(offset: int, limit: int, max_limit: Optional[int] = None) -> None:
    """Raises ValidationError unless 0 <= offset and 1 <= limit <= max_limit."""
    max_limit = max_limit or settings.public_max_limit
    if offset < 0:
        raise ValidationError(message="offset must not be negative", field="offset")
    if limit < 1 or limit > max_limit:
        raise ValidationError(
            message=f"limit must be between 1 and {max_limit}",
            field="limit",
            context={"max_limit": max_limit},
        )


class PublicService:
    """Stateless; every method receives the request session."""

    async def _latest_media(self, db: AsyncSession, plant: Plant) -> Optional[FeedMedia]:
        if plant.feed_id is None:
            return None
        result = await db.execute(
            select(FeedMedia)
            .join(FeedEntry, FeedMedia.feed_entry_id == FeedEntry.id)
            .where(FeedEntry.feed_id == plant.feed_id)
            .order_by(FeedMedia.created_at.desc())
            .limit(1)
        )
        return result.scalars().first()

    async def list_plants(self, db: AsyncSession, offset: int, limit: int) -> List[PublicPlantItem]:
        """
        Public plants, newest first, each with its feed's latest media.

        Query plan:
            SELECT * FROM plants WHERE is_public ORDER BY created_at DESC
            OFFSET :offset LIMIT :limit
            then one latest-media lookup per plant
        """
        validate_page(offset, limit)
        try:
            result = await db.execute(
                select(Plant)
                .where(Plant.is_public.is_(True))
                .order_by(Plant.created_at.desc())
                .offset(offset)
                .limit(limit)
            )
            items = []
            for plant in result.scalars().all():
                media = await self._latest_media(db, plant)
                items.append(
                    PublicPlantItem(
                        id=str(plant.id),
                        name=plant.name,
                        file_path=media.file_path if media else "",
                        thumbnail_path=media.thumbnail_path if media else "",
                    )
                )
            return items
        except SQLAlchemyError as e:
            logger.error("Database error listing public plants: %s", str(e), exc_info=True)
            raise InternalError(context={"error_type": type(e).__name__})

    async def get_plant(self, db: AsyncSession, plant_id: uuid.UUID) -> Plant:
        try:
            result = await db.execute(
                select(Plant).where(Plant.is_public.is_(True), Plant.id == plant_id)
            )
            plant = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching public plant %s: %s", plant_id, str(e))
            raise InternalError(context={"plant_id": str(plant_id)})
        if plant is None:
            raise NotFoundError(resource="plant", resource_id=str(plant_id))
        return plant

    async def list_feed_entries(
        self, db: AsyncSession, plant_id: uuid.UUID, offset: int, limit: int
    ) -> List[FeedEntry]:
        """Entries of a public plant's feed, newest first, app-generated types excluded."""
        validate_page(offset, limit)
        try:
            result = await db.execute(
                select(FeedEntry)
                .join(Plant, Plant.feed_id == FeedEntry.feed_id)
                .where(
                    Plant.is_public.is_(True),
                    Plant.id == plant_id,
                    FeedEntry.etype.not_in(HIDDEN_ENTRY_TYPES),
                )
                .order_by(FeedEntry.created_at.desc())
                .offset(offset)
                .limit(limit)
            )
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing feed entries of %s: %s", plant_id, str(e))
            raise InternalError(context={"plant_id": str(plant_id)})

    def _public_medias(self):
        return (
            select(FeedMedia)
            .join(FeedEntry, FeedMedia.feed_entry_id == FeedEntry.id)
            .join(Plant, Plant.feed_id == FeedEntry.feed_id)
            .where(Plant.is_public.is_(True))
        )

    async def list_feed_medias(self, db: AsyncSession, feed_entry_id: uuid.UUID) -> List[FeedMedia]:
        try:
            result = await db.execute(
                self._public_medias().where(FeedEntry.id == feed_entry_id)
            )
            return list(result.scalars().unique().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing medias of %s: %s", feed_entry_id, str(e))
            raise InternalError(context={"feed_entry_id": str(feed_entry_id)})

    async def get_feed_media(self, db: AsyncSession, feed_media_id: uuid.UUID) -> FeedMedia:
        try:
            result = await db.execute(
                self._public_medias().where(FeedMedia.id == feed_media_id).limit(1)
            )
            media = result.scalars().first()
        except SQLAlchemyError as e:
            logger.error("Database error fetching media %s: %s", feed_media_id, str(e))
            raise InternalError(context={"feed_media_id": str(feed_media_id)})
        if media is None:
            raise NotFoundError(resource="feed media", resource_id=str(feed_media_id))
        return media


# ── Singleton Instance ────────────────────────────────────────────────────
public_service = PublicService()
