"""
AppBackend — Per-Device Mirror Rows ("userend objects")
========================================================

What:  One `userend_<collection>` table per fan-out collection. A row says
       "device <userend_id> must receive object <..._id>"; `dirty` marks it as
       pending sync.
Who:   Written by FanoutReplicator (enrollment snapshot) and
       UserEndObjectSync (new resource for an enrolled user). Read and
       cleared by the sync-pull side, which lives outside this service.
"""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Uuid, text, true
from sqlalchemy.orm import Mapped, mapped_column

from appbackend.database import Base
from appbackend.models.user import utcnow


class UserEndObject:
    """Columns shared by every mirror table; subclasses name their object column."""

    # Attribute holding the mirrored object's id, set by each subclass
    object_field = ""

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    userend_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
    dirty: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=true()
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    @classmethod
    def for_object(cls, userend_id: uuid.UUID, object_id: uuid.UUID) -> "UserEndObject":
        """Builds a dirty mirror row of `object_id` for device `userend_id`."""
        return cls(**{"userend_id": userend_id, cls.object_field: object_id, "dirty": True})

    @property
    def object_id(self) -> uuid.UUID:
        return getattr(self, self.object_field)

    def __repr__(self) -> str:
        return (
            f"<{type(self).__name__}(userend_id={self.userend_id}, "
            f"object_id={self.object_id}, dirty={self.dirty})>"
        )


class UserEndBox(UserEndObject, Base):
    __tablename__ = "userend_boxes"
    object_field = "box_id"

    box_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)


class UserEndPlant(UserEndObject, Base):
    __tablename__ = "userend_plants"
    object_field = "plant_id"

    plant_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)


class UserEndTimelapse(UserEndObject, Base):
    __tablename__ = "userend_timelapses"
    object_field = "timelapse_id"

    timelapse_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)


class UserEndDevice(UserEndObject, Base):
    __tablename__ = "userend_devices"
    object_field = "device_id"

    device_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)


class UserEndFeed(UserEndObject, Base):
    __tablename__ = "userend_feeds"
    object_field = "feed_id"

    feed_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)


class UserEndFeedEntry(UserEndObject, Base):
    __tablename__ = "userend_feedentries"
    object_field = "feed_entry_id"

    feed_entry_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)


class UserEndFeedMedia(UserEndObject, Base):
    __tablename__ = "userend_feedmedias"
    object_field = "feed_media_id"

    feed_media_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)
