"""
AppBackend — Ownership-Bearing Resource Models
===============================================

What:  Tables for every resource a user owns: devices, boxes, plants,
       time-lapses, feeds, feed entries, feed medias and plant sharings.
How:   Each model mixes in `OwnedResource` (id, user_id, timestamps) and adds
       its descriptive columns plus, where declared in the registry, a parent
       reference column.

Parent references are plain indexed UUID columns, not foreign keys: the
ownership guard owns the parent semantics (including optional parents that
may point nowhere), and the store is used as a generic keyed-row store.

    Device ◄── Box ◄── Plant ◄── Timelapse
    Feed   ◄── FeedEntry ◄── FeedMedia
                         ◄── PlantSharing
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import Boolean, DateTime, Integer, String, Text, Uuid, false, text
from sqlalchemy.orm import Mapped, mapped_column

from appbackend.database import Base
from appbackend.models.user import utcnow


class OwnedResource:
    """Columns shared by every ownership-bearing table."""

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    # Always stamped by the server from the acting identity
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False, index=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        return f"<{type(self).__name__}(id={self.id}, user_id={self.user_id})>"


# ── Roots ─────────────────────────────────────────────────────────────────

class Device(OwnedResource, Base):
    """A physical controller on the user's network."""

    __tablename__ = "devices"

    identifier: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    ip: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    mdns: Mapped[str] = mapped_column(String(255), nullable=False, default="")


class Feed(OwnedResource, Base):
    """A journal: the ordered stream of entries attached to a plant."""

    __tablename__ = "feeds"

    name: Mapped[str] = mapped_column(String(255), nullable=False, default="")


# ── Device subtree ────────────────────────────────────────────────────────

class Box(OwnedResource, Base):
    """A grow box; must be attached to one of the owner's devices."""

    __tablename__ = "boxes"

    device_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True, index=True)
    # Slot of the box on its device (a controller drives several boxes)
    device_box: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    settings: Mapped[str] = mapped_column(Text, nullable=False, default="{}")


class Plant(OwnedResource, Base):
    __tablename__ = "plants"

    box_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True, index=True)
    feed_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    settings: Mapped[str] = mapped_column(Text, nullable=False, default="{}")
    is_public: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false(), index=True
    )


class Timelapse(OwnedResource, Base):
    __tablename__ = "timelapses"

    plant_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True, index=True)
    type: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    settings: Mapped[str] = mapped_column(Text, nullable=False, default="{}")


# ── Feed subtree ──────────────────────────────────────────────────────────

class FeedEntry(OwnedResource, Base):
    __tablename__ = "feedentries"

    feed_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True, index=True)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    # Entry type tag, e.g. FE_WATER, FE_MEDIA, FE_TOWELIE_INFO
    etype: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    params: Mapped[str] = mapped_column(Text, nullable=False, default="{}")


class FeedMedia(OwnedResource, Base):
    __tablename__ = "feedmedias"

    feed_entry_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True, index=True)
    file_path: Mapped[str] = mapped_column(String(1024), nullable=False, default="")
    thumbnail_path: Mapped[str] = mapped_column(String(1024), nullable=False, default="")
    params: Mapped[str] = mapped_column(Text, nullable=False, default="{}")


class PlantSharing(OwnedResource, Base):
    __tablename__ = "plantsharings"

    feed_entry_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True, index=True)
    to_user_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)
