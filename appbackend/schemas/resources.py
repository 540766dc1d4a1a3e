"""
AppBackend — Create Request Bodies
===================================

What:  One Pydantic model per resource kind, used by the insert pipeline to
       decode a raw JSON body ("decode into the zero-value instance").
How:   Field names match the ORM column attributes so a decoded body maps
       straight onto the model constructor; JSON keys use the mobile client's
       camel-case names through aliases (`boxID`, `feedEntryID`, ...).

Identity:
    Every owned body accepts an optional `userID`. It is decoded only so the
    override is explicit: the pipeline always replaces it with the acting
    identity before any pre-check runs.
"""

import uuid
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class CreateBody(BaseModel):
    """Base for every create body."""

    model_config = {
        "populate_by_name": True,
        "extra": "ignore",
    }

    def to_columns(self) -> Dict[str, Any]:
        """Column values for the ORM constructor; unset optionals fall back to model defaults."""
        return self.model_dump(exclude={"user_id"}, exclude_none=True)


class OwnedCreateBody(CreateBody):
    user_id: Optional[uuid.UUID] = Field(default=None, alias="userID")


# ── Accounts ──────────────────────────────────────────────────────────────

class UserCreate(CreateBody):
    nickname: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, max_length=1024)


class UserEndCreate(OwnedCreateBody):
    """A device enrollment carries no payload beyond the identity."""


# ── Roots ─────────────────────────────────────────────────────────────────

class DeviceCreate(OwnedCreateBody):
    identifier: str = Field(default="", max_length=255)
    name: str = Field(default="", max_length=255)
    ip: str = Field(default="", max_length=64)
    mdns: str = Field(default="", max_length=255)


class FeedCreate(OwnedCreateBody):
    name: str = Field(default="", max_length=255)


# ── Children ──────────────────────────────────────────────────────────────

class BoxCreate(OwnedCreateBody):
    device_id: Optional[uuid.UUID] = Field(default=None, alias="deviceID")
    device_box: Optional[int] = Field(default=None, alias="deviceBox", ge=0)
    name: str = Field(default="", max_length=255)
    settings: str = Field(default="{}")


class PlantCreate(OwnedCreateBody):
    box_id: Optional[uuid.UUID] = Field(default=None, alias="boxID")
    feed_id: Optional[uuid.UUID] = Field(default=None, alias="feedID")
    name: str = Field(default="", max_length=255)
    settings: str = Field(default="{}")
    is_public: bool = Field(default=False, alias="isPublic")


class TimelapseCreate(OwnedCreateBody):
    plant_id: Optional[uuid.UUID] = Field(default=None, alias="plantID")
    type: str = Field(default="", max_length=64)
    settings: str = Field(default="{}")


class FeedEntryCreate(OwnedCreateBody):
    feed_id: Optional[uuid.UUID] = Field(default=None, alias="feedID")
    date: Optional[datetime] = None
    etype: str = Field(default="", alias="type", max_length=64)
    params: str = Field(default="{}")


class FeedMediaCreate(OwnedCreateBody):
    feed_entry_id: Optional[uuid.UUID] = Field(default=None, alias="feedEntryID")
    file_path: str = Field(default="", alias="filePath", max_length=1024)
    thumbnail_path: str = Field(default="", alias="thumbnailPath", max_length=1024)
    params: str = Field(default="{}")


class PlantSharingCreate(OwnedCreateBody):
    feed_entry_id: Optional[uuid.UUID] = Field(default=None, alias="feedEntryID")
    to_user_id: Optional[uuid.UUID] = Field(default=None, alias="toUserID")
