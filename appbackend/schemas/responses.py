"""
AppBackend — Response Schemas
==============================

What:  Pydantic models describing what the API returns: create results,
       login status, errors, health and the public browsing payloads.
How:   Public payloads are built from ORM rows (`from_attributes`) and
       serialized with the client's camel-case keys (aliases, accepted by
       name too).
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field


# ══════════════════════════════════════════════════════════════════════════
# Write Endpoints
# ══════════════════════════════════════════════════════════════════════════


class InsertResponse(BaseModel):
    """Returned by every create endpoint. Enrollment adds the x-sgl-token header."""
    id: str = Field(description="Identifier of the created resource")


class StatusResponse(BaseModel):
    status: str = Field(default="OK")


class LoginRequest(BaseModel):
    handle: str = Field(min_length=1, max_length=255, description="User nickname")
    password: str = Field(min_length=1, max_length=1024)


# ══════════════════════════════════════════════════════════════════════════
# Errors & Health
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    Standardized error body for all API errors.

    Example:
        {
            "error": "forbidden",
            "message": "Access to the referenced boxes is denied",
            "details": {"resource": "boxes", "resource_id": "…"},
            "request_id": "a1b2c3d4"
        }
    """
    error: str = Field(description="Machine-readable error code")
    message: str = Field(description="Human-readable error description")
    details: Optional[dict] = Field(default=None, description="Additional error context")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")


class HealthResponse(BaseModel):
    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")


# ══════════════════════════════════════════════════════════════════════════
# Public Browsing
# ══════════════════════════════════════════════════════════════════════════


class PublicPlantItem(BaseModel):
    """One public plant with the latest media of its feed (empty paths if none)."""
    id: str
    name: str
    file_path: str = Field(default="", alias="filePath")
    thumbnail_path: str = Field(default="", alias="thumbnailPath")

    model_config = {"populate_by_name": True}


class PublicPlantsResponse(BaseModel):
    plants: List[PublicPlantItem]


class PlantResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID = Field(alias="userID")
    box_id: Optional[uuid.UUID] = Field(default=None, alias="boxID")
    feed_id: Optional[uuid.UUID] = Field(default=None, alias="feedID")
    name: str
    settings: str
    is_public: bool = Field(alias="isPublic")
    created_at: datetime = Field(alias="cat")

    model_config = {"from_attributes": True, "populate_by_name": True}


class FeedEntryResponse(BaseModel):
    id: uuid.UUID
    feed_id: Optional[uuid.UUID] = Field(default=None, alias="feedID")
    date: datetime
    etype: str = Field(alias="type")
    params: str
    created_at: datetime = Field(alias="cat")

    model_config = {"from_attributes": True, "populate_by_name": True}


class PublicFeedEntriesResponse(BaseModel):
    entries: List[FeedEntryResponse]


class FeedMediaResponse(BaseModel):
    id: uuid.UUID
    feed_entry_id: Optional[uuid.UUID] = Field(default=None, alias="feedEntryID")
    file_path: str = Field(alias="filePath")
    thumbnail_path: str = Field(alias="thumbnailPath")
    params: str
    created_at: datetime = Field(alias="cat")

    model_config = {"from_attributes": True, "populate_by_name": True}


class PublicFeedMediasResponse(BaseModel):
    medias: List[FeedMediaResponse]
