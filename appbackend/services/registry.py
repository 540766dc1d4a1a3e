"""
AppBackend — Resource Registry
===============================

What:  The closed set of resource kinds the insert pipeline supports, each
       with a static descriptor: collection name, ORM model (zero-value
       factory), body schema (decoder), ownership parent and mirror table.
Who:   Consulted by the insert pipeline, the ownership guard and the fan-out
       services. It performs no validation of requests itself.

Adding a kind:
    Declare its descriptor here before building an InsertPipeline for it.
    `validate_ownership_graph` runs at import time and refuses a parent
    relation that cycles or names an undeclared kind.

Ownership graph:
    Device ◄─(required)─ Box ◄─ Plant ◄─ Timelapse
    Feed ◄─ FeedEntry ◄─ FeedMedia
                      ◄─ PlantSharing
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple, Type

from pydantic import BaseModel

from appbackend.models import (
    Box,
    Device,
    Feed,
    FeedEntry,
    FeedMedia,
    Plant,
    PlantSharing,
    Timelapse,
    User,
    UserEnd,
    UserEndBox,
    UserEndDevice,
    UserEndFeed,
    UserEndFeedEntry,
    UserEndFeedMedia,
    UserEndPlant,
    UserEndTimelapse,
)
from appbackend.schemas.resources import (
    BoxCreate,
    CreateBody,
    DeviceCreate,
    FeedCreate,
    FeedEntryCreate,
    FeedMediaCreate,
    PlantCreate,
    PlantSharingCreate,
    TimelapseCreate,
    UserCreate,
    UserEndCreate,
)


class ResourceKind(str, Enum):
    """Resource kinds; the value is the collection (table) name."""

    USER = "users"
    USEREND = "userends"
    BOX = "boxes"
    PLANT = "plants"
    TIMELAPSE = "timelapses"
    DEVICE = "devices"
    FEED = "feeds"
    FEED_ENTRY = "feedentries"
    FEED_MEDIA = "feedmedias"
    PLANT_SHARING = "plantsharings"


@dataclass(frozen=True)
class ResourceDescriptor:
    """
    Static description of one resource kind.

    Attributes:
        kind:           The tag.
        model:          ORM class, called with the decoded columns.
        schema:         Pydantic body model used to decode the request.
        owned:          Rows carry a server-stamped `user_id`.
        parent:         Kind of the parent checked by the ownership guard.
        parent_field:   Attribute on `model` holding the parent id.
        require_parent: A null or dangling parent reference is NotFound
                        instead of "no constraint".
        mirror_model:   Per-device mirror table, None if the kind is not
                        mirrored.
    """

    kind: ResourceKind
    model: Type[Any]
    schema: Type[CreateBody]
    owned: bool = True
    parent: Optional[ResourceKind] = None
    parent_field: Optional[str] = None
    require_parent: bool = False
    mirror_model: Optional[Type[Any]] = None

    @property
    def collection(self) -> str:
        return self.kind.value

    def build(self, body: BaseModel) -> Any:
        """Instantiates the ORM row from a decoded body."""
        return self.model(**body.to_columns())

    def parent_id(self, obj: Any) -> Any:
        if self.parent_field is None:
            return None
        return getattr(obj, self.parent_field)


REGISTRY: Dict[ResourceKind, ResourceDescriptor] = {
    d.kind: d
    for d in (
        ResourceDescriptor(ResourceKind.USER, User, UserCreate, owned=False),
        ResourceDescriptor(ResourceKind.USEREND, UserEnd, UserEndCreate),
        ResourceDescriptor(
            ResourceKind.DEVICE, Device, DeviceCreate,
            mirror_model=UserEndDevice,
        ),
        ResourceDescriptor(
            ResourceKind.FEED, Feed, FeedCreate,
            mirror_model=UserEndFeed,
        ),
        ResourceDescriptor(
            ResourceKind.BOX, Box, BoxCreate,
            parent=ResourceKind.DEVICE, parent_field="device_id", require_parent=True,
            mirror_model=UserEndBox,
        ),
        ResourceDescriptor(
            ResourceKind.PLANT, Plant, PlantCreate,
            parent=ResourceKind.BOX, parent_field="box_id",
            mirror_model=UserEndPlant,
        ),
        ResourceDescriptor(
            ResourceKind.TIMELAPSE, Timelapse, TimelapseCreate,
            parent=ResourceKind.PLANT, parent_field="plant_id",
            mirror_model=UserEndTimelapse,
        ),
        ResourceDescriptor(
            ResourceKind.FEED_ENTRY, FeedEntry, FeedEntryCreate,
            parent=ResourceKind.FEED, parent_field="feed_id",
            mirror_model=UserEndFeedEntry,
        ),
        ResourceDescriptor(
            ResourceKind.FEED_MEDIA, FeedMedia, FeedMediaCreate,
            parent=ResourceKind.FEED_ENTRY, parent_field="feed_entry_id",
            mirror_model=UserEndFeedMedia,
        ),
        ResourceDescriptor(
            ResourceKind.PLANT_SHARING, PlantSharing, PlantSharingCreate,
            parent=ResourceKind.FEED_ENTRY, parent_field="feed_entry_id",
        ),
    )
}

# Collections copied into a newly enrolled device's mirror tables
FANOUT_KINDS: Tuple[ResourceKind, ...] = (
    ResourceKind.BOX,
    ResourceKind.PLANT,
    ResourceKind.TIMELAPSE,
    ResourceKind.DEVICE,
    ResourceKind.FEED,
    ResourceKind.FEED_ENTRY,
    ResourceKind.FEED_MEDIA,
)


def get_descriptor(kind: ResourceKind) -> ResourceDescriptor:
    return REGISTRY[ResourceKind(kind)]


def validate_ownership_graph(registry: Mapping[ResourceKind, ResourceDescriptor]) -> None:
    """
    Checks that the parent relation is a DAG over declared kinds.

    Raises:
        ValueError: a parent kind is undeclared, a parent lacks its field,
                    a mirrored kind is not owned, or a parent chain cycles.
    """
    for kind, descriptor in registry.items():
        if descriptor.parent is not None and descriptor.parent_field is None:
            raise ValueError(f"{kind.value}: parent declared without parent_field")
        if descriptor.mirror_model is not None and not descriptor.owned:
            raise ValueError(f"{kind.value}: mirrored kinds must be owned")

        seen = [kind]
        current = descriptor.parent
        while current is not None:
            if current not in registry:
                raise ValueError(f"{kind.value}: undeclared parent kind {current.value}")
            if current in seen:
                chain = " -> ".join(k.value for k in seen + [current])
                raise ValueError(f"ownership cycle: {chain}")
            if not registry[current].owned:
                raise ValueError(f"{kind.value}: parent {current.value} is not owned")
            seen.append(current)
            current = registry[current].parent


validate_ownership_graph(REGISTRY)
