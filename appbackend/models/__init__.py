"""
AppBackend — ORM Models
========================

Importing this package registers every table with `Base.metadata`
(Alembic autogenerate and the test suite's create_all rely on it).
"""

from appbackend.models.resources import (
    Box,
    Device,
    Feed,
    FeedEntry,
    FeedMedia,
    Plant,
    PlantSharing,
    Timelapse,
)
from appbackend.models.user import User, UserEnd
from appbackend.models.userend import (
    UserEndBox,
    UserEndDevice,
    UserEndFeed,
    UserEndFeedEntry,
    UserEndFeedMedia,
    UserEndPlant,
    UserEndTimelapse,
)

__all__ = [
    "Box",
    "Device",
    "Feed",
    "FeedEntry",
    "FeedMedia",
    "Plant",
    "PlantSharing",
    "Timelapse",
    "User",
    "UserEnd",
    "UserEndBox",
    "UserEndDevice",
    "UserEndFeed",
    "UserEndFeedEntry",
    "UserEndFeedMedia",
    "UserEndPlant",
    "UserEndTimelapse",
]
