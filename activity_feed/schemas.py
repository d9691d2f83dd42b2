from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel


class ItemType(str, Enum):
    PRODUCT = "PRODUCT"
    SERVICE = "SERVICE"


class ActivityType(str, Enum):
    REVIEW_STREAK_POSITIVE = "REVIEW_STREAK_POSITIVE"
    REVIEW_STREAK_NEGATIVE = "REVIEW_STREAK_NEGATIVE"
    TRENDING_UP = "TRENDING_UP"
    TRENDING_DOWN = "TRENDING_DOWN"
    NEW_PRODUCT = "NEW_PRODUCT"
    NEW_SERVICE = "NEW_SERVICE"
    HIGH_ENGAGEMENT = "HIGH_ENGAGEMENT"
    CONTROVERSIAL = "CONTROVERSIAL"
    RISING_STAR = "RISING_STAR"
    RATING_MILESTONE = "RATING_MILESTONE"
    ACTIVITY_SPIKE = "ACTIVITY_SPIKE"
    MOST_DISCUSSED = "MOST_DISCUSSED"
    SENTIMENT_SWING = "SENTIMENT_SWING"
    NEW_FAVORITE = "NEW_FAVORITE"
    RAPID_GROWTH = "RAPID_GROWTH"


class CamelModel(BaseModel):
    """Base for response models serialized with camelCase keys."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True


# ----- Activity Schemas -----
class Activity(CamelModel):
    id: str
    type: ActivityType
    title: str
    description: str
    item_id: str
    item_type: ItemType
    item_name: str
    item_image: Optional[str] = None
    timestamp: datetime
    metadata: dict[str, Any] = Field(default_factory=dict)
    priority: int = Field(..., description="Ranking key, higher first")


# ----- Feed Schemas -----
class ActivityFeedFilters(BaseModel):
    item_type: Optional[ItemType] = None
    activity_types: Optional[list[ActivityType]] = None
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=50, ge=1)


class FeedMeta(CamelModel):
    total: int
    page: int
    limit: int
    total_pages: int


class ActivityFeedResponse(CamelModel):
    activities: list[Activity]
    meta: FeedMeta


# ----- Health Schemas -----
class HealthResponse(BaseModel):
    status: str
    database: str
