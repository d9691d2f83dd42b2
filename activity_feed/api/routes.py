from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from activity_feed.api.deps import get_feed_service
from activity_feed.config import get_settings
from activity_feed.database import get_db
from activity_feed.exceptions import InvalidFeedFilter
from activity_feed.schemas import (
    ActivityFeedFilters,
    ActivityFeedResponse,
    ActivityType,
    HealthResponse,
    ItemType,
)
from activity_feed.services.feed import ActivityFeedService

router = APIRouter()


def parse_activity_types(values: Optional[list[str]]) -> Optional[list[ActivityType]]:
    """Accept repeated and/or comma-separated activity types."""
    if not values:
        return None

    parsed = []
    for value in values:
        for part in value.split(","):
            part = part.strip()
            if not part:
                continue
            try:
                parsed.append(ActivityType(part))
            except ValueError:
                raise InvalidFeedFilter("activityTypes", part)

    return parsed or None


# ----- Health Check -----
@router.get("/health", response_model=HealthResponse)
async def health_check(db: AsyncSession = Depends(get_db)):
    """Health check endpoint."""
    try:
        await db.execute(text("SELECT 1"))
        db_status = "healthy"
    except Exception:
        db_status = "unhealthy"

    return HealthResponse(
        status="ok" if db_status == "healthy" else "degraded",
        database=db_status,
    )


# ----- Activity Feed Endpoints -----
@router.get("/v1/activity-feed", response_model=ActivityFeedResponse)
async def get_activity_feed(
    item_type: Optional[ItemType] = Query(default=None, alias="itemType"),
    activity_types: Optional[list[str]] = Query(
        default=None,
        alias="activityTypes",
        description="Comma-separated activity types",
    ),
    page: int = Query(default=1, ge=1),
    limit: Optional[int] = Query(default=None, ge=1),
    feed_service: ActivityFeedService = Depends(get_feed_service),
):
    """
    Get the ranked activity feed.
    Recomputed from reviews, comments and item stats on every call.
    """
    filters = ActivityFeedFilters(
        item_type=item_type,
        activity_types=parse_activity_types(activity_types),
        page=page,
        limit=limit or get_settings().feed_limit_default,
    )
    return await feed_service.get_activity_feed(filters)


@router.get("/v1/activity-feed/types")
async def list_activity_types():
    """List the activity types accepted by the activityTypes filter."""
    return {"activityTypes": [t.value for t in ActivityType]}
