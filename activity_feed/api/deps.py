from datetime import datetime

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from activity_feed.config import get_settings
from activity_feed.database import get_db
from activity_feed.services.feed import ActivityFeedService


def get_now() -> datetime:
    """Reference time for feed windows (naive UTC)."""
    return datetime.utcnow()


async def get_feed_service(
    db: AsyncSession = Depends(get_db),
    now: datetime = Depends(get_now),
) -> ActivityFeedService:
    """Dependency for ActivityFeedService."""
    return ActivityFeedService(db, settings=get_settings(), now=now)
