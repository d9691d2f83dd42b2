import asyncio
import logging
import math
from datetime import datetime
from typing import Awaitable, Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from activity_feed.config import Settings, get_settings
from activity_feed.exceptions import FeedTimeout
from activity_feed.schemas import (
    Activity,
    ActivityFeedFilters,
    ActivityFeedResponse,
    FeedMeta,
)
from activity_feed.services.generators import ActivityGenerators
from activity_feed.services.repository import ActivityRepository

logger = logging.getLogger(__name__)

GeneratorCall = tuple[str, Callable[[], Awaitable[list[Activity]]]]


class ActivityFeedService:
    """
    Activity feed for the marketplace.

    Every request recomputes the whole feed:
    1. Run all twelve generators
    2. Keep the requested activity types
    3. Sort by priority, then timestamp (both descending)
    4. Return one page plus totals
    """

    def __init__(
        self,
        db: AsyncSession,
        settings: Optional[Settings] = None,
        now: Optional[datetime] = None,
    ):
        self.settings = settings or get_settings()
        self.repository = ActivityRepository(db)
        self.generators = ActivityGenerators(self.repository, now=now, settings=self.settings)

    def _generator_calls(self, item_type: Optional[str]) -> list[GeneratorCall]:
        g = self.generators
        return [
            ("positive_streaks", lambda: g.review_streaks("positive", item_type)),
            ("negative_streaks", lambda: g.review_streaks("negative", item_type)),
            ("trending_up", lambda: g.trending_items("up", item_type)),
            ("trending_down", lambda: g.trending_items("down", item_type)),
            ("new_items", lambda: g.new_items(item_type)),
            ("high_engagement", lambda: g.high_engagement_items(item_type)),
            ("controversial", lambda: g.controversial_items(item_type)),
            ("rising_stars", lambda: g.rising_stars(item_type)),
            ("rating_milestones", lambda: g.rating_milestones(item_type)),
            ("activity_spikes", lambda: g.activity_spikes(item_type)),
            ("most_discussed", lambda: g.most_discussed_items(item_type)),
            ("sentiment_swings", lambda: g.sentiment_swings(item_type)),
        ]

    async def collect_activities(self, item_type: Optional[str] = None) -> list[Activity]:
        """
        Run every generator and concatenate the results in call order.

        Generators share one session, so they run one after another. A
        failing generator aborts the feed unless ``feed_isolate_generators``
        is set, in which case it is logged and skipped.
        """
        activities: list[Activity] = []

        for name, call in self._generator_calls(item_type):
            if self.settings.feed_isolate_generators:
                try:
                    produced = await call()
                except Exception as e:
                    logger.warning(f"Activity generator {name} failed, skipping: {e}")
                    await self.repository.reset()
                    continue
            else:
                produced = await call()

            logger.debug(f"Generator {name} produced {len(produced)} activities")
            activities.extend(produced)

        return activities

    @staticmethod
    def rank(activities: list[Activity]) -> list[Activity]:
        """Order by priority, then timestamp, newest first; ties keep input order."""
        return sorted(activities, key=lambda a: (a.priority, a.timestamp), reverse=True)

    async def get_activity_feed(
        self,
        filters: Optional[ActivityFeedFilters] = None,
    ) -> ActivityFeedResponse:
        """Build one page of the ranked activity feed."""
        filters = filters or ActivityFeedFilters()

        timeout = self.settings.feed_timeout_seconds
        if timeout is None:
            activities = await self.collect_activities(filters.item_type)
        else:
            try:
                activities = await asyncio.wait_for(
                    self.collect_activities(filters.item_type),
                    timeout=timeout,
                )
            except asyncio.TimeoutError:
                logger.warning(f"Activity feed timed out after {timeout}s")
                raise FeedTimeout(timeout)

        if filters.activity_types:
            allowed = set(filters.activity_types)
            activities = [a for a in activities if a.type in allowed]

        ranked = self.rank(activities)
        total = len(ranked)

        start = (filters.page - 1) * filters.limit
        page = ranked[start:start + filters.limit]

        logger.info(
            f"Activity feed: item_type={filters.item_type}, total={total}, "
            f"page={filters.page}, returned={len(page)}"
        )

        return ActivityFeedResponse(
            activities=page,
            meta=FeedMeta(
                total=total,
                page=filters.page,
                limit=filters.limit,
                total_pages=math.ceil(total / filters.limit),
            ),
        )
