"""
Activity generators.

Each generator reads through ``ActivityRepository`` and turns one heuristic
(streaks, trends, milestones, ...) into ``Activity`` records. Generators are
independent of each other apart from the three aliases that delegate.
"""

import math
from datetime import datetime, timedelta, timezone
from typing import Literal, Optional

from activity_feed.config import Settings, get_settings
from activity_feed.constants import (
    COMMENT_ENGAGEMENT_WEIGHT,
    CONTROVERSY_MIN_RATIO,
    CONTROVERSY_MIN_REVIEWS,
    CONTROVERSY_PRIORITY,
    DISCUSSION_MIN_COMMENTS,
    DISCUSSION_PRIORITY_WEIGHT,
    DISCUSSION_TOP_GROUPS,
    ENGAGEMENT_MIN_SCORE,
    ENGAGEMENT_PRIORITY_WEIGHT,
    MILESTONE_PRIORITY_DIVISOR,
    MILESTONE_WINDOW,
    NEGATIVE_SENTIMENTS,
    NEGATIVE_STREAK_BASE_PRIORITY,
    NEW_ITEM_PRIORITY,
    NEW_ITEM_WINDOW_DAYS,
    POSITIVE_SENTIMENTS,
    POSITIVE_STREAK_BASE_PRIORITY,
    PRODUCT,
    RATING_MILESTONES,
    RECENT_WINDOW_DAYS,
    STREAK_MIN_LENGTH,
    STREAK_PRIORITY_PER_REVIEW,
    TREND_BASE_PRIORITY,
    TREND_CHANGE_THRESHOLD,
    TREND_HISTORY_DAYS,
    TREND_PRIORITY_WEIGHT,
)
from activity_feed.models import Review
from activity_feed.schemas import Activity, ActivityType
from activity_feed.services.repository import ActivityRepository, Item

Polarity = Literal["positive", "negative"]
Direction = Literal["up", "down"]


def round_half_up(value: float) -> int:
    """Round .5 towards +infinity (Python's round() is banker's rounding)."""
    return int(math.floor(value + 0.5))


def group_by_item(rows: list) -> dict[str, list]:
    """Group rows by item ID, keeping query order inside each group."""
    groups: dict[str, list] = {}
    for row in rows:
        item_id = row.item_id
        if not item_id:
            continue
        groups.setdefault(item_id, []).append(row)
    return groups


def head_run_length(reviews: list[Review], sentiments: frozenset) -> int:
    """Length of the run of matching reviews at the head of the list."""
    run = 0
    for review in reviews:
        if review.sentiment not in sentiments:
            break
        run += 1
    return run


def sentiment_score(reviews: list[Review]) -> float:
    """Share of positive reviews as a percentage; 0 for no reviews."""
    if not reviews:
        return 0
    positive = sum(1 for r in reviews if r.sentiment in POSITIVE_SENTIMENTS)
    return positive / len(reviews) * 100


class ActivityGenerators:
    """Heuristic activity generators evaluated against a fixed ``now``."""

    def __init__(
        self,
        repository: ActivityRepository,
        now: Optional[datetime] = None,
        settings: Optional[Settings] = None,
    ):
        self.repository = repository
        self.now = now or datetime.utcnow()
        self.settings = settings or get_settings()
        # Suffix for generated IDs of computed signals
        self._stamp = int(self.now.replace(tzinfo=timezone.utc).timestamp() * 1000)

    def _days_ago(self, days: int) -> datetime:
        return self.now - timedelta(days=days)

    @staticmethod
    def _activity(
        activity_id: str,
        kind: ActivityType,
        item: Item,
        title: str,
        description: str,
        timestamp: datetime,
        priority: int,
        metadata: Optional[dict] = None,
    ) -> Activity:
        return Activity(
            id=activity_id,
            type=kind,
            title=title,
            description=description,
            item_id=item.id,
            item_type=item.item_type,
            item_name=item.name,
            item_image=item.main_image or None,
            timestamp=timestamp,
            metadata=metadata or {},
            priority=priority,
        )

    # ============ Review Streaks ============

    async def review_streaks(
        self,
        polarity: Polarity,
        item_type: Optional[str] = None,
    ) -> list[Activity]:
        """
        Items whose newest reviews form a run of the same sentiment class.

        Only the run at the head of each item's newest-first review list
        counts; one activity per item.
        """
        positive = polarity == "positive"
        sentiments = POSITIVE_SENTIMENTS if positive else NEGATIVE_SENTIMENTS

        reviews = await self.repository.recent_reviews(
            since=self._days_ago(RECENT_WINDOW_DAYS),
            item_type=item_type,
            with_items=True,
        )

        activities = []
        for item_id, item_reviews in group_by_item(reviews).items():
            streak = head_run_length(item_reviews, sentiments)
            if streak < STREAK_MIN_LENGTH:
                continue

            latest = item_reviews[0]
            item = latest.item
            if item is None or not item.is_active:
                continue

            if positive:
                kind = ActivityType.REVIEW_STREAK_POSITIVE
                title = f"🔥 {streak} Positive Reviews in a Row!"
                description = f"{item.name} is getting consistent positive feedback!"
                base_priority = POSITIVE_STREAK_BASE_PRIORITY
            else:
                kind = ActivityType.REVIEW_STREAK_NEGATIVE
                title = f"⚠️ {streak} Negative Reviews in a Row"
                description = f"{item.name} needs attention - multiple negative reviews"
                base_priority = NEGATIVE_STREAK_BASE_PRIORITY

            activities.append(self._activity(
                f"streak-{item_id}-{self._stamp}",
                kind,
                item,
                title=title,
                description=description,
                timestamp=latest.created_at,
                priority=streak * STREAK_PRIORITY_PER_REVIEW + base_priority,
                metadata={"streakCount": streak},
            ))

        return activities

    # ============ Trends ============

    async def trending_items(
        self,
        direction: Direction,
        item_type: Optional[str] = None,
    ) -> list[Activity]:
        """
        Items whose positive-review share moved sharply.

        Compares the last 7 days against days 8-30. Items with no older
        reviews score 0 for the older period.
        """
        recent_since = self._days_ago(RECENT_WINDOW_DAYS)
        history_since = self._days_ago(TREND_HISTORY_DAYS)

        recent = await self.repository.recent_reviews(
            since=recent_since,
            item_type=item_type,
        )
        older = await self.repository.recent_reviews(
            since=history_since,
            until=recent_since,
            item_type=item_type,
        )
        older_groups = group_by_item(older)

        activities = []
        for item_id, reviews in group_by_item(recent).items():
            change = sentiment_score(reviews) - sentiment_score(older_groups.get(item_id, []))

            if direction == "up" and not change > TREND_CHANGE_THRESHOLD:
                continue
            if direction == "down" and not change < -TREND_CHANGE_THRESHOLD:
                continue

            item = await self.repository.resolve_item(item_id)
            if item is None or not item.is_active:
                continue

            if direction == "up":
                kind = ActivityType.TRENDING_UP
                title = "📈 Sentiment Improving Rapidly!"
                description = f"{item.name} is gaining positive momentum!"
            else:
                kind = ActivityType.TRENDING_DOWN
                title = "📉 Sentiment Declining"
                description = f"{item.name} sentiment is dropping"

            activities.append(self._activity(
                f"trending-{item_id}-{self._stamp}",
                kind,
                item,
                title=title,
                description=description,
                timestamp=self.now,
                priority=round_half_up(abs(change) * TREND_PRIORITY_WEIGHT + TREND_BASE_PRIORITY),
                metadata={"sentimentChange": round_half_up(change)},
            ))

        return activities

    async def rising_stars(self, item_type: Optional[str] = None) -> list[Activity]:
        return await self.trending_items("up", item_type)

    async def sentiment_swings(self, item_type: Optional[str] = None) -> list[Activity]:
        """Both trend directions, one after the other."""
        trending_up = await self.trending_items("up", item_type)
        trending_down = await self.trending_items("down", item_type)
        return trending_up + trending_down

    # ============ New Items ============

    async def new_items(self, item_type: Optional[str] = None) -> list[Activity]:
        """Active products and services added in the last 3 days."""
        items = await self.repository.new_items(
            since=self._days_ago(NEW_ITEM_WINDOW_DAYS),
            item_type=item_type,
        )

        activities = []
        for item in items:
            if item.item_type == PRODUCT:
                activity_id = f"new-product-{item.id}"
                kind = ActivityType.NEW_PRODUCT
                title = "✨ New Product Added!"
            else:
                activity_id = f"new-service-{item.id}"
                kind = ActivityType.NEW_SERVICE
                title = "✨ New Service Added!"

            activities.append(self._activity(
                activity_id,
                kind,
                item,
                title=title,
                description=f"{item.name} is now available",
                timestamp=item.created_at,
                priority=NEW_ITEM_PRIORITY,
            ))

        return activities

    # ============ Engagement ============

    async def high_engagement_items(self, item_type: Optional[str] = None) -> list[Activity]:
        """Items scoring ``reviews + 0.5 * comments`` >= 5 over the last 7 days."""
        since = self._days_ago(RECENT_WINDOW_DAYS)
        review_counts = await self.repository.review_counts_by_item(since, item_type)

        activities = []
        for item_id, review_count in review_counts:
            item = await self.repository.resolve_item(item_id)
            if item is None or not item.is_active:
                continue

            comment_count = await self.repository.count_item_comments(item, since)
            engagement_score = review_count + comment_count * COMMENT_ENGAGEMENT_WEIGHT
            if engagement_score < ENGAGEMENT_MIN_SCORE:
                continue

            activities.append(self._activity(
                f"engagement-{item_id}-{self._stamp}",
                ActivityType.HIGH_ENGAGEMENT,
                item,
                title="🔥 High Engagement!",
                description=f"{item.name} is getting lots of attention",
                timestamp=self.now,
                priority=round_half_up(engagement_score * ENGAGEMENT_PRIORITY_WEIGHT),
                metadata={
                    "engagementScore": round_half_up(engagement_score),
                    "reviewCount": review_count,
                    "commentCount": comment_count,
                },
            ))

        return activities

    async def activity_spikes(self, item_type: Optional[str] = None) -> list[Activity]:
        return await self.high_engagement_items(item_type)

    # ============ Controversy ============

    async def controversial_items(self, item_type: Optional[str] = None) -> list[Activity]:
        """
        Items where both camps hold more than 20% of at least 10 reviews.

        Only the first ``controversy_scan_limit`` active items of each table
        are examined.
        """
        items = await self.repository.active_items(
            item_type,
            limit=self.settings.controversy_scan_limit,
        )

        activities = []
        for item in items:
            if item.total_reviews < CONTROVERSY_MIN_REVIEWS:
                continue

            positive_ratio = item.positive_reviews / item.total_reviews
            negative_ratio = item.negative_reviews / item.total_reviews
            if positive_ratio <= CONTROVERSY_MIN_RATIO or negative_ratio <= CONTROVERSY_MIN_RATIO:
                continue

            activities.append(self._activity(
                f"controversial-{item.id}-{self._stamp}",
                ActivityType.CONTROVERSIAL,
                item,
                title="⚡ Mixed Opinions",
                description=f"{item.name} has divided opinions",
                timestamp=self.now,
                priority=CONTROVERSY_PRIORITY,
                metadata={
                    "positiveRatio": round_half_up(positive_ratio * 100),
                    "negativeRatio": round_half_up(negative_ratio * 100),
                },
            ))

        return activities

    # ============ Milestones ============

    async def rating_milestones(self, item_type: Optional[str] = None) -> list[Activity]:
        """Items whose quick-rating total just crossed a milestone."""
        items = await self.repository.active_items(item_type)

        activities = []
        for item in items:
            total = item.quick_rating_total or 0
            milestone = next(
                (m for m in RATING_MILESTONES if m <= total < m + MILESTONE_WINDOW),
                None,
            )
            if milestone is None:
                continue

            activities.append(self._activity(
                f"milestone-{item.id}-{milestone}",
                ActivityType.RATING_MILESTONE,
                item,
                title=f"🎯 {milestone} Ratings Milestone!",
                description=f"{item.name} reached {milestone} ratings!",
                timestamp=self.now,
                priority=milestone // MILESTONE_PRIORITY_DIVISOR,
                metadata={"ratingCount": milestone},
            ))

        return activities

    # ============ Discussion ============

    async def most_discussed_items(self, item_type: Optional[str] = None) -> list[Activity]:
        """Items with 10+ comments in the last 7 days, among the 10 busiest."""
        groups = await self.repository.comment_counts_by_item(
            since=self._days_ago(RECENT_WINDOW_DAYS),
            item_type=item_type,
            limit=DISCUSSION_TOP_GROUPS,
        )

        activities = []
        for item_id, comment_count in groups:
            if comment_count < DISCUSSION_MIN_COMMENTS:
                continue

            item = await self.repository.resolve_item(item_id)
            if item is None or not item.is_active:
                continue

            activities.append(self._activity(
                f"discussed-{item_id}-{self._stamp}",
                ActivityType.MOST_DISCUSSED,
                item,
                title="💬 Hot Discussion!",
                description=f"{item.name} is generating lots of discussion",
                timestamp=self.now,
                priority=comment_count * DISCUSSION_PRIORITY_WEIGHT,
                metadata={"commentCount": comment_count},
            ))

        return activities
