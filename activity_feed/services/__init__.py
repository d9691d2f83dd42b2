from activity_feed.services.feed import ActivityFeedService
from activity_feed.services.generators import ActivityGenerators
from activity_feed.services.repository import ActivityRepository

__all__ = ["ActivityFeedService", "ActivityGenerators", "ActivityRepository"]
