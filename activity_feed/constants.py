# Feed policy constants. Changing any of these changes feed ranking.

# Item kinds
PRODUCT = "PRODUCT"
SERVICE = "SERVICE"

# Review sentiments
WOULD_RECOMMEND = "WOULD_RECOMMEND"
ITS_GOOD = "ITS_GOOD"
DONT_MIND_IT = "DONT_MIND_IT"
ITS_BAD = "ITS_BAD"

# Sentiment classes
POSITIVE_SENTIMENTS = frozenset({WOULD_RECOMMEND, ITS_GOOD})
NEGATIVE_SENTIMENTS = frozenset({ITS_BAD})

# Windows (days)
RECENT_WINDOW_DAYS = 7
TREND_HISTORY_DAYS = 30
NEW_ITEM_WINDOW_DAYS = 3

# Review streaks
STREAK_MIN_LENGTH = 3
STREAK_PRIORITY_PER_REVIEW = 10
POSITIVE_STREAK_BASE_PRIORITY = 50
NEGATIVE_STREAK_BASE_PRIORITY = 40

# Trending
TREND_CHANGE_THRESHOLD = 15
TREND_PRIORITY_WEIGHT = 2
TREND_BASE_PRIORITY = 60

# New items
NEW_ITEM_PRIORITY = 30

# Engagement
COMMENT_ENGAGEMENT_WEIGHT = 0.5
ENGAGEMENT_MIN_SCORE = 5
ENGAGEMENT_PRIORITY_WEIGHT = 5

# Controversy
CONTROVERSY_MIN_REVIEWS = 10
CONTROVERSY_MIN_RATIO = 0.2
CONTROVERSY_PRIORITY = 45

# Rating milestones, checked in ascending order
RATING_MILESTONES = (50, 100, 250, 500, 1000)
MILESTONE_WINDOW = 10
MILESTONE_PRIORITY_DIVISOR = 10

# Most discussed
DISCUSSION_TOP_GROUPS = 10
DISCUSSION_MIN_COMMENTS = 10
DISCUSSION_PRIORITY_WEIGHT = 2
