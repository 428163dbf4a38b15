"""Application constants."""

# A week counts towards a streak once it holds this many workouts
QUALIFYING_WEEK_MIN_WORKOUTS = 2

# Week numbering: previous week of W01 wraps to this week of the prior year
WEEKS_PER_YEAR = 52

# Current streak search windows (in weeks)
CURRENT_STREAK_SEARCH_WEEKS = 52  # how far back to look for the latest completed qualifying week
CURRENT_STREAK_MAX_WEEKS = 100  # cap on the consecutive-week walk from there

# Leaderboard: users need at least this many workouts this month to appear
LEADERBOARD_MIN_MONTHLY_WORKOUTS = 1

# Workout log listing
DEFAULT_LOG_PAGE_SIZE = 50
MAX_LOG_PAGE_SIZE = 500
