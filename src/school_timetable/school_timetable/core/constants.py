"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_GRACE_MINUTES = 5
DEFAULT_HISTORY_LIMIT = 200
MAX_HISTORY_LIMIT = 1000
DEFAULT_CACHE_TTL_SECONDS = 30
MAX_PERIOD = 12
