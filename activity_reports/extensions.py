"""Shared singletons: logger, in-memory TTL caches.

All global state used across modules lives here to avoid circular imports.
"""

import logging

from cachetools import TTLCache

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
logger = logging.getLogger("activity_reports")

# Bounded in-memory cache with TTL eviction (max 256 entries, 5-minute default TTL)
cache = TTLCache(maxsize=256, ttl=300)

# Local directory users by id, so a stats request does not hit Mattermost once per login
local_user_cache = TTLCache(maxsize=1024, ttl=300)
