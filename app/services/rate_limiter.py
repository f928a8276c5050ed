"""
Daily rate limiting for mock interview sessions.

A student may start `limit` interviews per calendar day.

- InMemoryDailyRateLimiter: per-process map keyed by (student, day). Entries
  for past days are pruned on every hit. Lost on restart and not shared
  between instances.
- RedisDailyRateLimiter: shared counter (INCR + EXPIRE) for deployments with
  more than one instance.
"""
import logging
import threading
from datetime import date
from typing import Callable, Dict, Tuple

import redis

from app.core.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)

KEY_PREFIX = "interview-limit"
# keep keys a little longer than a day so late-night clock skew is harmless
KEY_TTL_SECONDS = 48 * 60 * 60


class InMemoryDailyRateLimiter:
    def __init__(self, limit: int, today: Callable[[], date] = date.today):
        self.limit = limit
        self._today = today
        self._counts: Dict[Tuple[str, date], int] = {}
        self._lock = threading.Lock()

    def hit(self, subject: str) -> bool:
        """Count one attempt. Returns False (and does not count) once the cap is reached."""
        today = self._today()
        key = (subject, today)
        with self._lock:
            self._prune(today)
            count = self._counts.get(key, 0)
            if count >= self.limit:
                return False
            self._counts[key] = count + 1
            return True

    def _prune(self, today: date) -> None:
        stale = [key for key in self._counts if key[1] != today]
        for key in stale:
            del self._counts[key]


class RedisDailyRateLimiter:
    def __init__(self, client: "redis.Redis", limit: int, today: Callable[[], date] = date.today):
        self.client = client
        self.limit = limit
        self._today = today

    def _key(self, subject: str) -> str:
        return f"{KEY_PREFIX}:{subject}:{self._today().isoformat()}"

    def hit(self, subject: str) -> bool:
        key = self._key(subject)
        count = self.client.incr(key)
        if count == 1:
            self.client.expire(key, KEY_TTL_SECONDS)
        if count > self.limit:
            # give the rejected attempt back so the stored value stays at the cap
            self.client.decr(key)
            return False
        return True


# Singleton instance
_interview_limiter = None


def get_interview_rate_limiter():
    """Get or create the interview limiter (singleton pattern)"""
    global _interview_limiter
    if _interview_limiter is None:
        if settings.redis_url:
            client = redis.Redis.from_url(settings.redis_url, decode_responses=True)
            _interview_limiter = RedisDailyRateLimiter(client, settings.interview_daily_limit)
            logger.info("Interview limits shared through Redis")
        else:
            _interview_limiter = InMemoryDailyRateLimiter(settings.interview_daily_limit)
    return _interview_limiter
