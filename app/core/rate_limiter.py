"""
Redis-based rate limiting.

Fails open: if Redis is unreachable the request is allowed and the error is
logged.
"""

import logging
import redis
from fastapi import HTTPException, status
from app.core.config import settings

logger = logging.getLogger(__name__)


class RateLimiter:
    """
    Fixed-window request counter per key, expiring with the window.
    """

    def __init__(self):
        self.redis_client = redis.Redis(
            host=settings.REDIS_HOST,
            port=settings.REDIS_PORT,
            db=settings.REDIS_DB,
            decode_responses=True,
            socket_connect_timeout=1,
            socket_timeout=1
        )

    def check_rate_limit(
        self,
        key: str,
        max_requests: int,
        window_seconds: int,
        error_message: str = "Rate limit exceeded"
    ) -> None:
        """
        Count a request against `key` and reject it if over the limit.

        Args:
            key: Unique identifier for this rate limit (e.g., "batch_submit:<user id>")
            max_requests: Maximum number of requests allowed in the window
            window_seconds: Window length in seconds
            error_message: Message for the 429 response

        Raises:
            HTTPException: 429 Too Many Requests if rate limit exceeded
        """
        try:
            count = self.redis_client.incr(key)
            if count == 1:
                self.redis_client.expire(key, window_seconds)

            if count > max_requests:
                ttl = self.redis_client.ttl(key)
                raise HTTPException(
                    status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                    detail=f"{error_message}. Try again in {max(ttl, 1)} seconds."
                )

        except redis.RedisError as e:
            logger.warning(f"Redis rate limiter unavailable, allowing request: {e}")


# Singleton instance
rate_limiter = RateLimiter()


def check_batch_submission_limit(sourcer_id: str) -> None:
    """
    Rate limit for candidate batch submissions.

    Limit: BATCH_SUBMISSIONS_PER_MINUTE per sourcer. Each batch fans out to
    up to MAX_BATCH_SIZE paid scraper and LLM calls.
    """
    rate_limiter.check_rate_limit(
        key=f"batch_submit:{sourcer_id}",
        max_requests=settings.BATCH_SUBMISSIONS_PER_MINUTE,
        window_seconds=60,
        error_message="Too many candidate submissions. Please wait before submitting again"
    )
