"""
Redis fixed-window rate limiting for the AI endpoints
Each staff member gets a request budget per window
"""

import logging
import os
import time
from typing import Optional

import redis
from fastapi import Depends, HTTPException, Request

from .auth import get_current_user
from .config import AI_RATE_LIMIT, AI_RATE_LIMIT_WINDOW_SECONDS, RATE_LIMIT_ENABLED
from .models import StaffUser

logger = logging.getLogger(__name__)

redis_client: Optional[redis.Redis] = None


def get_redis_client() -> redis.Redis:
    """Get or create the Redis client (REDIS_URL, defaulting to a local instance)"""
    global redis_client

    if redis_client is None:
        redis_url = os.getenv("REDIS_URL", "redis://localhost:6379/0")
        redis_client = redis.from_url(
            redis_url,
            decode_responses=True,
            socket_connect_timeout=5,
            socket_timeout=5,
        )
        logger.info("📡 Redis client initialised for rate limiting")

    return redis_client


def check_rate_limit(
    key: str, limit: int, window_seconds: int, client: redis.Redis
) -> tuple[bool, int, int]:
    """Count one request against key.

    Returns:
        Tuple of (is_allowed, current_count, ttl_seconds)
    """
    window = int(time.time()) // window_seconds
    window_key = f"{key}:{window}"

    pipe = client.pipeline()
    pipe.incr(window_key)
    pipe.expire(window_key, window_seconds)
    count, _ = pipe.execute()

    ttl = window_seconds - int(time.time()) % window_seconds
    return count <= limit, count, ttl


def create_rate_limiter(
    limit: int = AI_RATE_LIMIT,
    window_seconds: int = AI_RATE_LIMIT_WINDOW_SECONDS,
    key_prefix: str = "rate_limit",
):
    """
    Create a per-staff-user rate limiter dependency

    Example usage:
        ai_rate_limit = create_rate_limiter(key_prefix="chat")

        @router.post("/api/chat")
        async def chat(_: None = Depends(ai_rate_limit)):
            ...
    """

    async def rate_limiter(
        request: Request, current_user: StaffUser = Depends(get_current_user)
    ) -> None:
        if not RATE_LIMIT_ENABLED:
            return

        key = f"{key_prefix}:{current_user.id}"
        try:
            is_allowed, count, ttl = check_rate_limit(
                key, limit, window_seconds, get_redis_client()
            )
        except redis.RedisError as e:
            # Fail open when Redis is unreachable
            logger.warning(f"⚠️ Rate limiting unavailable, allowing request: {e}")
            return

        if not is_allowed:
            logger.warning(f"🚫 Rate limit EXCEEDED for {key} - {count}/{limit} requests used")
            raise HTTPException(
                status_code=429,
                detail={
                    "message": f"Rate limit exceeded. Maximum {limit} requests per {window_seconds} seconds.",
                    "retry_after": ttl,
                },
                headers={"Retry-After": str(ttl)},
            )

        request.state.rate_limit_remaining = limit - count

    return rate_limiter
