"""Custom middleware for the application."""

import logging
import time
import uuid

import redis.asyncio as redis
from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from stayfinder.config import settings

logger = logging.getLogger(__name__)

UNLIMITED_PATHS = ("/health", "/docs", "/redoc", "/openapi.json")


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Per-IP rate limiting on a Redis sliding window."""

    def __init__(
        self,
        app,
        max_requests: int = 100,
        window_seconds: int = 15 * 60,
        redis_url: str | None = None,
    ):
        super().__init__(app)
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.redis_url = redis_url or settings.redis_url
        self._redis: redis.Redis | None = None

    async def get_redis(self) -> redis.Redis:
        if self._redis is None:
            self._redis = redis.from_url(
                self.redis_url,
                encoding="utf-8",
                decode_responses=True,
            )
        return self._redis

    def _get_client_ip(self, request: Request) -> str:
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            return forwarded.split(",")[0].strip()

        real_ip = request.headers.get("X-Real-IP")
        if real_ip:
            return real_ip

        return request.client.host if request.client else "unknown"

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        if request.url.path in UNLIMITED_PATHS:
            return await call_next(request)

        try:
            redis_client = await self.get_redis()
            key = f"rate_limit:{self._get_client_ip(request)}"
            now = time.time()

            async with redis_client.pipeline(transaction=True) as pipe:
                await pipe.zremrangebyscore(key, 0, now - self.window_seconds)
                await pipe.zcard(key)
                await pipe.zadd(key, {str(time.time_ns()): now})
                await pipe.expire(key, self.window_seconds)
                results = await pipe.execute()
        except redis.RedisError as e:
            # Redis down: let the request through
            logger.warning(f"Rate limiter unavailable: {e}")
            return await call_next(request)

        request_count = results[1]
        if request_count >= self.max_requests:
            return JSONResponse(
                status_code=429,
                content={"detail": "Too many requests from this IP, please try again later."},
                headers={
                    "Retry-After": str(self.window_seconds),
                    "X-RateLimit-Limit": str(self.max_requests),
                    "X-RateLimit-Remaining": "0",
                },
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(self.max_requests)
        response.headers["X-RateLimit-Remaining"] = str(
            max(0, self.max_requests - request_count - 1)
        )
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Tag each request with an id, time it and log slow ones."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        request.state.request_id = request_id

        started = time.perf_counter()
        response = await call_next(request)
        duration = time.perf_counter() - started

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{duration:.3f}s"

        logger.debug(
            f"{request.method} {request.url.path} -> {response.status_code} "
            f"in {duration:.3f}s (request_id={request_id})"
        )
        if duration > settings.slow_request_seconds:
            logger.warning(
                f"Slow request {request_id}: {request.method} {request.url.path} "
                f"took {duration:.3f}s"
            )

        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Middleware to add security headers to responses."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        response = await call_next(request)

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-XSS-Protection"] = "1; mode=block"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"

        if not settings.debug:
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains"
            )

        return response
