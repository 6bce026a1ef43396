"""Infrastructure — process-local helpers shared by the adapters."""

from brainbot.infrastructure.rate_limit import RateLimiter, RateLimitResult

__all__ = ["RateLimiter", "RateLimitResult"]
