"""Health check module with dependency verification."""

from __future__ import annotations

import time
from typing import Any

from sqlalchemy import func, select

from .db.core import get_session
from .db.models import PlaceRecord, PlanRecord
from .extractor_client import credential_from_settings
from .settings import settings


def _is_configured(value: str | None) -> bool:
    """Return True when a config string is non-empty after trimming."""
    if value is None:
        return False
    return bool(value.strip())


class HealthChecker:
    """Health checker for monitoring service dependencies."""

    def __init__(self) -> None:
        self._check_cache: dict[str, tuple[dict[str, Any], float]] = {}
        self._cache_ttl = 30.0

    async def check_all(self) -> dict[str, Any]:
        """
        Check health of all dependencies.

        Returns:
            Dict with overall status and individual component checks
        """
        checks = {
            "database": await self._check_database(),
            "extractor": self._check_extractor(),
            "photos": (
                {"status": "ok"}
                if _is_configured(settings.GOOGLE_PLACES_API_KEY)
                else {"status": "disabled", "reason": "GOOGLE_PLACES_API_KEY not configured"}
            ),
            "sentry": (
                self._check_sentry()
                if _is_configured(settings.SENTRY_DSN)
                else {"status": "disabled"}
            ),
        }

        all_ok = all(check.get("status") in {"ok", "disabled"} for check in checks.values())

        return {
            "status": "healthy" if all_ok else "degraded",
            "timestamp": time.time(),
            "checks": checks,
        }

    async def _check_database(self) -> dict[str, Any]:
        """Count places and plans to prove the database answers."""
        try:
            async with get_session() as session:
                place_count = (
                    await session.execute(select(func.count()).select_from(PlaceRecord))
                ).scalar_one()
                plan_count = (
                    await session.execute(select(func.count()).select_from(PlanRecord))
                ).scalar_one()
            return {
                "status": "ok",
                "place_count": int(place_count),
                "plan_count": int(plan_count),
                "backend": "sqlite" if settings.is_sqlite else "postgresql",
            }
        except Exception as exc:
            return {
                "status": "error",
                "error": str(exc),
                "error_type": type(exc).__name__,
            }

    def _check_extractor(self) -> dict[str, Any]:
        credential = credential_from_settings()
        if credential is None:
            return {"status": "disabled", "reason": "OPENAI_API_KEY not configured"}
        if credential.is_expired():
            return {"status": "error", "error": "Extractor API key has expired"}
        result: dict[str, Any] = {"status": "ok", "model": settings.EXTRACTION_MODEL}
        if credential.expires_at is not None:
            result["expires_at"] = credential.expires_at.isoformat()
        return result

    def _check_sentry(self) -> dict[str, Any]:
        """Check if Sentry is configured (doesn't actually test connectivity)."""
        cache_key = "sentry"
        cached = self._get_cached_check(cache_key)
        if cached is not None:
            return cached

        dsn = settings.SENTRY_DSN or ""
        if "@" in dsn and "//" in dsn:
            result = {
                "status": "ok",
                "environment": settings.SENTRY_ENVIRONMENT,
                "release": settings.SENTRY_RELEASE or "unset",
            }
        else:
            result = {"status": "error", "error": "Invalid SENTRY_DSN format"}
        self._cache_check(cache_key, result)
        return result

    def _get_cached_check(self, key: str) -> dict[str, Any] | None:
        if key not in self._check_cache:
            return None
        result, timestamp = self._check_cache[key]
        if time.time() - timestamp > self._cache_ttl:
            return None
        return result

    def _cache_check(self, key: str, result: dict[str, Any]) -> None:
        self._check_cache[key] = (result, time.time())

    def clear_cache(self) -> None:
        """Clear cached dependency checks (useful for tests)."""
        self._check_cache.clear()


health_checker = HealthChecker()


__all__ = ["health_checker", "HealthChecker"]
