# app/services/cache_service.py
"""
Versioned read cache for list endpoints and the analytics dashboard.

Each resource has a version counter in Redis. Cached entries embed the
version in their key, so bumping the counter makes every older entry
unreachable at once; stale keys simply expire through their TTL.

All operations degrade to "cache miss / no-op" when Redis is not configured
or a command fails. A cache problem never fails a request.
"""

import json
import logging
from enum import Enum
from typing import Any, Callable, Optional

import redis

from app.core.config import get_settings
from app.core.redis import get_redis_client

logger = logging.getLogger(__name__)

KEY_PREFIX = "practice"
DEFAULT_TTL_SECONDS = 60


class CacheResource(str, Enum):
    APPOINTMENTS = "appointments"
    PATIENTS = "patients"
    DOCTORS = "doctors"
    ANALYTICS = "analytics"


# Resources whose cached reads go stale when the key resource changes
INVALIDATION_RULES: dict[CacheResource, tuple[CacheResource, ...]] = {
    CacheResource.APPOINTMENTS: (CacheResource.APPOINTMENTS, CacheResource.ANALYTICS),
    CacheResource.PATIENTS: (
        CacheResource.PATIENTS,
        CacheResource.APPOINTMENTS,
        CacheResource.ANALYTICS,
    ),
    CacheResource.DOCTORS: (CacheResource.DOCTORS, CacheResource.ANALYTICS),
}


class ResourceCache:
    def __init__(self, client: Optional[redis.Redis], default_ttl: int = DEFAULT_TTL_SECONDS):
        self.client = client
        self.default_ttl = default_ttl

    @property
    def enabled(self) -> bool:
        return self.client is not None

    def _version_key(self, resource: CacheResource) -> str:
        return f"{KEY_PREFIX}:{resource.value}:version"

    def version(self, resource: CacheResource) -> int:
        if not self.client:
            return 0
        try:
            raw = self.client.get(self._version_key(resource))
        except redis.RedisError as e:
            logger.warning(f"Redis GET error for version of '{resource.value}': {e}")
            return 0
        return int(raw) if raw else 0

    def key(self, resource: CacheResource, suffix: str) -> str:
        return f"{KEY_PREFIX}:{resource.value}:v{self.version(resource)}:{suffix}"

    def get(self, resource: CacheResource, suffix: str) -> Any | None:
        """Return the cached JSON value, or None on miss / degraded mode."""
        if not self.client:
            return None
        return self._get_key(self.key(resource, suffix))

    def _get_key(self, key: str) -> Any | None:
        try:
            raw = self.client.get(key)
        except redis.RedisError as e:
            logger.warning(f"Redis GET error for key '{key}': {e}")
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except ValueError:
            logger.warning(f"Discarding undecodable cache entry '{key}'")
            return None

    def set(self, resource: CacheResource, suffix: str, value: Any, ttl: int | None = None) -> bool:
        if not self.client:
            return False
        return self._set_key(self.key(resource, suffix), value, ttl)

    def _set_key(self, key: str, value: Any, ttl: int | None = None) -> bool:
        try:
            self.client.setex(key, ttl or self.default_ttl, json.dumps(value, default=str))
            return True
        except redis.RedisError as e:
            logger.warning(f"Redis SET error for key '{key}': {e}")
            return False

    def get_or_set(
        self,
        resource: CacheResource,
        suffix: str,
        loader: Callable[[], Any],
        ttl: int | None = None,
    ) -> Any:
        """
        Return the cached value or load and store it.

        The key is resolved once, before loading. If the resource is invalidated
        while `loader` runs, the result lands under the old version and is never read.
        """
        if not self.client:
            return loader()
        key = self.key(resource, suffix)
        cached = self._get_key(key)
        if cached is not None:
            return cached
        value = loader()
        self._set_key(key, value, ttl=ttl)
        return value

    def invalidate(self, *resources: CacheResource) -> None:
        """Bump the version of each resource so existing entries stop matching."""
        if not self.client:
            return
        for resource in resources:
            try:
                self.client.incr(self._version_key(resource))
            except redis.RedisError as e:
                logger.warning(f"Redis INCR error for version of '{resource.value}': {e}")

    def invalidate_for(self, changed: CacheResource) -> None:
        """Apply the invalidation rule for a mutation of `changed`."""
        self.invalidate(*INVALIDATION_RULES.get(changed, (changed,)))


def get_resource_cache() -> ResourceCache:
    """
    FastAPI dependency returning the process-wide cache (degraded when Redis is off).
    """
    return ResourceCache(get_redis_client(), default_ttl=get_settings().analytics_cache_ttl_seconds)
