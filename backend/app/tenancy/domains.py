"""Registry of hosts that belong to active environments."""

import json
import logging
import threading
import time
from collections.abc import Callable, Sequence
from urllib.parse import urlsplit

import redis
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.db.models import Environment
from backend.app.db.scoping import without_tenant_scope

logger = logging.getLogger(__name__)


def normalize_host(value: str | None) -> str | None:
    """Reduce a stored domain or URL to lowercase ``host[:port]``.

    Returns:
        Normalized host, or None for empty values and URLs without a host
    """
    if not value:
        return None

    value = value.strip().lower()
    if not value:
        return None

    if value.startswith(("http://", "https://")):
        parsed = urlsplit(value)
        if not parsed.hostname:
            return None
        return f"{parsed.hostname}:{parsed.port}" if parsed.port else parsed.hostname

    return value


class DomainRegistry:
    """Allowed hosts of all active environments plus development hosts.

    The host list is cached for ``ttl_seconds``, in Redis when a client is
    given so that every worker shares it, otherwise in process.
    """

    CACHE_KEY = "tenant_domains:all_hosts"

    def __init__(
        self,
        ttl_seconds: int,
        dev_hosts: Sequence[str] = (),
        redis_client: redis.Redis | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl_seconds = ttl_seconds
        self._dev_hosts = tuple(dev_hosts)
        self._redis = redis_client
        self._clock = clock
        self._lock = threading.Lock()
        self._hosts: list[str] | None = None
        self._expires_at = 0.0

    async def allowed_hosts(self, session: AsyncSession) -> list[str]:
        """Sorted, de-duplicated hosts, loading them when the cache is stale."""
        cached = self._cached()
        if cached is not None:
            return cached

        hosts = await self._load(session)
        self._store(hosts)
        logger.info(
            "Domain registry refreshed",
            extra={"structured": {"host_count": len(hosts), "shared": self._redis is not None}},
        )
        return hosts

    async def is_allowed(self, session: AsyncSession, host: str | None) -> bool:
        """True if ``host`` (with or without port) belongs to the registry."""
        normalized = normalize_host(host)
        if normalized is None:
            return False

        hosts = await self.allowed_hosts(session)
        known = set(hosts) | {h.rsplit(":", 1)[0] for h in hosts}
        return normalized in known

    def invalidate(self) -> None:
        """Drop the cached host list, e.g. after an environment's domains change."""
        with self._lock:
            self._hosts = None
            self._expires_at = 0.0
        if self._redis is not None:
            self._redis.delete(self.CACHE_KEY)

    def _cached(self) -> list[str] | None:
        if self._redis is not None:
            raw = self._redis.get(self.CACHE_KEY)
            return json.loads(raw) if raw else None

        with self._lock:
            if self._hosts is not None and self._clock() < self._expires_at:
                return list(self._hosts)
        return None

    def _store(self, hosts: list[str]) -> None:
        if self._redis is not None:
            self._redis.setex(self.CACHE_KEY, self._ttl_seconds, json.dumps(hosts))
            return

        with self._lock:
            self._hosts = list(hosts)
            self._expires_at = self._clock() + self._ttl_seconds

    async def _load(self, session: AsyncSession) -> list[str]:
        result = await session.execute(
            without_tenant_scope(select(Environment).where(Environment.is_active.is_(True)))
        )

        hosts: set[str] = set()
        for environment in result.scalars():
            for domain in environment.all_domains():
                normalized = normalize_host(domain)
                if normalized is not None:
                    hosts.add(normalized)

        for dev_host in self._dev_hosts:
            normalized = normalize_host(dev_host)
            if normalized is not None:
                hosts.add(normalized)

        return sorted(hosts)
