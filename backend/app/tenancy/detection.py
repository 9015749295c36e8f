"""Environment detection from request headers."""

import logging
from dataclasses import dataclass
from urllib.parse import urlsplit

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.config import Settings
from backend.app.db.context import TenantContext
from backend.app.db.models import Environment
from backend.app.db.scoping import without_tenant_scope
from backend.app.tenancy.domains import DomainRegistry
from backend.app.utils.metrics import PrometheusScopeMetrics, scope_metrics

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Detection:
    """Outcome of environment detection for one request.

    Attributes:
        environment: Matched environment, or None
        domain: Domain the environment was matched on (or the candidate tried)
        outcome: "matched", "known_frontend", "fallback" or "none"
    """

    environment: Environment | None
    domain: str | None
    outcome: str

    def context(self) -> TenantContext:
        """Tenant context for the request; unscoped when nothing matched."""
        if self.environment is None:
            return TenantContext.unscoped()
        return TenantContext.for_tenant(self.environment.id)


def _hostname(value: str | None) -> str | None:
    if not value:
        return None
    if "//" not in value:
        value = f"//{value}"
    return urlsplit(value).hostname


def candidate_domain(origin: str | None, referer: str | None, host: str | None) -> str | None:
    """Frontend domain of a request: Origin, then Referer, then the request host."""
    return _hostname(origin) or _hostname(referer) or _hostname(host)


class EnvironmentResolver:
    """Maps a request to the environment it is addressed to."""

    def __init__(
        self,
        settings: Settings,
        registry: DomainRegistry | None = None,
        metrics: PrometheusScopeMetrics = scope_metrics,
    ) -> None:
        self._settings = settings
        self._registry = registry
        self._metrics = metrics

    async def resolve(
        self,
        session: AsyncSession,
        *,
        origin: str | None,
        referer: str | None,
        host: str | None,
    ) -> Detection:
        """Detect the environment for a request.

        Args:
            session: Database session
            origin: Origin header
            referer: Referer header
            host: Host the API was called on

        Returns:
            Detection with the environment, matched domain and outcome
        """
        domain = candidate_domain(origin, referer, host)
        detection = await self._detect(session, domain, origin, referer)
        self._metrics.inc_detection(detection.outcome)

        log_data = {
            "outcome": detection.outcome,
            "detected_domain": detection.domain,
            "origin": origin,
            "referer": referer,
            "api_host": host,
        }
        if detection.environment is not None:
            log_data["environment_id"] = detection.environment.id
            logger.info(
                f"Environment detection: {detection.outcome}", extra={"structured": log_data}
            )
        else:
            logger.warning("Environment detection: none", extra={"structured": log_data})

        return detection

    async def _detect(
        self,
        session: AsyncSession,
        domain: str | None,
        origin: str | None,
        referer: str | None,
    ) -> Detection:
        if domain is not None:
            environment = await self._find_by_domain(session, domain)
            if environment is not None:
                return Detection(environment, domain, "matched")

        for frontend in self._settings.known_frontend_domains:
            if frontend in (origin or "") or frontend in (referer or ""):
                environment = await self._find_by_domain(session, frontend)
                if environment is not None:
                    return Detection(environment, frontend, "known_frontend")

        if self._settings.environment_fallback_enabled:
            environment = await self._first_active(session)
            if environment is not None:
                return Detection(environment, domain, "fallback")

        return Detection(None, domain, "none")

    async def _find_by_domain(self, session: AsyncSession, domain: str) -> Environment | None:
        if self._registry is not None and not await self._registry.is_allowed(session, domain):
            return None

        active = select(Environment).where(Environment.is_active.is_(True)).order_by(Environment.id)

        result = await session.execute(
            without_tenant_scope(active.where(Environment.primary_domain == domain))
        )
        environment = result.scalars().first()
        if environment is not None:
            return environment

        # additional_domains is a JSON list; match it in Python to stay portable.
        result = await session.execute(without_tenant_scope(active))
        for candidate in result.scalars():
            if candidate.has_domain(domain):
                return candidate
        return None

    async def _first_active(self, session: AsyncSession) -> Environment | None:
        result = await session.execute(
            without_tenant_scope(
                select(Environment).where(Environment.is_active.is_(True)).order_by(Environment.id)
            )
        )
        return result.scalars().first()
