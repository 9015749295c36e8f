"""Tenant context dependencies.

The environment is detected from the request's Origin, Referer and Host
headers. Its id becomes the TenantContext that is bound to the request's
database session, so every ORM query issued through that session is scoped.
"""

from functools import lru_cache
from typing import Annotated

import redis
from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.config import get_settings
from backend.app.db.context import TenantContext, bind_tenant_context
from backend.app.db.engine import get_session
from backend.app.tenancy.detection import Detection, EnvironmentResolver
from backend.app.tenancy.domains import DomainRegistry


@lru_cache
def get_resolver() -> EnvironmentResolver:
    """Process-wide resolver sharing one allowed-host registry."""
    settings = get_settings()
    redis_client = (
        redis.from_url(settings.redis_url)  # type: ignore[no-untyped-call]
        if settings.redis_url
        else None
    )
    registry = DomainRegistry(
        ttl_seconds=settings.domain_cache_ttl_seconds,
        dev_hosts=settings.dev_hosts,
        redis_client=redis_client,
    )
    return EnvironmentResolver(settings, registry)


async def get_detection(
    request: Request,
    session: Annotated[AsyncSession, Depends(get_session)],
    resolver: Annotated[EnvironmentResolver, Depends(get_resolver)],
    origin: Annotated[str | None, Header()] = None,
    referer: Annotated[str | None, Header()] = None,
) -> Detection:
    """Detect the environment the request is addressed to."""
    return await resolver.resolve(
        session,
        origin=origin,
        referer=referer,
        host=request.headers.get("host"),
    )


async def get_tenant_context(
    detection: Annotated[Detection, Depends(get_detection)],
) -> TenantContext:
    """Tenant context for the request; unscoped when no environment matched."""
    return detection.context()


async def get_scoped_session(
    session: Annotated[AsyncSession, Depends(get_session)],
    ctx: Annotated[TenantContext, Depends(get_tenant_context)],
) -> AsyncSession:
    """Request session with the tenant context bound to it."""
    bind_tenant_context(session, ctx)
    return session
