"""Tenant context for row visibility."""

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

TENANT_CONTEXT_KEY = "tenant_context"


@dataclass(frozen=True)
class TenantContext:
    """Tenant selected for one unit of work.

    A context without a tenant id means no tenant is active; scoped queries
    then see every row.
    """

    current_tenant_id: int | None = None

    @property
    def has_tenant(self) -> bool:
        return self.current_tenant_id is not None

    @classmethod
    def for_tenant(cls, tenant_id: int) -> "TenantContext":
        return cls(current_tenant_id=tenant_id)

    @classmethod
    def unscoped(cls) -> "TenantContext":
        """Context for system and administrative work outside any tenant."""
        return cls(current_tenant_id=None)


def bind_tenant_context(session: Session | AsyncSession, ctx: TenantContext) -> None:
    """Attach a tenant context to a session for the rest of its unit of work."""
    session.info[TENANT_CONTEXT_KEY] = ctx


def get_bound_context(session: Session | AsyncSession) -> TenantContext:
    """Return the context bound to a session, or an unscoped one."""
    ctx = session.info.get(TENANT_CONTEXT_KEY)
    if ctx is None:
        return TenantContext.unscoped()
    return ctx
