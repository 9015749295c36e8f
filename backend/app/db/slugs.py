"""Slugs that stay unique across environments."""

import itertools
import re
import unicodedata
from collections.abc import Iterator

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.db.scoping import without_tenant_scope

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(value: str) -> str:
    """Lowercase ASCII slug with single dashes between words."""
    normalized = unicodedata.normalize("NFKD", value).encode("ascii", "ignore").decode("ascii")
    return _NON_ALNUM.sub("-", normalized.lower()).strip("-")


def display_slug(slug: str | None, environment_id: int | None) -> str:
    """Strip the environment suffix (and any counter) added by generate_unique_slug."""
    if not slug:
        return ""
    if environment_id is None:
        return slug
    return re.sub(rf"-{environment_id}(-\d+)?$", "", slug)


def slug_candidates(name: str, environment_id: int | None) -> Iterator[str]:
    """Yield the base slug, then base-1, base-2, ... until one is free."""
    base = slugify(name)
    if environment_id is not None:
        base = f"{base}-{environment_id}"

    yield base
    for count in itertools.count(1):
        yield f"{base}-{count}"


async def generate_unique_slug(
    session: AsyncSession,
    entity: type,
    name: str,
    environment_id: int | None,
    exclude_id: int | None = None,
) -> str:
    """Slug for ``name``, unique among all rows of ``entity``.

    Environment-owned rows get the environment id appended so two tenants can
    use the same title. Uniqueness is checked across every tenant, so the
    lookup bypasses tenant scoping.

    Args:
        session: Database session
        entity: Mapped class with ``id`` and ``slug`` columns
        name: Human-readable name to derive the slug from
        environment_id: Owning environment, or None for a global row
        exclude_id: Row being renamed, ignored in the uniqueness check

    Returns:
        Unique slug
    """
    for slug in slug_candidates(name, environment_id):
        if not await _slug_taken(session, entity, slug, exclude_id):
            return slug
    raise AssertionError("slug_candidates is infinite")


async def _slug_taken(
    session: AsyncSession, entity: type, slug: str, exclude_id: int | None
) -> bool:
    stmt = select(entity.id).where(entity.slug == slug)  # type: ignore[attr-defined]
    if exclude_id is not None:
        stmt = stmt.where(entity.id != exclude_id)  # type: ignore[attr-defined]
    result = await session.execute(without_tenant_scope(stmt.limit(1)))
    return result.first() is not None
