"""Template endpoints scoped to the detected environment."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.api.tenant import get_scoped_session, get_tenant_context
from backend.app.db.context import TenantContext
from backend.app.db.sql_repositories import SqlTemplateRepository
from backend.app.models.catalog import TemplateOut

router = APIRouter()


@router.get("/templates", response_model=list[TemplateOut])
async def list_templates(
    session: Annotated[AsyncSession, Depends(get_scoped_session)],
    ctx: Annotated[TenantContext, Depends(get_tenant_context)],
) -> list[TemplateOut]:
    """List templates of the current environment plus shared templates."""
    records = await SqlTemplateRepository(session).list_templates(ctx)
    return [TemplateOut.model_validate(r) for r in records]
