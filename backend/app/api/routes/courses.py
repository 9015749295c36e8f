"""Course and activity endpoints scoped to the detected environment."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.api.tenant import get_scoped_session, get_tenant_context
from backend.app.db.context import TenantContext
from backend.app.db.sql_repositories import SqlCourseRepository
from backend.app.models.catalog import ActivityOut, CourseOut
from backend.app.models.enums import CourseStatus

router = APIRouter()


def get_course_repository(
    session: Annotated[AsyncSession, Depends(get_scoped_session)],
) -> SqlCourseRepository:
    return SqlCourseRepository(session)


@router.get("/courses", response_model=list[CourseOut])
async def list_courses(
    repo: Annotated[SqlCourseRepository, Depends(get_course_repository)],
    ctx: Annotated[TenantContext, Depends(get_tenant_context)],
    status_filter: Annotated[CourseStatus | None, Query(alias="status")] = None,
    limit: Annotated[int, Query(ge=1, le=200)] = 50,
) -> list[CourseOut]:
    """List courses of the current environment plus global courses."""
    records = await repo.list_courses(ctx, status=status_filter, limit=limit)
    return [CourseOut.model_validate(r) for r in records]


@router.get("/courses/{course_id}", response_model=CourseOut)
async def get_course(
    course_id: int,
    repo: Annotated[SqlCourseRepository, Depends(get_course_repository)],
    ctx: Annotated[TenantContext, Depends(get_tenant_context)],
) -> CourseOut:
    """Get one course.

    Raises:
        HTTPException: 404 if the course does not exist or belongs to another environment
    """
    record = await repo.get_course(course_id, ctx)

    if record is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Course not found")

    return CourseOut.model_validate(record)


@router.get("/courses/{course_id}/activities", response_model=list[ActivityOut])
async def list_course_activities(
    course_id: int,
    repo: Annotated[SqlCourseRepository, Depends(get_course_repository)],
    ctx: Annotated[TenantContext, Depends(get_tenant_context)],
) -> list[ActivityOut]:
    """List a course's activities in order."""
    records = await repo.list_activities(course_id, ctx)

    if records is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Course not found")

    return [ActivityOut.model_validate(r) for r in records]
