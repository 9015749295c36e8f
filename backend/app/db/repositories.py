"""Repository protocol interfaces for data access."""

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from backend.app.db.context import TenantContext
from backend.app.models.enums import ActivityType, CourseStatus


@dataclass
class CourseRecord:
    """Course data record."""

    id: int
    title: str
    slug: str | None
    display_slug: str
    status: CourseStatus
    template_id: int | None
    environment_id: int | None
    created_at: datetime | None

    @property
    def is_global(self) -> bool:
        return self.environment_id is None


@dataclass
class ActivityRecord:
    """Activity data record."""

    id: int
    course_id: int
    title: str
    type: ActivityType
    order: int


@dataclass
class TemplateRecord:
    """Template data record."""

    id: int
    name: str
    slug: str | None
    display_slug: str
    status: CourseStatus
    environment_id: int | None


class CourseRepository(Protocol):
    """Repository for course and activity operations.

    Every read only returns rows visible under ``ctx``. New rows belong to the
    context's tenant, or are global when no tenant is selected.
    """

    async def create_course(
        self,
        title: str,
        ctx: TenantContext,
        *,
        status: CourseStatus = CourseStatus.draft,
        template_id: int | None = None,
    ) -> CourseRecord:
        """Create a course owned by the context's tenant."""
        ...

    async def get_course(self, course_id: int, ctx: TenantContext) -> CourseRecord | None:
        """Get course by ID.

        Args:
            course_id: Course ID
            ctx: Tenant context (enforces visibility)

        Returns:
            Course record or None if missing or not visible
        """
        ...

    async def list_courses(
        self, ctx: TenantContext, *, status: CourseStatus | None = None, limit: int = 50
    ) -> list[CourseRecord]:
        """List visible courses, newest first."""
        ...

    async def rename_course(
        self, course_id: int, title: str, ctx: TenantContext
    ) -> CourseRecord | None:
        """Change a course title and regenerate its slug."""
        ...

    async def add_activity(
        self,
        course_id: int,
        title: str,
        activity_type: ActivityType,
        ctx: TenantContext,
        order: int | None = None,
    ) -> ActivityRecord | None:
        """Append an activity to a visible course.

        Returns:
            Activity record, or None if the course is not visible
        """
        ...

    async def list_activities(
        self, course_id: int, ctx: TenantContext
    ) -> list[ActivityRecord] | None:
        """List a visible course's activities in order, or None if not visible."""
        ...


class TemplateRepository(Protocol):
    """Repository for template operations."""

    async def create_template(
        self, name: str, ctx: TenantContext, *, status: CourseStatus = CourseStatus.draft
    ) -> TemplateRecord:
        ...

    async def list_templates(self, ctx: TenantContext) -> list[TemplateRecord]:
        ...
