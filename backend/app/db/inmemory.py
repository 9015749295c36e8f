"""In-memory implementations of repository interfaces."""

import itertools
from datetime import datetime

from backend.app.db.context import TenantContext
from backend.app.db.repositories import ActivityRecord, CourseRecord, TemplateRecord
from backend.app.db.scoping import is_visible
from backend.app.db.slugs import display_slug, slug_candidates
from backend.app.models.enums import ActivityType, CourseStatus


def _first_free(name: str, environment_id: int | None, taken: set[str]) -> str:
    return next(slug for slug in slug_candidates(name, environment_id) if slug not in taken)


class InMemoryCourseRepository:
    """In-memory implementation of CourseRepository."""

    def __init__(self) -> None:
        self._courses: dict[int, CourseRecord] = {}
        self._activities: dict[int, list[ActivityRecord]] = {}
        self._course_ids = itertools.count(1)
        self._activity_ids = itertools.count(1)

    def _visible(self, course_id: int, ctx: TenantContext) -> CourseRecord | None:
        record = self._courses.get(course_id)

        if record is None:
            return None

        # Enforce visibility
        if not is_visible(record.environment_id, ctx):
            return None

        return record

    def _taken_slugs(self, exclude_id: int | None = None) -> set[str]:
        return {
            c.slug for c in self._courses.values() if c.slug is not None and c.id != exclude_id
        }

    async def create_course(
        self,
        title: str,
        ctx: TenantContext,
        *,
        status: CourseStatus = CourseStatus.draft,
        template_id: int | None = None,
    ) -> CourseRecord:
        """Create a course owned by the context's tenant."""
        course_id = next(self._course_ids)
        environment_id = ctx.current_tenant_id
        slug = _first_free(title, environment_id, self._taken_slugs())

        record = CourseRecord(
            id=course_id,
            title=title,
            slug=slug,
            display_slug=display_slug(slug, environment_id),
            status=status,
            template_id=template_id,
            environment_id=environment_id,
            created_at=datetime.now(),
        )

        self._courses[course_id] = record
        self._activities[course_id] = []
        return record

    async def get_course(self, course_id: int, ctx: TenantContext) -> CourseRecord | None:
        """Get course by ID."""
        return self._visible(course_id, ctx)

    async def list_courses(
        self, ctx: TenantContext, *, status: CourseStatus | None = None, limit: int = 50
    ) -> list[CourseRecord]:
        """List visible courses, newest first."""
        results = [
            c
            for c in self._courses.values()
            if is_visible(c.environment_id, ctx) and (status is None or c.status == status)
        ]
        results.sort(key=lambda c: (c.created_at, c.id), reverse=True)
        return results[:limit]

    async def rename_course(
        self, course_id: int, title: str, ctx: TenantContext
    ) -> CourseRecord | None:
        """Change a course title and regenerate its slug."""
        record = self._visible(course_id, ctx)

        if record is None:
            return None

        if title != record.title:
            record.title = title
            record.slug = _first_free(title, record.environment_id, self._taken_slugs(course_id))
            record.display_slug = display_slug(record.slug, record.environment_id)

        return record

    async def add_activity(
        self,
        course_id: int,
        title: str,
        activity_type: ActivityType,
        ctx: TenantContext,
        order: int | None = None,
    ) -> ActivityRecord | None:
        """Append an activity to a visible course."""
        if self._visible(course_id, ctx) is None:
            return None

        activities = self._activities[course_id]
        if order is None:
            order = max((a.order for a in activities), default=-1) + 1

        record = ActivityRecord(
            id=next(self._activity_ids),
            course_id=course_id,
            title=title,
            type=activity_type,
            order=order,
        )
        activities.append(record)
        return record

    async def list_activities(
        self, course_id: int, ctx: TenantContext
    ) -> list[ActivityRecord] | None:
        """List a visible course's activities in order."""
        if self._visible(course_id, ctx) is None:
            return None

        return sorted(self._activities[course_id], key=lambda a: (a.order, a.id))


class InMemoryTemplateRepository:
    """In-memory implementation of TemplateRepository."""

    def __init__(self) -> None:
        self._templates: dict[int, TemplateRecord] = {}
        self._ids = itertools.count(1)

    async def create_template(
        self, name: str, ctx: TenantContext, *, status: CourseStatus = CourseStatus.draft
    ) -> TemplateRecord:
        """Create a template owned by the context's tenant."""
        environment_id = ctx.current_tenant_id
        taken = {t.slug for t in self._templates.values() if t.slug is not None}
        slug = _first_free(name, environment_id, taken)

        record = TemplateRecord(
            id=next(self._ids),
            name=name,
            slug=slug,
            display_slug=display_slug(slug, environment_id),
            status=status,
            environment_id=environment_id,
        )
        self._templates[record.id] = record
        return record

    async def list_templates(self, ctx: TenantContext) -> list[TemplateRecord]:
        """List visible templates by name."""
        return sorted(
            (t for t in self._templates.values() if is_visible(t.environment_id, ctx)),
            key=lambda t: t.name,
        )
