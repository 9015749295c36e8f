"""SQL implementations of repository interfaces."""

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from backend.app.db.context import TenantContext
from backend.app.db.models import Activity, Course, Template
from backend.app.db.queries import query_activities, query_courses, query_templates
from backend.app.db.repositories import ActivityRecord, CourseRecord, TemplateRecord
from backend.app.db.slugs import display_slug, generate_unique_slug
from backend.app.models.enums import ActivityType, CourseStatus


def _course_record(course: Course) -> CourseRecord:
    return CourseRecord(
        id=course.id,
        title=course.title,
        slug=course.slug,
        display_slug=display_slug(course.slug, course.environment_id),
        status=course.status,
        template_id=course.template_id,
        environment_id=course.environment_id,
        created_at=course.created_at,
    )


def _activity_record(activity: Activity) -> ActivityRecord:
    return ActivityRecord(
        id=activity.id,
        course_id=activity.course_id,
        title=activity.title,
        type=activity.type,
        order=activity.order,
    )


def _template_record(template: Template) -> TemplateRecord:
    return TemplateRecord(
        id=template.id,
        name=template.name,
        slug=template.slug,
        display_slug=display_slug(template.slug, template.environment_id),
        status=template.status,
        environment_id=template.environment_id,
    )


class SqlCourseRepository:
    """SQL implementation of CourseRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def _visible_course(self, course_id: int, ctx: TenantContext) -> Course | None:
        result = await self._session.execute(query_courses(ctx).where(Course.id == course_id))
        return result.scalar_one_or_none()

    async def create_course(
        self,
        title: str,
        ctx: TenantContext,
        *,
        status: CourseStatus = CourseStatus.draft,
        template_id: int | None = None,
    ) -> CourseRecord:
        """Create a course owned by the context's tenant."""
        environment_id = ctx.current_tenant_id
        course = Course(
            title=title,
            slug=await generate_unique_slug(self._session, Course, title, environment_id),
            status=status,
            template_id=template_id,
            environment_id=environment_id,
        )

        self._session.add(course)
        await self._session.commit()
        await self._session.refresh(course)

        return _course_record(course)

    async def get_course(self, course_id: int, ctx: TenantContext) -> CourseRecord | None:
        """Get course by ID."""
        course = await self._visible_course(course_id, ctx)

        if course is None:
            return None

        return _course_record(course)

    async def list_courses(
        self, ctx: TenantContext, *, status: CourseStatus | None = None, limit: int = 50
    ) -> list[CourseRecord]:
        """List visible courses, newest first."""
        stmt = query_courses(ctx)
        if status is not None:
            stmt = stmt.where(Course.status == status)
        stmt = stmt.order_by(Course.created_at.desc(), Course.id.desc()).limit(limit)

        result = await self._session.execute(stmt)
        return [_course_record(course) for course in result.scalars()]

    async def rename_course(
        self, course_id: int, title: str, ctx: TenantContext
    ) -> CourseRecord | None:
        """Change a course title and regenerate its slug."""
        course = await self._visible_course(course_id, ctx)

        if course is None:
            return None

        if title != course.title:
            course.title = title
            course.slug = await generate_unique_slug(
                self._session, Course, title, course.environment_id, exclude_id=course.id
            )
            await self._session.commit()
            await self._session.refresh(course)

        return _course_record(course)

    async def add_activity(
        self,
        course_id: int,
        title: str,
        activity_type: ActivityType,
        ctx: TenantContext,
        order: int | None = None,
    ) -> ActivityRecord | None:
        """Append an activity to a visible course."""
        course = await self._visible_course(course_id, ctx)

        if course is None:
            return None

        if order is None:
            result = await self._session.execute(
                select(func.coalesce(func.max(Activity.order), -1)).where(
                    Activity.course_id == course_id
                )
            )
            order = result.scalar_one() + 1

        activity = Activity(course_id=course.id, title=title, type=activity_type, order=order)
        self._session.add(activity)
        await self._session.commit()
        await self._session.refresh(activity)

        return _activity_record(activity)

    async def list_activities(
        self, course_id: int, ctx: TenantContext
    ) -> list[ActivityRecord] | None:
        """List a visible course's activities in order."""
        if await self._visible_course(course_id, ctx) is None:
            return None

        result = await self._session.execute(query_activities(course_id, ctx))
        return [_activity_record(activity) for activity in result.scalars()]


class SqlTemplateRepository:
    """SQL implementation of TemplateRepository."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create_template(
        self, name: str, ctx: TenantContext, *, status: CourseStatus = CourseStatus.draft
    ) -> TemplateRecord:
        """Create a template owned by the context's tenant."""
        environment_id = ctx.current_tenant_id
        template = Template(
            name=name,
            slug=await generate_unique_slug(self._session, Template, name, environment_id),
            status=status,
            environment_id=environment_id,
        )

        self._session.add(template)
        await self._session.commit()
        await self._session.refresh(template)

        return _template_record(template)

    async def list_templates(self, ctx: TenantContext) -> list[TemplateRecord]:
        """List visible templates by name."""
        result = await self._session.execute(query_templates(ctx).order_by(Template.name))
        return [_template_record(template) for template in result.scalars()]
