"""Tenancy-safe query helpers."""

from sqlalchemy import Select, select

from backend.app.config import get_settings
from backend.app.db.context import TenantContext
from backend.app.db.models import Activity, Course, Template
from backend.app.db.schema import describe_entity
from backend.app.db.scoping import TenantVisibilityFilter

_filter = TenantVisibilityFilter()


def scoped_select(entity: type, ctx: TenantContext) -> Select:
    """Select ``entity`` rows visible under ``ctx``.

    Works on any session, scoped or not.

    Args:
        entity: Mapped class
        ctx: Tenant context

    Returns:
        Select narrowed to the tenant's rows plus global rows
    """
    entity_type = describe_entity(entity, get_settings().tenant_column)
    return _filter.apply(select(entity), entity_type, ctx)


def query_courses(ctx: TenantContext) -> Select:
    """Query course table with tenant visibility enforced."""
    return scoped_select(Course, ctx)


def query_templates(ctx: TenantContext) -> Select:
    """Query template table with tenant visibility enforced."""
    return scoped_select(Template, ctx)


def query_activities(course_id: int, ctx: TenantContext) -> Select:
    """Query a course's activities, joined through the course's visibility."""
    course_type = describe_entity(Course, get_settings().tenant_column)
    stmt = (
        select(Activity)
        .join(Course, Activity.course_id == Course.id)
        .where(Activity.course_id == course_id)
        .order_by(Activity.order, Activity.id)
    )
    return _filter.apply(stmt, course_type, ctx)
