"""Models package - re-exports for convenience."""

from backend.app.models.catalog import ActivityOut, CourseOut, EnvironmentOut, TemplateOut
from backend.app.models.enums import ActivityType, CourseStatus, UserRole

__all__ = [
    "ActivityOut",
    "ActivityType",
    "CourseOut",
    "CourseStatus",
    "EnvironmentOut",
    "TemplateOut",
    "UserRole",
]
