"""Closed string-valued tag sets shared by models and API schemas."""

from enum import Enum


class UserRole(str, Enum):
    """Platform role of a user account."""

    learner = "learner"
    individual_teacher = "individual_teacher"
    company_teacher = "company_teacher"
    admin = "admin"
    super_admin = "super_admin"
    sales_agent = "sales_agent"

    @property
    def is_teacher(self) -> bool:
        return self in (UserRole.individual_teacher, UserRole.company_teacher)

    @property
    def is_admin(self) -> bool:
        return self in (UserRole.admin, UserRole.super_admin)


class ActivityType(str, Enum):
    """Kind of content an activity delivers."""

    text = "text"
    video = "video"
    quiz = "quiz"
    lesson = "lesson"
    assignment = "assignment"
    documentation = "documentation"
    event = "event"
    certificate = "certificate"
    feedback = "feedback"


class CourseStatus(str, Enum):
    """Publication status of courses and templates."""

    draft = "draft"
    published = "published"
    archived = "archived"
