"""API response models for the learning catalog."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from backend.app.models.enums import ActivityType, CourseStatus


class CourseOut(BaseModel):
    """Course as returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    slug: str | None
    display_slug: str
    status: CourseStatus
    template_id: int | None
    environment_id: int | None = Field(description="Owning environment; null for global courses")
    created_at: datetime | None


class ActivityOut(BaseModel):
    """Activity as returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    course_id: int
    title: str
    type: ActivityType
    order: int


class TemplateOut(BaseModel):
    """Template as returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    slug: str | None
    display_slug: str
    status: CourseStatus
    environment_id: int | None


class EnvironmentOut(BaseModel):
    """Detected environment summary."""

    id: int
    name: str
    primary_domain: str
    detected_domain: str | None
    outcome: str
