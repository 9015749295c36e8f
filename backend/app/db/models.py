"""SQLAlchemy ORM models for the learning catalog."""

from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.sql import func

from backend.app.models.enums import ActivityType, CourseStatus, UserRole


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class Environment(Base):
    """Environment table - the tenancy boundary."""

    __tablename__ = "environment"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    primary_domain: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    additional_domains: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    # Relationships
    courses: Mapped[list["Course"]] = relationship("Course", back_populates="environment")
    templates: Mapped[list["Template"]] = relationship("Template", back_populates="environment")

    def all_domains(self) -> list[str]:
        """Primary domain followed by any additional domains."""
        return [self.primary_domain, *(self.additional_domains or [])]

    def has_domain(self, domain: str) -> bool:
        return domain in self.all_domains()


class User(Base):
    """User table - platform accounts, shared across environments."""

    __tablename__ = "app_user"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    role: Mapped[UserRole] = mapped_column(
        Enum(UserRole, native_enum=False, length=32), default=UserRole.learner, nullable=False
    )


class Template(Base):
    """Template table - course blueprints, tenant-owned or global."""

    __tablename__ = "template"
    __table_args__ = (Index("idx_template_env", "environment_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    slug: Mapped[str | None] = mapped_column(Text, nullable=True, unique=True)
    status: Mapped[CourseStatus] = mapped_column(
        Enum(CourseStatus, native_enum=False, length=16), default=CourseStatus.draft, nullable=False
    )
    environment_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("environment.id"), nullable=True
    )

    # Relationships
    environment: Mapped["Environment | None"] = relationship(
        "Environment", back_populates="templates"
    )
    courses: Mapped[list["Course"]] = relationship("Course", back_populates="template")


class Course(Base):
    """Course table - tenant-owned or global."""

    __tablename__ = "course"
    __table_args__ = (Index("idx_course_env_status", "environment_id", "status"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(Text, nullable=False)
    slug: Mapped[str | None] = mapped_column(Text, nullable=True, unique=True)
    status: Mapped[CourseStatus] = mapped_column(
        Enum(CourseStatus, native_enum=False, length=16), default=CourseStatus.draft, nullable=False
    )
    template_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("template.id"), nullable=True
    )
    environment_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("environment.id"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    # Relationships
    environment: Mapped["Environment | None"] = relationship(
        "Environment", back_populates="courses"
    )
    template: Mapped["Template | None"] = relationship("Template", back_populates="courses")
    activities: Mapped[list["Activity"]] = relationship(
        "Activity",
        back_populates="course",
        cascade="all, delete-orphan",
        order_by="Activity.order",
    )


class Activity(Base):
    """Activity table - ordered content items within a course."""

    __tablename__ = "activity"
    __table_args__ = (Index("idx_activity_course_order", "course_id", "order"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    course_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("course.id", ondelete="CASCADE"), nullable=False
    )
    title: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[ActivityType] = mapped_column(
        Enum(ActivityType, native_enum=False, length=32), nullable=False
    )
    order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Relationships
    course: Mapped["Course"] = relationship("Course", back_populates="activities")
