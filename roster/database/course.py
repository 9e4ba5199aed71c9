"""
Course ORM, including student enrollment.
"""

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Column, DateTime
from sqlmodel import Field, Relationship, SQLModel

from roster.core.course import CourseData
from roster.core.uuid import UUID

if TYPE_CHECKING:
    from .user import User


class CourseEnrollment(SQLModel, table=True):
    """
    A record of a student's enrollment in a course.
    """

    user_id: Optional[UUID] = Field(
        primary_key=True, foreign_key="user.user_id", ondelete="CASCADE"
    )
    course_id: Optional[int] = Field(
        primary_key=True, foreign_key="course.course_id", ondelete="CASCADE"
    )


class Course(SQLModel, table=True):
    course_id: int | None = Field(default=None, primary_key=True)

    course_code: str = Field(unique=True)
    course_name: str
    created_at: datetime | None = Field(
        sa_column=Column(DateTime(timezone=True)), default=None
    )

    students: list["User"] = Relationship(
        back_populates="courses",
        link_model=CourseEnrollment,
        sa_relationship_kwargs=dict(lazy="selectin"),
    )

    def to_core(self) -> CourseData:
        return CourseData(
            course_id=self.course_id,
            course_code=self.course_code,
            course_name=self.course_name,
        )
