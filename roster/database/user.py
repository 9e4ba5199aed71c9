"""
ORM for user information.
"""

from typing import TYPE_CHECKING

from sqlmodel import Field, Relationship, SQLModel

from roster.core.roles import Role, parse_role
from roster.core.user import UserData
from roster.core.uuid import UUID, uuid7
from roster.database.course import CourseEnrollment

if TYPE_CHECKING:
    from .course import Course


class User(SQLModel, table=True):
    user_id: UUID = Field(primary_key=True, default_factory=uuid7)

    institutional_id: str = Field(unique=True, index=True)
    display_name: str | None = None
    email: str | None = None

    # Stored as free text; anything other than STUDENT or TEACHER is
    # treated as an unrecognised role.
    role: str = Field(default=Role.STUDENT.value)

    courses: list["Course"] = Relationship(
        back_populates="students",
        link_model=CourseEnrollment,
        sa_relationship_kwargs=dict(lazy="selectin"),
    )

    @property
    def parsed_role(self) -> Role:
        return parse_role(self.role)

    def to_core(self) -> UserData:
        return UserData(
            user_id=self.user_id,
            institutional_id=self.institutional_id,
            role=self.parsed_role,
            display_name=self.display_name,
            email=self.email,
        )
