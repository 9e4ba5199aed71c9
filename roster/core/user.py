"""
A shared user object that is serialized.
"""

from pydantic import BaseModel, field_validator

from roster.core.members import normalize_id
from roster.core.roles import Role, parse_role
from roster.core.uuid import UUID


class UserData(BaseModel):
    institutional_id: str
    role: Role
    display_name: str | None = None
    email: str | None = None
    user_id: UUID | None = None

    @field_validator("institutional_id", mode="before")
    @classmethod
    def _normalize_institutional_id(cls, value):
        return normalize_id(value)

    @field_validator("role", mode="before")
    @classmethod
    def _parse_role(cls, value):
        return parse_role(value)
