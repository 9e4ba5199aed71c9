"""
Pydantic models for request/responses to APIs.
"""

from pydantic import BaseModel

from roster.core.course import CourseData
from roster.core.errors import ValidationFailure
from roster.core.group import GroupData
from roster.core.user import UserData


class GroupSummary(BaseModel):
    group: GroupData
    member_count: int


class DashboardResponse(BaseModel):
    created: list[GroupSummary]
    assigned: list[GroupSummary]


class ChangeGroupMembersRequest(BaseModel):
    remove_member_id: str


class AssignAdviserRequest(BaseModel):
    adviser_id: str


class ValidationErrorResponse(BaseModel):
    errors: list[ValidationFailure]


class UserSearchResponse(BaseModel):
    users: list[UserData]


class CourseListResponse(BaseModel):
    courses: list[CourseData]
