"""
Core group data models.
"""

from datetime import datetime

from pydantic import BaseModel, field_validator

from roster.core.members import normalize_id, parse_member_ids
from roster.core.uuid import UUID


class GroupDraft(BaseModel):
    """
    A validated group that has not been stored yet. `member_ids` always
    contains `leader_id`.
    """

    group_name: str
    course_id: int
    leader_id: str
    member_ids: list[str]
    created_by: str | None = None
    allow_leader_edit: bool = False


class GroupData(BaseModel):
    group_id: UUID | None = None
    group_name: str
    course_id: int
    leader_id: str
    member_ids: list[str] = []
    # Absent on records stored before we tracked the creator.
    created_by: str | None = None
    allow_leader_edit: bool = False
    created_at: datetime | None = None
    adviser_id: str | None = None

    @field_validator("member_ids", mode="before")
    @classmethod
    def _parse_member_ids(cls, value):
        return parse_member_ids(value)

    @field_validator("leader_id", mode="before")
    @classmethod
    def _normalize_leader(cls, value):
        return normalize_id(value)

    @field_validator("created_by", "adviser_id", mode="before")
    @classmethod
    def _normalize_optional_id(cls, value):
        return normalize_id(value) or None


class GroupCreationRequest(BaseModel):
    """
    Request to create a new group. `requested_leader_id` is only honoured for
    teachers (and unrecognised roles); students always lead their own groups.
    """

    group_name: str
    course_id: int | None = None
    member_ids: list[str] = []
    requested_leader_id: str | None = None
    allow_leader_edit: bool = False


class GroupEditRequest(BaseModel):
    """
    Partial update of an existing group. Fields left as `None` keep their
    current value.
    """

    group_name: str | None = None
    member_ids: list[str] | None = None
    leader_id: str | None = None
    allow_leader_edit: bool | None = None
