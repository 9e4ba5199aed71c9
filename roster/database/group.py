"""
Group ORM
"""

import json
from datetime import datetime

from sqlalchemy import Column, DateTime, Text
from sqlmodel import Field, SQLModel

from roster.core.group import GroupData
from roster.core.members import parse_member_ids
from roster.core.uuid import UUID, uuid7


class Group(SQLModel, table=True):
    group_id: UUID = Field(primary_key=True, default_factory=uuid7)

    group_name: str
    course_id: int = Field(foreign_key="course.course_id", ondelete="CASCADE")
    leader_id: str = Field(index=True)

    # JSON array of institutional IDs, e.g. ["21-0001-001", "21-0001-002"].
    # Does not necessarily include the leader on older records.
    member_ids: str = Field(default="[]", sa_column=Column(Text, nullable=False))

    # Institutional ID of the creator; NULL on records from before it was tracked.
    created_by: str | None = Field(default=None, index=True)
    allow_leader_edit: bool = False
    created_at: datetime | None = Field(
        sa_column=Column(DateTime(timezone=True)), default=None
    )

    # Institutional ID of the teacher advising this group, if any.
    adviser_id: str | None = Field(default=None, index=True)
    adviser_assigned_at: datetime | None = Field(
        sa_column=Column(DateTime(timezone=True)), default=None
    )

    def get_member_ids(self) -> list[str]:
        """
        The stored member list. Corrupt data reads as an empty list.
        """
        return parse_member_ids(self.member_ids)

    def set_member_ids(self, member_ids: list[str]):
        self.member_ids = json.dumps(list(member_ids))

    def to_core(self) -> GroupData:
        """
        Convert this Group ORM object to a GroupData core object.
        """
        return GroupData(
            group_id=self.group_id,
            group_name=self.group_name,
            course_id=self.course_id,
            leader_id=self.leader_id,
            member_ids=self.get_member_ids(),
            created_by=self.created_by,
            allow_leader_edit=bool(self.allow_leader_edit),
            created_at=self.created_at,
            adviser_id=self.adviser_id,
        )
