"""
Who may change or remove a group.

Deletion rules differ between deployments, so they are expressed as
interchangeable policies selected through settings.
"""

from typing import Callable, Literal

from roster.core.dashboard import is_leader, is_self_created
from roster.core.group import GroupData
from roster.core.members import normalize_id
from roster.core.roles import Role
from roster.core.user import UserData

DeletionPolicy = Callable[[GroupData, UserData], bool]
DeletionPolicyName = Literal["teacher_only", "teacher_or_leader", "creator_or_teacher"]


def may_edit(group: GroupData, user: UserData) -> bool:
    """
    Teachers can edit any group. A student leader can edit a group they
    created themselves, or one a teacher created with `allow_leader_edit`.
    """
    match user.role:
        case Role.TEACHER:
            return True
        case Role.STUDENT:
            return is_leader(group, user) and (
                is_self_created(group, user) or group.allow_leader_edit
            )
        case Role.OTHER:
            return is_leader(group, user)


def may_manage_advisers(user: UserData) -> bool:
    return user.role == Role.TEACHER


def may_advise(user: UserData) -> bool:
    """
    Only teachers can be group advisers.
    """
    return user.role == Role.TEACHER


def teacher_only(group: GroupData, user: UserData) -> bool:
    return user.role == Role.TEACHER


def teacher_or_leader(group: GroupData, user: UserData) -> bool:
    return user.role == Role.TEACHER or is_leader(group, user)


def creator_or_teacher(group: GroupData, user: UserData) -> bool:
    if user.role == Role.TEACHER:
        return True
    return group.created_by is not None and normalize_id(
        group.created_by
    ) == normalize_id(user.institutional_id)


DELETION_POLICIES: dict[str, DeletionPolicy] = {
    "teacher_only": teacher_only,
    "teacher_or_leader": teacher_or_leader,
    "creator_or_teacher": creator_or_teacher,
}


def get_deletion_policy(name: str) -> DeletionPolicy:
    try:
        return DELETION_POLICIES[name]
    except KeyError:
        raise ValueError(f"Unknown group deletion policy {name}")
