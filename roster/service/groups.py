"""
Service layer for groups.
"""

from datetime import datetime, timezone

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession
from structlog.typing import FilteringBoundLogger

from roster.core.composition import check_roster, validate, validate_edit
from roster.core.dashboard import annotate, classify
from roster.core.errors import GroupValidationError
from roster.core.group import (
    GroupCreationRequest,
    GroupData,
    GroupDraft,
    GroupEditRequest,
)
from roster.core.members import MemberSet
from roster.core.models import DashboardResponse
from roster.core.policy import DeletionPolicy, may_edit, teacher_only
from roster.core.user import UserData
from roster.core.uuid import UUID
from roster.database.group import Group

from . import courses as course_service


class GroupNotFound(Exception):
    pass


class GroupAccessDenied(Exception):
    pass


async def create(
    request: GroupCreationRequest,
    acting_user: UserData,
    conn: AsyncSession,
    log: FilteringBoundLogger,
) -> Group:
    """
    Validate and store a new group.

    Parameters
    ----------
    request: GroupCreationRequest
        The submitted group.
    acting_user: UserData
        The user creating the group. Students always lead groups they create;
        teachers must name a leader.

    Raises
    ------
    GroupValidationError
        If the request is rejected. Nothing is stored.
    """
    log = log.bind(
        group_name=request.group_name,
        course_id=request.course_id,
        acting_user=acting_user.institutional_id,
        number_of_members=len(request.member_ids),
    )

    visible = await course_service.visible_course_ids(user=acting_user, conn=conn)
    result = validate(request, acting_user, visible_course_ids=visible)

    if isinstance(result, GroupDraft):
        failures = await _check_roster(draft=result, conn=conn, log=log)
        if failures:
            result = failures

    if not isinstance(result, GroupDraft):
        await log.ainfo(
            "group.validation_failed", errors=[f.kind.value for f in result]
        )
        raise GroupValidationError(result)

    group = Group(
        group_name=result.group_name,
        course_id=result.course_id,
        leader_id=result.leader_id,
        created_by=result.created_by,
        allow_leader_edit=result.allow_leader_edit,
        created_at=datetime.now(tz=timezone.utc),
    )
    group.set_member_ids(result.member_ids)

    conn.add(group)
    await conn.flush()

    await log.ainfo("group.created", group_id=group.group_id, leader_id=group.leader_id)

    return group


async def _check_roster(
    draft: GroupDraft,
    conn: AsyncSession,
    log: FilteringBoundLogger,
    current: GroupData | None = None,
):
    """
    Check the draft's members against enrollment and the other groups of its
    course. When editing, `current` is the stored group: it is not counted as
    another group, and people already in it are not re-checked.
    """
    enrolled = await course_service.enrolled_ids(course_id=draft.course_id, conn=conn)

    grouped = set()
    for other in await get_group_list(conn=conn, log=log, course_id=draft.course_id):
        if current is not None and other.group_id == current.group_id:
            continue
        grouped.update(MemberSet(other.get_member_ids()).with_leader(other.leader_id))

    previous = (
        MemberSet(current.member_ids).with_leader(current.leader_id)
        if current is not None
        else MemberSet([])
    )

    return check_roster(
        draft,
        enrolled_ids=enrolled,
        grouped_ids=grouped,
        previous_member_ids=previous.to_list(),
    )


async def get_group_list(
    conn: AsyncSession,
    log: FilteringBoundLogger,
    course_id: int | None = None,
) -> list[Group]:
    """
    Get a list of all groups, optionally restricted to one course.
    """
    log = log.bind(course_id=course_id)

    query = select(Group).order_by(Group.created_at, Group.group_name)
    if course_id is not None:
        query = query.where(Group.course_id == course_id)

    result = await conn.execute(query)
    groups = list(result.unique().scalars().all())

    await log.adebug("group.listed", number_of_groups=len(groups))

    return groups


async def read_by_id(
    group_id: UUID,
    conn: AsyncSession,
    log: FilteringBoundLogger,
) -> Group:
    """
    Read a group by its ID.

    Raises
    ------
    GroupNotFound
        If the group does not exist.
    """
    log = log.bind(group_id=group_id)
    result = await conn.execute(select(Group).where(Group.group_id == group_id))
    group = result.unique().scalar_one_or_none()
    if not group:
        await log.ainfo("group.not_found")
        raise GroupNotFound(f"Group with id {group_id} not found")
    await log.adebug("group.found")
    return group


async def update(
    group_id: UUID,
    request: GroupEditRequest,
    acting_user: UserData,
    conn: AsyncSession,
    log: FilteringBoundLogger,
) -> Group:
    """
    Apply an edit to a group: rename, change members, change leader.

    If the leader is removed from the member list, leadership passes to the
    first remaining member.

    Raises
    ------
    GroupNotFound
        If the group does not exist.
    GroupAccessDenied
        If `acting_user` may not edit this group.
    GroupValidationError
        If the edited group is invalid. Nothing is changed.
    """
    log = log.bind(group_id=group_id, acting_user=acting_user.institutional_id)

    group = await read_by_id(group_id=group_id, conn=conn, log=log)
    current = group.to_core()

    if not may_edit(current, acting_user):
        await log.awarn("group.update.access_denied")
        raise GroupAccessDenied(f"Access denied to edit group {group_id}")

    visible = await course_service.visible_course_ids(user=acting_user, conn=conn)
    result = validate_edit(current, request, acting_user, visible_course_ids=visible)

    if isinstance(result, GroupDraft):
        failures = await _check_roster(
            draft=result, conn=conn, log=log, current=current
        )
        if failures:
            result = failures

    if not isinstance(result, GroupDraft):
        await log.ainfo(
            "group.validation_failed", errors=[f.kind.value for f in result]
        )
        raise GroupValidationError(result)

    group.group_name = result.group_name
    group.leader_id = result.leader_id
    group.allow_leader_edit = result.allow_leader_edit
    group.set_member_ids(result.member_ids)

    conn.add(group)
    await conn.flush()

    await log.ainfo(
        "group.updated",
        leader_id=group.leader_id,
        number_of_members=len(result.member_ids),
    )

    return group


async def remove_member(
    group_id: UUID,
    institutional_id: str,
    acting_user: UserData,
    conn: AsyncSession,
    log: FilteringBoundLogger,
) -> Group:
    """
    Remove a single member from a group.

    Raises
    ------
    GroupNotFound
        If the group does not exist.
    GroupAccessDenied
        If `acting_user` may not edit this group.
    GroupValidationError
        If the removal would leave the group without a leader or members.
    """
    log = log.bind(group_id=group_id, member_id=institutional_id)

    group = await read_by_id(group_id=group_id, conn=conn, log=log)
    current = group.to_core()

    if not may_edit(current, acting_user):
        await log.awarn("group.remove_member.access_denied")
        raise GroupAccessDenied(f"Access denied to edit group {group_id}")

    members = MemberSet(current.member_ids).with_leader(current.leader_id)

    if institutional_id not in members:
        await log.ainfo("group.user_not_member")
        return group

    remaining = members.without(institutional_id)

    return await update(
        group_id=group_id,
        request=GroupEditRequest(member_ids=remaining.to_list()),
        acting_user=acting_user,
        conn=conn,
        log=log,
    )


async def delete_group(
    group_id: UUID,
    acting_user: UserData,
    conn: AsyncSession,
    log: FilteringBoundLogger,
    policy: DeletionPolicy = teacher_only,
) -> None:
    """
    Delete a group by its ID.

    Parameters
    ----------
    group_id: UUID
        The ID of the group to delete.
    acting_user: UserData
        The user asking for the deletion.
    policy: DeletionPolicy
        Decides whether `acting_user` may delete the group.

    Raises
    ------
    GroupNotFound
        If the group does not exist.
    GroupAccessDenied
        If the policy refuses the deletion.
    """
    log = log.bind(group_id=group_id, acting_user=acting_user.institutional_id)

    group = await read_by_id(group_id=group_id, conn=conn, log=log)

    if not policy(group.to_core(), acting_user):
        await log.awarn("group.delete.access_denied")
        raise GroupAccessDenied(f"Access denied to delete group {group_id}")

    await conn.execute(delete(Group).where(Group.group_id == group_id))
    await log.ainfo("group.deleted")


async def dashboard(
    viewer: UserData,
    conn: AsyncSession,
    log: FilteringBoundLogger,
) -> DashboardResponse:
    """
    Classify every stored group for `viewer` and attach member counts.
    """
    log = log.bind(viewer=viewer.institutional_id)

    groups = []
    for group in await get_group_list(conn=conn, log=log):
        try:
            groups.append(group.to_core())
        except (AttributeError, TypeError, ValueError) as e:
            await log.awarn(
                "dashboard.group_skipped",
                group_id=getattr(group, "group_id", None),
                error=str(e),
            )

    buckets = classify(groups, viewer, log=log)

    await log.adebug(
        "group.dashboard",
        number_created=len(buckets.created),
        number_assigned=len(buckets.assigned),
    )

    return DashboardResponse(
        created=annotate(buckets.created),
        assigned=annotate(buckets.assigned),
    )
