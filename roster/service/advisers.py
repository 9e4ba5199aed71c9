"""
Service layer for group advisers. A group has at most one adviser, who must
be a teacher; only teachers can assign, reassign or clear advisers.
"""

from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from structlog.typing import FilteringBoundLogger

from roster.core.members import normalize_id
from roster.core.policy import may_advise, may_manage_advisers
from roster.core.user import UserData
from roster.core.uuid import UUID
from roster.database.group import Group

from . import groups as groups_service
from . import user as user_service


class InvalidAdviser(Exception):
    pass


class AdviserAlreadyAssigned(Exception):
    pass


class AdviserLimitReached(Exception):
    pass


async def count_advised(
    adviser_id: str, conn: AsyncSession, exclude_group_id: UUID | None = None
) -> int:
    query = select(func.count()).select_from(Group).where(
        Group.adviser_id == normalize_id(adviser_id)
    )
    if exclude_group_id is not None:
        query = query.where(Group.group_id != exclude_group_id)

    res = await conn.execute(query)
    return res.scalar_one()


async def assign(
    group_id: UUID,
    adviser_id: str,
    acting_user: UserData,
    conn: AsyncSession,
    log: FilteringBoundLogger,
    limit: int | None = None,
    replace: bool = False,
) -> Group:
    """
    Make `adviser_id` the adviser of a group.

    Parameters
    ----------
    group_id: UUID
        The group to advise.
    adviser_id: str
        Institutional ID of the teacher who will advise it.
    acting_user: UserData
        The user making the change. Must be a teacher.
    limit: int | None
        Most groups one adviser may have, counting this one.
    replace: bool
        Whether an existing adviser may be replaced.

    Raises
    ------
    groups_service.GroupNotFound
        If the group does not exist.
    groups_service.GroupAccessDenied
        If `acting_user` may not manage advisers.
    AdviserAlreadyAssigned
        If the group already has an adviser and `replace` is false.
    InvalidAdviser
        If `adviser_id` is not a known teacher.
    AdviserLimitReached
        If the adviser already advises `limit` other groups.
    """
    adviser_id = normalize_id(adviser_id)

    log = log.bind(
        group_id=group_id,
        adviser_id=adviser_id,
        acting_user=acting_user.institutional_id,
    )

    if not may_manage_advisers(acting_user):
        await log.awarn("group.adviser.access_denied")
        raise groups_service.GroupAccessDenied(
            f"Access denied to change the adviser of group {group_id}"
        )

    group = await groups_service.read_by_id(group_id=group_id, conn=conn, log=log)

    if group.adviser_id is not None and not replace:
        await log.ainfo("group.adviser.already_assigned", current=group.adviser_id)
        raise AdviserAlreadyAssigned(f"Group {group_id} already has an adviser")

    try:
        adviser = await user_service.read_by_institutional_id(
            institutional_id=adviser_id, conn=conn
        )
    except user_service.UserNotFound:
        await log.ainfo("group.adviser.unknown")
        raise InvalidAdviser(f"Adviser {adviser_id} not found")

    if not may_advise(adviser.to_core()):
        await log.ainfo("group.adviser.not_teacher", role=adviser.role)
        raise InvalidAdviser(f"User {adviser_id} cannot advise groups")

    if limit is not None:
        load = await count_advised(
            adviser_id=adviser_id, conn=conn, exclude_group_id=group.group_id
        )
        if load >= limit:
            await log.ainfo("group.adviser.limit_reached", load=load, limit=limit)
            raise AdviserLimitReached(
                f"Adviser {adviser_id} already advises {load} groups"
            )

    previous = group.adviser_id

    group.adviser_id = adviser_id
    group.adviser_assigned_at = datetime.now(tz=timezone.utc)

    conn.add(group)
    await conn.flush()

    await log.ainfo("group.adviser.assigned", previous=previous)

    return group


async def reassign(
    group_id: UUID,
    adviser_id: str,
    acting_user: UserData,
    conn: AsyncSession,
    log: FilteringBoundLogger,
    limit: int | None = None,
) -> Group:
    """
    Replace the adviser of a group, or assign one if it has none.
    """
    return await assign(
        group_id=group_id,
        adviser_id=adviser_id,
        acting_user=acting_user,
        conn=conn,
        log=log,
        limit=limit,
        replace=True,
    )


async def clear(
    group_id: UUID,
    acting_user: UserData,
    conn: AsyncSession,
    log: FilteringBoundLogger,
) -> Group:
    """
    Remove the adviser of a group. Clearing a group without one does nothing.
    """
    log = log.bind(group_id=group_id, acting_user=acting_user.institutional_id)

    if not may_manage_advisers(acting_user):
        await log.awarn("group.adviser.access_denied")
        raise groups_service.GroupAccessDenied(
            f"Access denied to change the adviser of group {group_id}"
        )

    group = await groups_service.read_by_id(group_id=group_id, conn=conn, log=log)

    if group.adviser_id is None:
        await log.ainfo("group.adviser.none")
        return group

    previous = group.adviser_id

    group.adviser_id = None
    group.adviser_assigned_at = None

    conn.add(group)
    await conn.flush()

    await log.ainfo("group.adviser.cleared", previous=previous)

    return group


async def advised_by(
    adviser_id: str, conn: AsyncSession, log: FilteringBoundLogger
) -> list[Group]:
    """
    Groups advised by the teacher with `adviser_id`.
    """
    adviser_id = normalize_id(adviser_id)

    result = await conn.execute(
        select(Group)
        .where(Group.adviser_id == adviser_id)
        .order_by(Group.created_at, Group.group_name)
    )
    groups = list(result.unique().scalars().all())

    await log.adebug(
        "group.adviser.listed", adviser_id=adviser_id, number_of_groups=len(groups)
    )

    return groups
