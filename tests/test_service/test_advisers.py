"""
Tests the group adviser service layer.
"""

import pytest

from roster.core.group import GroupCreationRequest
from roster.core.roles import Role
from roster.service import advisers as adviser_service
from roster.service import groups as groups_service
from roster.service import user as user_service

SECOND_TEACHER_ID = "T-0000-002"


async def create_group(conn, logger, leader, course, name):
    group = await groups_service.create(
        request=GroupCreationRequest(group_name=name, course_id=course),
        acting_user=leader,
        conn=conn,
        log=logger,
    )
    return group.group_id


@pytest.mark.asyncio(loop_scope="session")
async def test_assign_reassign_clear(
    session_manager, logger, teacher, students, course
):
    leader = students[0]

    async with session_manager.session() as conn:
        async with conn.begin():
            second = await user_service.create(
                institutional_id=SECOND_TEACHER_ID,
                role=Role.TEACHER,
                display_name="Grace Teacher",
                email="grace@school.edu",
                conn=conn,
                log=logger,
            )
            SECOND = second.to_core()

            GROUP_ID = await create_group(conn, logger, leader, course, "Advised")

    async with session_manager.session() as conn:
        async with conn.begin():
            group = await adviser_service.assign(
                group_id=GROUP_ID,
                adviser_id=f" {teacher.institutional_id} ",
                acting_user=teacher,
                conn=conn,
                log=logger,
            )
            assert group.adviser_id == teacher.institutional_id
            assert group.adviser_assigned_at is not None
            assert group.to_core().adviser_id == teacher.institutional_id

    # A second assignment must go through reassign
    with pytest.raises(adviser_service.AdviserAlreadyAssigned):
        async with session_manager.session() as conn:
            async with conn.begin():
                await adviser_service.assign(
                    group_id=GROUP_ID,
                    adviser_id=SECOND.institutional_id,
                    acting_user=teacher,
                    conn=conn,
                    log=logger,
                )

    async with session_manager.session() as conn:
        async with conn.begin():
            group = await adviser_service.reassign(
                group_id=GROUP_ID,
                adviser_id=SECOND.institutional_id,
                acting_user=teacher,
                conn=conn,
                log=logger,
            )
            assert group.adviser_id == SECOND.institutional_id

            advised = await adviser_service.advised_by(
                adviser_id=SECOND.institutional_id, conn=conn, log=logger
            )
            assert [g.group_id for g in advised] == [GROUP_ID]

    async with session_manager.session() as conn:
        async with conn.begin():
            group = await adviser_service.clear(
                group_id=GROUP_ID, acting_user=teacher, conn=conn, log=logger
            )
            assert group.adviser_id is None
            assert group.adviser_assigned_at is None

            # Clearing again does nothing
            group = await adviser_service.clear(
                group_id=GROUP_ID, acting_user=teacher, conn=conn, log=logger
            )
            assert group.adviser_id is None


@pytest.mark.asyncio(loop_scope="session")
async def test_adviser_must_be_teacher(
    session_manager, logger, teacher, students, course
):
    leader, member, *_ = students

    async with session_manager.session() as conn:
        async with conn.begin():
            GROUP_ID = await create_group(conn, logger, leader, course, "Unadvised")

    for adviser_id in [member.institutional_id, "T-9999-999"]:
        with pytest.raises(adviser_service.InvalidAdviser):
            async with session_manager.session() as conn:
                async with conn.begin():
                    await adviser_service.assign(
                        group_id=GROUP_ID,
                        adviser_id=adviser_id,
                        acting_user=teacher,
                        conn=conn,
                        log=logger,
                    )

    # Students may not manage advisers, even for their own group
    with pytest.raises(groups_service.GroupAccessDenied):
        async with session_manager.session() as conn:
            async with conn.begin():
                await adviser_service.assign(
                    group_id=GROUP_ID,
                    adviser_id=teacher.institutional_id,
                    acting_user=leader,
                    conn=conn,
                    log=logger,
                )

    with pytest.raises(groups_service.GroupAccessDenied):
        async with session_manager.session() as conn:
            async with conn.begin():
                await adviser_service.clear(
                    group_id=GROUP_ID, acting_user=leader, conn=conn, log=logger
                )

    async with session_manager.session() as conn:
        async with conn.begin():
            group = await groups_service.read_by_id(
                group_id=GROUP_ID, conn=conn, log=logger
            )
            assert group.adviser_id is None


@pytest.mark.asyncio(loop_scope="session")
async def test_adviser_group_limit(session_manager, logger, teacher, students, course):
    first, second, *_ = students

    async with session_manager.session() as conn:
        async with conn.begin():
            FIRST_ID = await create_group(conn, logger, first, course, "First")
            SECOND_ID = await create_group(conn, logger, second, course, "Second")

            start = await adviser_service.count_advised(
                adviser_id=teacher.institutional_id, conn=conn
            )

            await adviser_service.assign(
                group_id=FIRST_ID,
                adviser_id=teacher.institutional_id,
                acting_user=teacher,
                conn=conn,
                log=logger,
                limit=start + 1,
            )

    with pytest.raises(adviser_service.AdviserLimitReached):
        async with session_manager.session() as conn:
            async with conn.begin():
                await adviser_service.assign(
                    group_id=SECOND_ID,
                    adviser_id=teacher.institutional_id,
                    acting_user=teacher,
                    conn=conn,
                    log=logger,
                    limit=start + 1,
                )

    # Reassigning the same adviser does not count against the limit
    async with session_manager.session() as conn:
        async with conn.begin():
            group = await adviser_service.reassign(
                group_id=FIRST_ID,
                adviser_id=teacher.institutional_id,
                acting_user=teacher,
                conn=conn,
                log=logger,
                limit=start + 1,
            )
            assert group.adviser_id == teacher.institutional_id
