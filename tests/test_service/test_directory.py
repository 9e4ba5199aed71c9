"""
Tests the user directory and course catalog services.
"""

import pytest

from roster.core.roles import Role
from roster.core.user import UserData
from roster.service import courses as course_service
from roster.service import user as user_service


@pytest.mark.asyncio(loop_scope="session")
async def test_create_and_delete_user(session_manager, logger):
    async with session_manager.session() as conn:
        async with conn.begin():
            user = await user_service.create(
                institutional_id=" 22-1234-567 ",
                role="researcher",
                display_name="Unusual Role",
                email="unusual@school.edu",
                conn=conn,
                log=logger,
            )
            USER_ID = user.user_id

    async with session_manager.session() as conn:
        async with conn.begin():
            user = await user_service.read_by_id(user_id=USER_ID, conn=conn)
            assert user.institutional_id == "22-1234-567"
            assert user.to_core().role == Role.OTHER

    with pytest.raises(user_service.UserExistsError):
        async with session_manager.session() as conn:
            async with conn.begin():
                await user_service.create(
                    institutional_id="22-1234-567",
                    role=Role.STUDENT,
                    display_name=None,
                    email=None,
                    conn=conn,
                    log=logger,
                )

    async with session_manager.session() as conn:
        async with conn.begin():
            await user_service.delete(
                institutional_id="22-1234-567", conn=conn, log=logger
            )

    with pytest.raises(user_service.UserNotFound):
        async with session_manager.session() as conn:
            async with conn.begin():
                await user_service.read_by_institutional_id(
                    institutional_id="22-1234-567", conn=conn
                )


@pytest.mark.asyncio(loop_scope="session")
async def test_search_users(session_manager, logger, students):
    async with session_manager.session() as conn:
        async with conn.begin():
            found = await user_service.search(query="21-0001", conn=conn, log=logger)
            assert [u.institutional_id for u in found] == [
                "21-0001-001",
                "21-0001-002",
                "21-0001-003",
            ]

            found = await user_service.search(
                query="student2@", conn=conn, log=logger
            )
            assert [u.institutional_id for u in found] == ["21-0001-002"]

            assert await user_service.search(query="  ", conn=conn, log=logger) == []


@pytest.mark.asyncio(loop_scope="session")
async def test_course_visibility(session_manager, logger, teacher, students, course):
    enrolled, *_, outsider = students

    async with session_manager.session() as conn:
        async with conn.begin():
            other = await course_service.create(
                course_code="math200",
                course_name="Linear Algebra",
                conn=conn,
                log=logger,
            )
            OTHER_ID = other.course_id

    async with session_manager.session() as conn:
        async with conn.begin():
            assert OTHER_ID != course

            teacher_courses = await course_service.visible_course_ids(
                user=teacher, conn=conn
            )
            assert {course, OTHER_ID} <= teacher_courses

            student_courses = await course_service.visible_course_ids(
                user=enrolled, conn=conn
            )
            assert course in student_courses
            assert OTHER_ID not in student_courses

            assert (
                await course_service.visible_course_ids(user=outsider, conn=conn)
                == set()
            )

            unknown = UserData(institutional_id="00-0000-000", role="STUDENT")
            assert (
                await course_service.visible_course_ids(user=unknown, conn=conn)
                == set()
            )

    with pytest.raises(course_service.CourseNotFound):
        async with session_manager.session() as conn:
            async with conn.begin():
                await course_service.read_by_id(course_id=987654, conn=conn)

    with pytest.raises(course_service.CourseExistsError):
        async with session_manager.session() as conn:
            async with conn.begin():
                await course_service.create(
                    course_code="MATH200",
                    course_name="Duplicate",
                    conn=conn,
                    log=logger,
                )


@pytest.mark.asyncio(loop_scope="session")
async def test_enroll_and_unenroll(session_manager, logger, students, course):
    enrolled, *_, outsider = students

    async with session_manager.session() as conn:
        async with conn.begin():
            assert outsider.institutional_id not in await course_service.enrolled_ids(
                course_id=course, conn=conn
            )

            await course_service.enroll(
                course_id=course,
                institutional_id=outsider.institutional_id,
                conn=conn,
                log=logger,
            )
            await course_service.unenroll(
                course_id=course,
                institutional_id=enrolled.institutional_id,
                conn=conn,
                log=logger,
            )

    async with session_manager.session() as conn:
        async with conn.begin():
            ids = await course_service.enrolled_ids(course_id=course, conn=conn)
            assert outsider.institutional_id in ids
            assert enrolled.institutional_id not in ids

            assert course not in await course_service.visible_course_ids(
                user=enrolled, conn=conn
            )

            # Unenrolling twice does nothing
            await course_service.unenroll(
                course_id=course,
                institutional_id=enrolled.institutional_id,
                conn=conn,
                log=logger,
            )
            await course_service.unenroll(
                course_id=course,
                institutional_id=outsider.institutional_id,
                conn=conn,
                log=logger,
            )
