"""
Configuration variables and fixtures for the service layer tests.
"""

import pytest_asyncio
import structlog

from roster.config.settings import Settings
from roster.core.roles import Role
from roster.core.uuid import uuid7
from roster.service import courses as course_service
from roster.service import user as user_service

TEACHER_ID = "T-0000-001"
STUDENT_IDS = ["21-0001-001", "21-0001-002", "21-0001-003"]
OUTSIDER_ID = "21-0009-999"


@pytest_asyncio.fixture(scope="session")
def session_manager(server_settings: Settings, database):
    yield server_settings.async_manager()


@pytest_asyncio.fixture(scope="session")
def logger():
    yield structlog.get_logger()


@pytest_asyncio.fixture(scope="session")
async def teacher(session_manager, logger):
    async with session_manager.session() as conn:
        async with conn.begin():
            user = await user_service.create(
                institutional_id=TEACHER_ID,
                role=Role.TEACHER,
                display_name="Ada Teacher",
                email="ada@school.edu",
                conn=conn,
                log=logger,
            )
            TEACHER = user.to_core()

    yield TEACHER


@pytest_asyncio.fixture(scope="session")
async def students(session_manager, logger):
    created = []
    async with session_manager.session() as conn:
        async with conn.begin():
            for index, institutional_id in enumerate(
                [*STUDENT_IDS, OUTSIDER_ID], start=1
            ):
                user = await user_service.create(
                    institutional_id=institutional_id,
                    role=Role.STUDENT,
                    display_name=f"Student {index}",
                    email=f"student{index}@school.edu",
                    conn=conn,
                    log=logger,
                )
                created.append(user.to_core())

    yield created


@pytest_asyncio.fixture
async def course(session_manager, logger, students):
    """
    A fresh course with every student enrolled except the outsider. Each test
    gets its own, as a student may only be in one group per course.
    """
    async with session_manager.session() as conn:
        async with conn.begin():
            course = await course_service.create(
                course_code=f"cs101-{uuid7().hex[-10:]}",
                course_name="Software Engineering",
                conn=conn,
                log=logger,
            )
            COURSE_ID = course.course_id

            for institutional_id in STUDENT_IDS:
                await course_service.enroll(
                    course_id=COURSE_ID,
                    institutional_id=institutional_id,
                    conn=conn,
                    log=logger,
                )

    yield COURSE_ID
