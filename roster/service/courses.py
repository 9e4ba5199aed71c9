"""
Service layer for courses (the course catalog).
"""

from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from structlog.typing import FilteringBoundLogger

from roster.core.roles import Role
from roster.core.user import UserData
from roster.database.course import Course, CourseEnrollment
from roster.database.user import User

from . import user as user_service


class CourseNotFound(Exception):
    pass


class CourseExistsError(Exception):
    pass


async def create(
    course_code: str,
    course_name: str,
    conn: AsyncSession,
    log: FilteringBoundLogger,
) -> Course:
    """
    Create a new course.

    Raises
    ------
    CourseExistsError
        If a course with this code already exists.
    """
    course_code = course_code.strip().upper()

    log = log.bind(course_code=course_code)

    course = Course(
        course_code=course_code,
        course_name=course_name.strip(),
        created_at=datetime.now(tz=timezone.utc),
    )

    try:
        conn.add(course)
        await conn.flush()
    except IntegrityError as e:
        log = log.bind(error=e)
        await log.ainfo("course.exists")
        raise CourseExistsError(f"Course {course_code} already exists")

    await log.ainfo("course.created", course_id=course.course_id)

    return course


async def read_by_id(course_id: int, conn: AsyncSession) -> Course:
    res = await conn.get(Course, course_id)

    if res is None:
        raise CourseNotFound(f"Course with ID {course_id} not found")

    return res


async def list_all(conn: AsyncSession) -> list[Course]:
    res = await conn.execute(select(Course).order_by(Course.course_id))
    return list(res.unique().scalars().all())


async def list_enrolled(institutional_id: str, conn: AsyncSession) -> list[Course]:
    """
    Courses the user with `institutional_id` is enrolled in.

    Raises
    ------
    user_service.UserNotFound
        If the user does not exist.
    """
    user = await user_service.read_by_institutional_id(
        institutional_id=institutional_id, conn=conn
    )
    await conn.refresh(user, attribute_names=["courses"])
    return sorted(user.courses, key=lambda c: c.course_id)


async def enroll(
    course_id: int,
    institutional_id: str,
    conn: AsyncSession,
    log: FilteringBoundLogger,
) -> Course:
    """
    Enroll a user in a course. Enrolling twice does nothing.

    Raises
    ------
    CourseNotFound
        If the course does not exist.
    user_service.UserNotFound
        If the user does not exist.
    """
    log = log.bind(course_id=course_id, institutional_id=institutional_id)

    course = await read_by_id(course_id=course_id, conn=conn)
    user = await user_service.read_by_institutional_id(
        institutional_id=institutional_id, conn=conn
    )

    await conn.refresh(course, attribute_names=["students"])

    if user not in course.students:
        course.students.append(user)
        await conn.flush()
        await log.ainfo("course.user_enrolled")
    else:
        await log.ainfo("course.user_already_enrolled")

    return course


async def unenroll(
    course_id: int,
    institutional_id: str,
    conn: AsyncSession,
    log: FilteringBoundLogger,
) -> Course:
    """
    Remove a user from a course. Groups they are already in are left alone.

    Raises
    ------
    CourseNotFound
        If the course does not exist.
    user_service.UserNotFound
        If the user does not exist.
    """
    log = log.bind(course_id=course_id, institutional_id=institutional_id)

    course = await read_by_id(course_id=course_id, conn=conn)
    user = await user_service.read_by_institutional_id(
        institutional_id=institutional_id, conn=conn
    )

    await conn.refresh(course, attribute_names=["students"])

    if user in course.students:
        course.students.remove(user)
        await conn.flush()
        await log.ainfo("course.user_unenrolled")
    else:
        await log.ainfo("course.user_not_enrolled")

    return course


async def enrolled_ids(course_id: int, conn: AsyncSession) -> set[str]:
    """
    Institutional IDs of everyone enrolled in `course_id`.
    """
    res = await conn.execute(
        select(User.institutional_id)
        .join(CourseEnrollment, CourseEnrollment.user_id == User.user_id)
        .where(CourseEnrollment.course_id == course_id)
    )
    return set(res.scalars().all())


async def visible_course_ids(user: UserData, conn: AsyncSession) -> set[int]:
    """
    Courses `user` may place groups in: every course for teachers, enrolled
    courses for everyone else.
    """
    match user.role:
        case Role.TEACHER:
            courses = await list_all(conn=conn)
        case Role.STUDENT | Role.OTHER:
            try:
                courses = await list_enrolled(
                    institutional_id=user.institutional_id, conn=conn
                )
            except user_service.UserNotFound:
                courses = []

    return {c.course_id for c in courses}
