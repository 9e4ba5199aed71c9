"""
Lookups used when assembling a group: candidate users and available courses.
"""

from fastapi import APIRouter

from roster.api.dependencies import (
    DatabaseDependency,
    LoggerDependency,
    SessionUserDependency,
)
from roster.core.models import CourseListResponse, UserSearchResponse
from roster.service import courses as course_service
from roster.service import user as user_service

directory_app = APIRouter(tags=["Directory"])


@directory_app.get(
    "/users/search",
    summary="Search users",
    description=(
        "Find users by institutional ID, name or email, to pick group members "
        "and leaders."
    ),
    responses={
        200: {"description": "Matching users."},
        401: {"description": "Not authenticated."},
    },
)
async def search_users(
    query: str,
    user: SessionUserDependency,
    conn: DatabaseDependency,
    log: LoggerDependency,
) -> UserSearchResponse:
    log = log.bind(user_id=user.institutional_id)
    users = await user_service.search(query=query, conn=conn, log=log)
    return UserSearchResponse(users=users)


@directory_app.get(
    "/courses",
    summary="List available courses",
    description=(
        "Courses the signed-in user can place groups in: all courses for "
        "teachers, enrolled courses for students."
    ),
    responses={
        200: {"description": "List of courses."},
        401: {"description": "Not authenticated."},
    },
)
async def list_courses(
    user: SessionUserDependency,
    conn: DatabaseDependency,
    log: LoggerDependency,
) -> CourseListResponse:
    visible = await course_service.visible_course_ids(user=user, conn=conn)
    courses = [
        c.to_core()
        for c in await course_service.list_all(conn=conn)
        if c.course_id in visible
    ]
    await log.adebug("course.list", number_of_courses=len(courses))
    return CourseListResponse(courses=courses)
