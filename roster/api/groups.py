"""
Group management.
"""

from uuid import UUID

from fastapi import APIRouter, HTTPException
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession
from structlog.typing import FilteringBoundLogger

from roster.api.dependencies import (
    DatabaseDependency,
    LoggerDependency,
    SessionUserDependency,
    SettingsDependency,
)
from roster.config.settings import Settings
from roster.core.dashboard import annotate
from roster.core.errors import GroupValidationError
from roster.core.group import GroupCreationRequest, GroupData, GroupEditRequest
from roster.core.models import (
    AssignAdviserRequest,
    ChangeGroupMembersRequest,
    DashboardResponse,
    GroupSummary,
    ValidationErrorResponse,
)
from roster.core.user import UserData
from roster.service import advisers as adviser_service
from roster.service import groups as groups_service

group_app = APIRouter(tags=["Group Management"])


def validation_error_response(e: GroupValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content=ValidationErrorResponse(errors=e.failures).model_dump(mode="json"),
    )


@group_app.get(
    "/dashboard",
    summary="Dashboard groups",
    description=(
        "The groups the signed-in user created and the groups they were "
        "assigned to, each with its member count."
    ),
    responses={
        200: {"description": "Created and assigned groups."},
        401: {"description": "Not authenticated."},
    },
)
async def dashboard(
    user: SessionUserDependency,
    conn: DatabaseDependency,
    log: LoggerDependency,
) -> DashboardResponse:
    log = log.bind(user_id=user.institutional_id)
    return await groups_service.dashboard(viewer=user, conn=conn, log=log)


@group_app.get(
    "/list",
    summary="List all groups",
    description="Retrieve a list of all groups, optionally for a single course.",
    responses={
        200: {"description": "List of groups."},
    },
)
async def list_groups(
    user: SessionUserDependency,
    conn: DatabaseDependency,
    log: LoggerDependency,
    course_id: int | None = None,
) -> list[GroupSummary]:
    log = log.bind(user_id=user.institutional_id)
    groups = await groups_service.get_group_list(conn=conn, log=log, course_id=course_id)
    return annotate(g.to_core() for g in groups)


@group_app.get(
    "/advised",
    summary="Groups I advise",
    description="The groups the signed-in teacher is the adviser of.",
    responses={
        200: {"description": "Advised groups."},
        401: {"description": "Not authenticated."},
    },
)
async def list_advised_groups(
    user: SessionUserDependency,
    conn: DatabaseDependency,
    log: LoggerDependency,
) -> list[GroupSummary]:
    log = log.bind(user_id=user.institutional_id)
    groups = await adviser_service.advised_by(
        adviser_id=user.institutional_id, conn=conn, log=log
    )
    return annotate(g.to_core() for g in groups)


@group_app.get(
    "/{group_id}",
    summary="Get group by ID",
    responses={
        200: {"description": "Group details with members."},
        404: {"description": "Group not found."},
    },
)
async def get_group_by_id(
    group_id: UUID,
    user: SessionUserDependency,
    conn: DatabaseDependency,
    log: LoggerDependency,
) -> GroupSummary:
    log = log.bind(group_id=group_id, user_id=user.institutional_id)

    try:
        group = await groups_service.read_by_id(group_id=group_id, conn=conn, log=log)
    except groups_service.GroupNotFound:
        raise HTTPException(status_code=404, detail="Group not found")

    return annotate([group.to_core()])[0]


@group_app.put(
    "",
    summary="Create a new group",
    description=(
        "Create a new group in a course. Students always lead the groups they "
        "create; teachers must name a leader. The leader is always a member."
    ),
    responses={
        200: {"description": "Group created successfully."},
        400: {"description": "Invalid group.", "model": ValidationErrorResponse},
    },
)
async def create_group(
    content: GroupCreationRequest,
    user: SessionUserDependency,
    conn: DatabaseDependency,
    log: LoggerDependency,
) -> GroupData:
    log = log.bind(user_id=user.institutional_id)

    try:
        group = await groups_service.create(
            request=content, acting_user=user, conn=conn, log=log
        )
    except GroupValidationError as e:
        return validation_error_response(e)

    return group.to_core()


@group_app.post(
    "/{group_id}",
    summary="Edit a group",
    description=(
        "Rename a group, change its members or its leader. Removing the leader "
        "passes leadership to the first remaining member."
    ),
    responses={
        200: {"description": "Group updated."},
        400: {"description": "Invalid group.", "model": ValidationErrorResponse},
        403: {"description": "Access denied to edit this group."},
        404: {"description": "Group not found."},
    },
)
async def edit_group(
    group_id: UUID,
    content: GroupEditRequest,
    user: SessionUserDependency,
    conn: DatabaseDependency,
    log: LoggerDependency,
) -> GroupData:
    log = log.bind(group_id=group_id, user_id=user.institutional_id)

    try:
        group = await groups_service.update(
            group_id=group_id, request=content, acting_user=user, conn=conn, log=log
        )
    except groups_service.GroupNotFound:
        raise HTTPException(status_code=404, detail="Group not found")
    except groups_service.GroupAccessDenied:
        raise HTTPException(status_code=403, detail="Access denied to edit this group")
    except GroupValidationError as e:
        return validation_error_response(e)

    return group.to_core()


@group_app.post(
    "/{group_id}/members",
    summary="Remove a member from a group",
    responses={
        200: {"description": "Member removed."},
        400: {"description": "Invalid group.", "model": ValidationErrorResponse},
        403: {"description": "Access denied to change members of this group."},
        404: {"description": "Group not found."},
    },
)
async def change_group_members(
    group_id: UUID,
    content: ChangeGroupMembersRequest,
    user: SessionUserDependency,
    conn: DatabaseDependency,
    log: LoggerDependency,
) -> GroupData:
    log = log.bind(group_id=group_id, user_id=user.institutional_id)

    try:
        group = await groups_service.remove_member(
            group_id=group_id,
            institutional_id=content.remove_member_id,
            acting_user=user,
            conn=conn,
            log=log,
        )
    except groups_service.GroupNotFound:
        raise HTTPException(status_code=404, detail="Group not found")
    except groups_service.GroupAccessDenied:
        raise HTTPException(
            status_code=403, detail="Access denied to change group members"
        )
    except GroupValidationError as e:
        return validation_error_response(e)

    await log.ainfo("group.member_removed", member_id=content.remove_member_id)

    return group.to_core()


@group_app.delete(
    "/{group_id}",
    summary="Delete a group",
    description="Delete a group by its ID, if the deletion policy allows it.",
    responses={
        200: {"description": "Group deleted successfully."},
        403: {"description": "Access denied to delete this group."},
        404: {"description": "Group not found."},
    },
)
async def delete_group(
    group_id: UUID,
    user: SessionUserDependency,
    settings: SettingsDependency,
    conn: DatabaseDependency,
    log: LoggerDependency,
) -> None:
    log = log.bind(group_id=group_id, user_id=user.institutional_id)

    try:
        await groups_service.delete_group(
            group_id=group_id,
            acting_user=user,
            conn=conn,
            log=log,
            policy=settings.deletion_policy,
        )
    except groups_service.GroupNotFound:
        raise HTTPException(status_code=404, detail="Group not found")
    except groups_service.GroupAccessDenied:
        raise HTTPException(
            status_code=403, detail="Access denied to delete this group"
        )

    return None


async def _set_adviser(
    group_id: UUID,
    adviser_id: str,
    user: UserData,
    settings: Settings,
    conn: AsyncSession,
    log: FilteringBoundLogger,
    replace: bool,
) -> GroupData:
    try:
        group = await adviser_service.assign(
            group_id=group_id,
            adviser_id=adviser_id,
            acting_user=user,
            conn=conn,
            log=log,
            limit=settings.adviser_group_limit,
            replace=replace,
        )
    except groups_service.GroupNotFound:
        raise HTTPException(status_code=404, detail="Group not found")
    except groups_service.GroupAccessDenied:
        raise HTTPException(
            status_code=403, detail="Access denied to change the group adviser"
        )
    except adviser_service.AdviserAlreadyAssigned:
        raise HTTPException(status_code=409, detail="Group already has an adviser")
    except (adviser_service.InvalidAdviser, adviser_service.AdviserLimitReached) as e:
        raise HTTPException(status_code=400, detail=str(e))

    return group.to_core()


@group_app.post(
    "/{group_id}/adviser",
    summary="Assign a group adviser",
    description="Assign a teacher as the adviser of a group that has none.",
    responses={
        200: {"description": "Adviser assigned."},
        400: {"description": "Not a teacher, or the adviser has too many groups."},
        403: {"description": "Only teachers can assign advisers."},
        404: {"description": "Group not found."},
        409: {"description": "The group already has an adviser."},
    },
)
async def assign_adviser(
    group_id: UUID,
    content: AssignAdviserRequest,
    user: SessionUserDependency,
    settings: SettingsDependency,
    conn: DatabaseDependency,
    log: LoggerDependency,
) -> GroupData:
    log = log.bind(group_id=group_id, user_id=user.institutional_id)
    return await _set_adviser(
        group_id, content.adviser_id, user, settings, conn, log, replace=False
    )


@group_app.put(
    "/{group_id}/adviser",
    summary="Reassign a group adviser",
    description="Replace the adviser of a group, or assign one if it has none.",
    responses={
        200: {"description": "Adviser reassigned."},
        400: {"description": "Not a teacher, or the adviser has too many groups."},
        403: {"description": "Only teachers can assign advisers."},
        404: {"description": "Group not found."},
    },
)
async def reassign_adviser(
    group_id: UUID,
    content: AssignAdviserRequest,
    user: SessionUserDependency,
    settings: SettingsDependency,
    conn: DatabaseDependency,
    log: LoggerDependency,
) -> GroupData:
    log = log.bind(group_id=group_id, user_id=user.institutional_id)
    return await _set_adviser(
        group_id, content.adviser_id, user, settings, conn, log, replace=True
    )


@group_app.delete(
    "/{group_id}/adviser",
    summary="Remove a group adviser",
    responses={
        200: {"description": "Adviser removed."},
        403: {"description": "Only teachers can remove advisers."},
        404: {"description": "Group not found."},
    },
)
async def clear_adviser(
    group_id: UUID,
    user: SessionUserDependency,
    conn: DatabaseDependency,
    log: LoggerDependency,
) -> GroupData:
    log = log.bind(group_id=group_id, user_id=user.institutional_id)

    try:
        group = await adviser_service.clear(
            group_id=group_id, acting_user=user, conn=conn, log=log
        )
    except groups_service.GroupNotFound:
        raise HTTPException(status_code=404, detail="Group not found")
    except groups_service.GroupAccessDenied:
        raise HTTPException(
            status_code=403, detail="Access denied to change the group adviser"
        )

    return group.to_core()
