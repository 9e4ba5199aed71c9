"""
Group composition rules: build a normalized group draft from a creation or
edit request, depending on who is acting.
"""

from typing import Collection

from roster.core.errors import ValidationErrorKind, ValidationFailure
from roster.core.group import GroupCreationRequest, GroupData, GroupDraft, GroupEditRequest
from roster.core.leadership import reassign_after_removals
from roster.core.members import MemberSet, normalize_id
from roster.core.roles import Role
from roster.core.user import UserData


def _check_name(group_name: str | None) -> list[ValidationFailure]:
    if not (group_name or "").strip():
        return [ValidationFailure.of(ValidationErrorKind.EMPTY_NAME)]
    return []


def _check_course(
    course_id: int | None, visible_course_ids: Collection[int] | None
) -> list[ValidationFailure]:
    if course_id is None:
        return [ValidationFailure.of(ValidationErrorKind.MISSING_COURSE)]

    if visible_course_ids is not None and course_id not in visible_course_ids:
        return [
            ValidationFailure.of(
                ValidationErrorKind.MISSING_COURSE,
                f"Course {course_id} does not exist or is not available",
            )
        ]

    return []


def derive_leader(
    members: MemberSet, requested_leader_id: str | None, acting_user: UserData
) -> str | None:
    """
    Pick the leader of a new group.

    Students always lead the groups they create, whatever they asked for.
    Teachers must name a leader. For any other role we fall back to the
    requested leader, then the first member, then the acting user.
    """
    requested_leader_id = normalize_id(requested_leader_id)

    match acting_user.role:
        case Role.STUDENT:
            leader_id = acting_user.institutional_id
        case Role.TEACHER:
            leader_id = requested_leader_id
        case Role.OTHER:
            leader_id = (
                requested_leader_id
                or members.first()
                or acting_user.institutional_id
            )

    return normalize_id(leader_id) or None


def validate(
    request: GroupCreationRequest,
    acting_user: UserData,
    visible_course_ids: Collection[int] | None = None,
) -> GroupDraft | list[ValidationFailure]:
    """
    Validate a group creation request and produce a normalized draft.

    Parameters
    ----------
    request: GroupCreationRequest
        The submitted group.
    acting_user: UserData
        The user creating the group. Becomes `created_by`.
    visible_course_ids: Collection[int] | None
        Courses the acting user may create groups in. When `None`, only the
        presence of a course ID is checked.

    Returns
    -------
    GroupDraft | list[ValidationFailure]
        The draft, with the leader always present in `member_ids`, or every
        failure found. No draft is produced if anything failed.
    """
    failures = [
        *_check_name(request.group_name),
        *_check_course(request.course_id, visible_course_ids),
    ]

    members = MemberSet(request.member_ids)
    leader_id = derive_leader(members, request.requested_leader_id, acting_user)

    if leader_id is None:
        failures.append(ValidationFailure.of(ValidationErrorKind.LEADER_REQUIRED))
    else:
        members = members.with_leader(leader_id)

    if not members:
        failures.append(ValidationFailure.of(ValidationErrorKind.NO_MEMBERS))

    if failures:
        return failures

    return GroupDraft(
        group_name=request.group_name.strip(),
        course_id=request.course_id,
        leader_id=leader_id,
        member_ids=members.to_list(),
        created_by=acting_user.institutional_id,
        allow_leader_edit=(
            request.allow_leader_edit if acting_user.role == Role.TEACHER else False
        ),
    )


def validate_edit(
    group: GroupData,
    request: GroupEditRequest,
    acting_user: UserData,
    visible_course_ids: Collection[int] | None = None,
) -> GroupDraft | list[ValidationFailure]:
    """
    Validate an edit of an existing group and produce the updated draft.

    Fields missing from the request keep their current value. When the
    current leader is dropped from the member list, leadership passes to the
    first remaining member. Only teachers (and unrecognised roles) may name a
    different leader explicitly.
    """
    group_name = group.group_name if request.group_name is None else request.group_name

    failures = [
        *_check_name(group_name),
        *_check_course(group.course_id, visible_course_ids),
    ]

    previous = MemberSet(group.member_ids).with_leader(group.leader_id)

    if request.member_ids is None:
        members = previous
        leader_id = normalize_id(group.leader_id) or None
    else:
        members = MemberSet(request.member_ids)
        leader_id = reassign_after_removals(
            group.leader_id, previous, members.to_list()
        )
        leader_id = normalize_id(leader_id) or None

    match acting_user.role:
        case Role.STUDENT:
            pass
        case Role.TEACHER | Role.OTHER:
            leader_id = normalize_id(request.leader_id) or leader_id

    if leader_id is None:
        failures.append(ValidationFailure.of(ValidationErrorKind.LEADER_REQUIRED))
    else:
        members = members.with_leader(leader_id)

    if not members:
        failures.append(ValidationFailure.of(ValidationErrorKind.NO_MEMBERS))

    if failures:
        return failures

    allow_leader_edit = group.allow_leader_edit
    if request.allow_leader_edit is not None and acting_user.role == Role.TEACHER:
        allow_leader_edit = request.allow_leader_edit

    return GroupDraft(
        group_name=group_name.strip(),
        course_id=group.course_id,
        leader_id=leader_id,
        member_ids=members.to_list(),
        created_by=group.created_by,
        allow_leader_edit=allow_leader_edit,
    )


def check_roster(
    draft: GroupDraft,
    enrolled_ids: Collection[str],
    grouped_ids: Collection[str],
    previous_member_ids: Collection[str] = (),
) -> list[ValidationFailure]:
    """
    Check the people in a draft against the course roster.

    Parameters
    ----------
    draft: GroupDraft
        A draft accepted by `validate` or `validate_edit`.
    enrolled_ids: Collection[str]
        Institutional IDs enrolled in the draft's course.
    grouped_ids: Collection[str]
        Institutional IDs already in some other group of the same course.
    previous_member_ids: Collection[str]
        For edits, the people already in the group. Only newcomers are
        checked, so an existing group stays editable after a member leaves
        the course.
    """
    enrolled = MemberSet(enrolled_ids)
    grouped = MemberSet(grouped_ids)
    previous = MemberSet(previous_member_ids)

    failures = []

    for member_id in draft.member_ids:
        if member_id in previous:
            continue

        if member_id not in enrolled:
            failures.append(
                ValidationFailure.of(
                    ValidationErrorKind.MEMBER_NOT_ENROLLED,
                    f"Member {member_id} is not enrolled in course {draft.course_id}",
                )
            )
        elif member_id in grouped:
            failures.append(
                ValidationFailure.of(
                    ValidationErrorKind.MEMBER_ALREADY_GROUPED,
                    f"Member {member_id} is already in another group in course "
                    f"{draft.course_id}",
                )
            )

    return failures
