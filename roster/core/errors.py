"""
Validation failures produced when composing a group. These are returned as
values by the core; the service layer wraps them in `GroupValidationError`.
"""

from enum import Enum

from pydantic import BaseModel


class ValidationErrorKind(str, Enum):
    EMPTY_NAME = "EmptyName"
    MISSING_COURSE = "MissingCourse"
    LEADER_REQUIRED = "LeaderRequired"
    NO_MEMBERS = "NoMembers"
    MEMBER_NOT_ENROLLED = "MemberNotEnrolled"
    MEMBER_ALREADY_GROUPED = "MemberAlreadyGrouped"


DEFAULT_MESSAGES = {
    ValidationErrorKind.EMPTY_NAME: "Group name cannot be empty",
    ValidationErrorKind.MISSING_COURSE: "Course does not exist or is not available",
    ValidationErrorKind.LEADER_REQUIRED: "A group leader is required",
    ValidationErrorKind.NO_MEMBERS: "A group must have at least one member",
    ValidationErrorKind.MEMBER_NOT_ENROLLED: "Member is not enrolled in the course",
    ValidationErrorKind.MEMBER_ALREADY_GROUPED: (
        "Member is already in another group in this course"
    ),
}


class ValidationFailure(BaseModel):
    kind: ValidationErrorKind
    message: str

    @classmethod
    def of(cls, kind: ValidationErrorKind, message: str | None = None):
        return cls(kind=kind, message=message or DEFAULT_MESSAGES[kind])


class GroupValidationError(Exception):
    """
    Raised by the service layer when a create or edit request is rejected.
    """

    failures: list[ValidationFailure]

    def __init__(self, failures: list[ValidationFailure]):
        self.failures = failures
        super().__init__("; ".join(f.message for f in failures))

    @property
    def kinds(self) -> list[ValidationErrorKind]:
        return [f.kind for f in self.failures]
