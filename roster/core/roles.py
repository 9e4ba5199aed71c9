"""
User roles. The set of stored role strings is open; everything we do not
recognise is mapped onto `Role.OTHER` so that role dispatch is always a
closed match.
"""

from enum import Enum
from typing import Any


class Role(str, Enum):
    STUDENT = "STUDENT"
    TEACHER = "TEACHER"
    OTHER = "OTHER"


def parse_role(value: Any) -> Role:
    """
    Convert a stored or submitted role value to a `Role`. Comparison is
    case-insensitive; unknown values become `Role.OTHER`.
    """
    if isinstance(value, Role):
        return value

    if value is None:
        return Role.OTHER

    match str(value).strip().upper():
        case "STUDENT":
            return Role.STUDENT
        case "TEACHER":
            return Role.TEACHER
        case _:
            return Role.OTHER
