"""
Meta functionality for the database.
"""

from .course import Course, CourseEnrollment
from .group import Group
from .user import User

ALL_TABLES = (
    Course,
    CourseEnrollment,
    Group,
    User,
)
