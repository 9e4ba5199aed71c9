"""
Core course data model.
"""

from pydantic import BaseModel


class CourseData(BaseModel):
    course_id: int
    course_code: str
    course_name: str
