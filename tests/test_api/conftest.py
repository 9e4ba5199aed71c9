"""
Fixtures for the HTTP API tests. The API reads its settings from the
environment when first imported, so point it at a scratch database here.
"""

import os
import tempfile
from pathlib import Path

import pytest

os.environ["ROSTER_DATABASE_TYPE"] = "sqlite"
os.environ["ROSTER_DATABASE_DB"] = str(Path(tempfile.mkdtemp()) / "roster_api.db")
os.environ["ROSTER_GROUP_DELETION_POLICY"] = "teacher_only"


@pytest.fixture(scope="module")
def api_settings():
    from roster.api.dependencies import SETTINGS

    settings = SETTINGS()
    settings.sync_manager().create_all()
    yield settings


@pytest.fixture(scope="module")
def course_id(api_settings):
    from roster.database.course import Course
    from roster.database.user import User

    manager = api_settings.sync_manager()

    with manager.session() as conn:
        with conn.begin():
            teacher = User(institutional_id="T1", role="TEACHER", display_name="Teacher")
            first = User(institutional_id="S1", role="STUDENT", display_name="First")
            second = User(institutional_id="S2", role="STUDENT", display_name="Second")
            course = Course(course_code="API101", course_name="APIs")
            course.students = [first, second]
            conn.add_all([teacher, first, second, course])
            conn.flush()
            COURSE_ID = course.course_id

    yield COURSE_ID


@pytest.fixture(scope="module")
def client(api_settings, course_id):
    from fastapi.testclient import TestClient

    from roster.api.app import app

    with TestClient(app) as client:
        yield client
