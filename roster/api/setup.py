"""
Initial setup of the service: database tables and, optionally, the first
teacher account so that somebody can sign in and create courses and groups.
"""

from roster.config.settings import Settings
from roster.core.roles import Role
from roster.database.user import User


def initial_setup(settings: Settings, initial_teacher: str | None = None):
    """
    Create all tables. If `initial_teacher` is given (an institutional ID) and
    no such user exists, create them with the TEACHER role.
    """
    manager = settings.sync_manager()
    manager.create_all()

    if initial_teacher is None:
        return

    initial_teacher = initial_teacher.strip()

    with manager.session() as conn:
        with conn.begin():
            existing = conn.query(User).filter(
                User.institutional_id == initial_teacher
            ).one_or_none()

            if existing is None:
                conn.add(
                    User(
                        institutional_id=initial_teacher,
                        role=Role.TEACHER.value,
                        display_name=initial_teacher,
                    )
                )
