"""
Service layer for users (the user directory).
"""

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from structlog.typing import FilteringBoundLogger

from roster.core.members import normalize_id
from roster.core.roles import Role
from roster.core.user import UserData
from roster.core.uuid import UUID
from roster.database.user import User


class UserNotFound(Exception):
    pass


class UserExistsError(Exception):
    pass


async def create(
    institutional_id: str,
    role: Role | str,
    display_name: str | None,
    email: str | None,
    conn: AsyncSession,
    log: FilteringBoundLogger,
) -> User:
    """
    Creates a user, if they do not exist.

    Raises
    ------
    UserExistsError
        If a user with this institutional ID already exists.
    """
    institutional_id = normalize_id(institutional_id)
    role = role.value if isinstance(role, Role) else str(role).strip().upper()

    log = log.bind(institutional_id=institutional_id, role=role, email=email)

    user = User(
        institutional_id=institutional_id,
        role=role,
        display_name=display_name,
        email=email,
    )

    try:
        conn.add(user)
        await conn.flush()
    except IntegrityError:
        await log.ainfo("user.create.exists")
        raise UserExistsError(
            f"User with institutional ID {institutional_id} already exists"
        )

    log = log.bind(user_id=user.user_id)
    await log.ainfo("user.created")

    return user


async def read_by_id(user_id: UUID, conn: AsyncSession) -> User:
    res = await conn.get(User, user_id)

    if res is None:
        raise UserNotFound(f"User with ID {user_id} not found in the database")

    return res


async def read_by_institutional_id(institutional_id: str, conn: AsyncSession) -> User:
    institutional_id = normalize_id(institutional_id)

    query = select(User).filter(User.institutional_id == institutional_id)
    res = (await conn.execute(query)).unique().scalar_one_or_none()

    if res is None:
        raise UserNotFound(
            f"User with institutional ID {institutional_id} not found in the database"
        )

    return res


async def search(
    query: str,
    conn: AsyncSession,
    log: FilteringBoundLogger,
    limit: int = 20,
) -> list[UserData]:
    """
    Find users whose institutional ID, name or email contains `query`.
    Used to pick candidate members and leaders.
    """
    query = query.strip()
    log = log.bind(query=query)

    if not query:
        return []

    pattern = f"%{query}%"
    statement = (
        select(User)
        .filter(
            or_(
                User.institutional_id.ilike(pattern),
                User.display_name.ilike(pattern),
                User.email.ilike(pattern),
            )
        )
        .order_by(User.institutional_id)
        .limit(limit)
    )
    res = (await conn.execute(statement)).unique().scalars().all()

    await log.adebug("user.searched", number_of_results=len(res))

    return [u.to_core() for u in res]


async def delete(institutional_id: str, conn: AsyncSession, log: FilteringBoundLogger):
    user = await read_by_institutional_id(institutional_id=institutional_id, conn=conn)

    log = log.bind(user_id=user.user_id, institutional_id=user.institutional_id)

    await conn.delete(user)
    await conn.flush()

    await log.ainfo("user.deleted")

    return
