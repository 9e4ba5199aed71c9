"""
Dependencies used by the API.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession
from structlog import get_logger
from structlog.typing import FilteringBoundLogger

from roster.config.settings import Settings
from roster.core.user import UserData
from roster.service import user as user_service


@lru_cache
def SETTINGS():
    return Settings()


DATABASE_MANAGER = SETTINGS().async_manager()


async def get_async_session():
    async with DATABASE_MANAGER.session() as session:
        async with session.begin():
            yield session


def logger():
    return get_logger()


SettingsDependency = Annotated[Settings, Depends(SETTINGS)]
DatabaseDependency = Annotated[AsyncSession, Depends(get_async_session)]
LoggerDependency = Annotated[FilteringBoundLogger, Depends(logger)]


async def session_user(
    request: Request,
    settings: SettingsDependency,
    conn: DatabaseDependency,
    log: LoggerDependency,
) -> UserData:
    """
    The signed-in user, identified by the session header that the
    authenticating proxy sets. Sign-in itself happens elsewhere.
    """
    institutional_id = request.headers.get(settings.session_header, "").strip()

    if not institutional_id:
        await log.ainfo("session.missing")
        raise HTTPException(status_code=401, detail="Not authenticated")

    try:
        user = await user_service.read_by_institutional_id(
            institutional_id=institutional_id, conn=conn
        )
    except user_service.UserNotFound:
        await log.awarn("session.unknown_user", institutional_id=institutional_id)
        raise HTTPException(status_code=401, detail="Not authenticated")

    return user.to_core()


SessionUserDependency = Annotated[UserData, Depends(session_user)]
