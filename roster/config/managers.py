"""
Engines and session factories for the roster tables. The sync manager is
used by setup scripts and tests, the async one by the API.
"""

from sqlalchemy import URL
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel, create_engine

from roster.database.meta import ALL_TABLES


def roster_tables():
    return [model.__table__ for model in ALL_TABLES]


class SyncSessionManager:
    """
    with settings.sync_manager().session() as conn:
        with conn.begin():
            conn.add(Course(course_code="CS101", course_name="Software"))
    """

    def __init__(self, connection_url: URL | str, echo: bool = False):
        self.engine = create_engine(connection_url, echo=echo)
        self.session = sessionmaker(self.engine)

    def create_all(self):
        """
        Create any missing roster tables. Existing tables are left as they are.
        """
        with self.engine.begin() as conn:
            SQLModel.metadata.create_all(conn, tables=roster_tables())


class AsyncSessionManager:
    """
    async with settings.async_manager().session() as conn:
        async with conn.begin():
            group = await groups_service.read_by_id(group_id, conn=conn, log=log)

    Objects stay usable after commit, as routes return them once the
    transaction has closed.
    """

    def __init__(self, connection_url: URL | str, echo: bool = False):
        self.engine = create_async_engine(connection_url, echo=echo)
        self.session = async_sessionmaker(self.engine, expire_on_commit=False)

    async def create_all(self):
        async with self.engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all, tables=roster_tables())
