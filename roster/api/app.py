"""
FastAPI app
"""

from importlib.metadata import version

from fastapi import FastAPI

from .dependencies import DATABASE_MANAGER, SETTINGS, logger
from .directory import directory_app
from .groups import group_app

settings = SETTINGS()


async def lifespan(app: FastAPI):
    app.settings = settings

    if settings.database_type == "sqlite":
        await DATABASE_MANAGER.create_all()

    await logger().ainfo(
        "app.started",
        database_type=settings.database_type,
        group_deletion_policy=settings.group_deletion_policy,
    )

    yield


app = FastAPI(
    lifespan=lifespan,
    title="Roster API",
    summary="API endpoints for managing course groups: composition, leadership and dashboards.",
    version=version("roster"),
)

app.include_router(group_app, prefix="/groups")
app.include_router(directory_app)
