import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from staffpanel.api.access_requests.router import router as access_requests_router
from staffpanel.api.attendance.router import router as attendance_router
from staffpanel.api.auth.router import router as auth_router
from staffpanel.api.live.router import router as live_router
from staffpanel.api.messages.router import router as messages_router
from staffpanel.api.reports.router import router as reports_router
from staffpanel.api.roles.router import router as roles_router
from staffpanel.api.tasks.router import router as tasks_router
from staffpanel.api.users.router import router as users_router
from staffpanel.core.broadcaster import Broadcaster
from staffpanel.core.config import settings
from staffpanel.core.uploads import PUBLIC_PREFIX, ensure_upload_dir, upload_root
from staffpanel.db.seed_admin import seed_admin
from staffpanel.db.session import AsyncSessionLocal, create_tables

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    ensure_upload_dir()
    await create_tables()
    async with AsyncSessionLocal() as db:
        await seed_admin(db)
    yield


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


def create_app() -> FastAPI:
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.state.broadcaster = Broadcaster()

    # Cookies must be allowed cross-origin for the session to work
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # Routers
    app.include_router(auth_router)
    app.include_router(access_requests_router)
    app.include_router(users_router)
    app.include_router(roles_router)
    app.include_router(messages_router)
    app.include_router(tasks_router)
    app.include_router(attendance_router)
    app.include_router(reports_router)
    app.include_router(live_router)

    app.mount(PUBLIC_PREFIX, StaticFiles(directory=upload_root(), check_dir=False), name="uploads")
    if settings.client_dist_dir and Path(settings.client_dist_dir).is_dir():
        app.mount("/", StaticFiles(directory=settings.client_dist_dir, html=True), name="client")

    return app


app = create_app()
