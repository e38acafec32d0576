"""
Main FastAPI application entry point.
Configures the application, middleware, and routes.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from sqlmodel import Session

from realty.api.routes import admin, auth, blog_posts, health, listings, users
from realty.core.config import settings
from realty.core.logging import get_logger, setup_logging
from realty.db.session import create_db_and_tables, engine
from realty.middleware.session_gate import SessionGateMiddleware
from realty.models.user import UserRole
from realty.schemas.user import UserCreate
from realty.services.user_service import UserService
from realty.ui import admin as ui_admin
from realty.ui import dashboard as ui_dashboard
from realty.ui import public as ui_public
from realty.ui.common import PageRedirect, page_redirect_handler

# Setup logging
setup_logging()
logger = get_logger(__name__)


def bootstrap_superuser() -> None:
    """Create the first admin account when it does not exist yet."""
    with Session(engine) as session:
        if UserService.get_by_email(session, settings.FIRST_SUPERUSER_EMAIL):
            return
        logger.info("Creating first superuser...")
        try:
            superuser = UserCreate(
                email=settings.FIRST_SUPERUSER_EMAIL,
                name=settings.FIRST_SUPERUSER_NAME,
                password=settings.FIRST_SUPERUSER_PASSWORD,
            )
            UserService.create(session, superuser, role=UserRole.ADMIN)
            logger.info(f"Superuser created: {settings.FIRST_SUPERUSER_EMAIL}")
        except Exception as e:
            logger.error(f"Failed to create superuser: {e}")
            logger.warning("Continuing without superuser. Admin pages will be unreachable.")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Application lifespan handler.
    Runs startup and shutdown logic.
    """
    logger.info(f"Starting {settings.PROJECT_NAME} v{settings.VERSION}")

    logger.info("Creating database tables...")
    create_db_and_tables()

    if not settings.DISABLE_BOOTSTRAP_USERS:
        bootstrap_superuser()
    else:
        logger.info("User bootstrapping disabled (DISABLE_BOOTSTRAP_USERS=true)")

    logger.info("Application startup complete")

    yield

    logger.info("Shutting down application...")


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    openapi_url=f"{settings.API_PREFIX}/openapi.json",
    docs_url=f"{settings.API_PREFIX}/docs",
    redoc_url=None,
    lifespan=lifespan,
)

# Every request to /admin and /dashboard passes the session gate first
app.add_middleware(SessionGateMiddleware)

app.add_exception_handler(PageRedirect, page_redirect_handler)  # type: ignore[arg-type]

# Pages (no prefix)
app.include_router(ui_public.router, tags=["UI"])
app.include_router(ui_dashboard.router, tags=["UI"])
app.include_router(ui_admin.router, tags=["UI"])

# JSON API
app.include_router(health.router, prefix=settings.API_PREFIX)
app.include_router(auth.router, prefix=settings.API_PREFIX)
app.include_router(users.router, prefix=settings.API_PREFIX)
app.include_router(listings.router, prefix=settings.API_PREFIX)
app.include_router(blog_posts.router, prefix=settings.API_PREFIX)
app.include_router(admin.router, prefix=settings.API_PREFIX)
