"""
BizDesk: application entry point.

This is the **only** file that assembles the app. All business logic
lives in the `api/`, `services/`, `models/`, and `core/` packages.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from bizdesk.api.v1.api import api_router
from bizdesk.api.v1.endpoints.auth import limiter
from bizdesk.core.config import Settings, settings
from bizdesk.core.exceptions import register_exception_handlers
from bizdesk.core.lockout import LockoutPolicy
from bizdesk.core.permissions import default_admin_permissions, default_modules
from bizdesk.core.security import TokenService
from bizdesk.db.base import Base
from bizdesk.db.session import async_session_factory, engine

# Ensure all models are imported so metadata.create_all can see them
from bizdesk.models.admin import Admin
from bizdesk.models.client import Client  # noqa: F401
from bizdesk.models.employee import Employee  # noqa: F401
from bizdesk.models.user import User  # noqa: F401
from bizdesk.services.accounts import next_sequential_code

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


async def seed_super_admin(
    cfg: Settings = settings,
    session_factory: async_sessionmaker[AsyncSession] = async_session_factory,
) -> None:
    """Create the first super admin when no account holds its email yet."""
    async with session_factory() as session:
        result = await session.execute(select(Admin).where(Admin.email == cfg.FIRST_ADMIN_EMAIL))
        if result.scalar_one_or_none() is not None:
            return
        admin = Admin(
            email=cfg.FIRST_ADMIN_EMAIL,
            admin_id=await next_sequential_code(session, Admin.admin_id, "ADM"),
            first_name="System",
            last_name="Administrator",
            department="Administration",
            position="Super Administrator",
            admin_level="super_admin",
            access_level="full_access",
            permissions=default_admin_permissions("super_admin"),
            allowed_modules=default_modules("full_access"),
        )
        await admin.set_password(cfg.FIRST_ADMIN_PASSWORD)
        session.add(admin)
        await session.commit()
        logger.info("Default super admin created: %s (password: <redacted>)", cfg.FIRST_ADMIN_EMAIL)


# ── Lifespan ────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(_app: FastAPI):
    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database tables initialised")

    await seed_super_admin()

    logger.info("%s v%s started", settings.PROJECT_NAME, settings.VERSION)
    yield
    await engine.dispose()
    logger.info("Shutdown complete")


# ── App factory ─────────────────────────────────────────────────────
def create_app(cfg: Settings = settings) -> FastAPI:
    application = FastAPI(
        title=cfg.PROJECT_NAME,
        description="Multi-tenant business management backend",
        version=cfg.VERSION,
        openapi_url=f"{cfg.API_PREFIX}/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # Shared, read-only services for request handlers
    application.state.token_service = TokenService.from_settings(cfg)
    application.state.lockout_policy = LockoutPolicy(
        max_attempts=cfg.LOCKOUT_MAX_ATTEMPTS,
        lock_duration=cfg.lockout_duration,
    )

    # Rate limiting on auth routes
    application.state.limiter = limiter

    # CORS
    application.add_middleware(
        CORSMiddleware,
        allow_origins=cfg.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Global exception handlers (prevent stack-trace leakage)
    register_exception_handlers(application)

    application.include_router(api_router, prefix=cfg.API_PREFIX)

    return application


app = create_app()
