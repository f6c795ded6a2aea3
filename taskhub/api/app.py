"""FastAPI application for taskhub."""

import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from taskhub import __version__
from taskhub.auth.tokens import TokenService
from taskhub.config import DEFAULT_JWT_SECRET, Settings, get_settings
from taskhub.db.seed_data import seed_all
from taskhub.db.session import close_db, create_tables, get_session, init_db
from taskhub.rbac.exceptions import ForbiddenError, RBACError

from .routes import (
    audit_router,
    auth_router,
    health_router,
    organizations_router,
    tasks_router,
    users_router,
)

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stdout,
    )


def error_body(exc: RBACError) -> dict:
    reason = exc.reason.value if isinstance(exc, ForbiddenError) else None
    return {
        "error": {
            "message": exc.message,
            "type": type(exc).__name__,
            "code": exc.code,
            "reason": reason,
        }
    }


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create the taskhub application.

    Args:
        settings: Optional settings; defaults to :func:`get_settings`.
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)
    if settings.app_env != "dev" and settings.jwt_secret == DEFAULT_JWT_SECRET:
        logger.warning(
            "jwt_secret is the built-in default in %s; set TASKHUB_JWT_SECRET", settings.app_env
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan handler."""
        init_db(settings.database_url, settings=settings)
        await create_tables()

        if settings.seed_on_startup:
            async with get_session() as session:
                await seed_all(
                    session,
                    demo=settings.seed_demo_data,
                    demo_password=settings.demo_password,
                )

        logger.info("%s %s started (env=%s)", settings.app_name, __version__, settings.app_env)
        yield

        await close_db()

    app = FastAPI(
        title="taskhub",
        description="Multi-tenant task management with hierarchical RBAC",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.token_service = TokenService(
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        expiration_minutes=settings.jwt_expiration_minutes,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RBACError)
    async def rbac_exception_handler(request: Request, exc: RBACError):
        """Map typed engine errors onto HTTP responses."""
        if exc.status_code >= 500:
            logger.error("%s on %s %s: %s", exc.code, request.method, request.url.path, exc.message)
        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
        return JSONResponse(status_code=exc.status_code, content=error_body(exc), headers=headers)

    prefix = settings.api_prefix.rstrip("/")
    app.include_router(health_router, prefix=prefix)
    app.include_router(auth_router, prefix=prefix)
    app.include_router(tasks_router, prefix=prefix)
    app.include_router(users_router, prefix=prefix)
    app.include_router(organizations_router, prefix=prefix)
    app.include_router(audit_router, prefix=prefix)

    return app
