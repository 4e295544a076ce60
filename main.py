"""
Task Tracker API — application entry point.
"""

from __future__ import annotations

import logging
import sys

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.middleware import register_middleware
from api.routes import router as task_router
from auth.jwt import TokenConfig, TokenService
from auth.routes import router as auth_router
from config.settings import Settings, config
from database.session import build_engine, build_session_factory, init_models

logging.basicConfig(
    level=logging.DEBUG if config.debug else logging.INFO,
    format="%(asctime)s  %(levelname)-8s  %(name)s — %(message)s",
    stream=sys.stdout,
)
for _noisy in ("sqlalchemy.engine", "aiosqlite", "asyncio"):
    logging.getLogger(_noisy).setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


def create_app(settings: Settings = config, token_service: TokenService | None = None) -> FastAPI:
    """
    Build the application from an explicit settings object: token secret,
    database URL, bcrypt work factor, ownership policy, CORS and route prefix
    all come from *settings*.

    Raises ``ConfigurationError`` when no token signing secret is configured,
    so a missing ``JWT_SECRET`` stops the process before it serves requests.
    """
    if token_service is None:
        token_service = TokenService(TokenConfig(secret=settings.jwt_secret))

    app = FastAPI(
        title="Task Tracker API",
        version="1.0.0",
        description="Personal task tracking with token authentication.",
    )
    app.state.settings = settings
    app.state.token_service = token_service
    app.state.engine = build_engine(settings.database_url)
    app.state.session_factory = build_session_factory(app.state.engine)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_middleware(app)

    # Routes
    app.include_router(auth_router, prefix=f"{settings.api_prefix}/auth")
    app.include_router(task_router, prefix=f"{settings.api_prefix}/tasks")

    @app.get("/health", tags=["health"])
    async def health() -> dict:
        return {"status": "ok"}

    @app.on_event("startup")
    async def on_startup():
        logger.info("Ensuring database tables exist…")
        await init_models(app.state.engine)
        if settings.enforce_task_ownership:
            logger.info("Task ownership is enforced on update/delete.")
        logger.info("Application ready to accept requests.")

    @app.on_event("shutdown")
    async def on_shutdown():
        await app.state.engine.dispose()

    return app


if __name__ == "__main__":
    uvicorn.run(
        "main:create_app",
        factory=True,
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level="debug" if config.debug else "info",
    )
