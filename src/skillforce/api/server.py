from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from skillforce.api.routes import health, sessions
from skillforce.application.factory import AgentFactory
from skillforce.application.settings import get_settings
from skillforce.infrastructure.logging import configure_logging

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for FastAPI startup/shutdown events."""
    settings = get_settings()
    json_logs = settings.json_logs
    profile_missing = False
    if not json_logs:
        try:
            json_logs = AgentFactory(config_dir=settings.config_dir).profile_json_logs(settings.profile)
        except FileNotFoundError:
            profile_missing = True
    configure_logging(debug=settings.debug, json_logs=json_logs)

    if profile_missing:
        # Sessions choose their own profile, so the API can still start
        await logger.awarning("fastapi.default_profile_missing", profile=settings.profile)
    await logger.ainfo("fastapi.startup", message="Skillforce API starting...", profile=settings.profile)
    yield
    await logger.ainfo("fastapi.shutdown", message="Skillforce API shutting down...")


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""

    app = FastAPI(
        title="Skillforce Agent API",
        description="Goal-driven skill orchestrator with resumable sessions",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(sessions.router, prefix="/api/v1", tags=["sessions"])
    app.include_router(health.router, tags=["health"])

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8070)
