import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlalchemy import text

from src.app.api.v1 import clients, health
from src.app.containers import Container
from src.app.logging import configure_logging

# Configure logging at module load time
configure_logging()

logger = logging.getLogger(__name__)

API_MODULES = [
    "src.app.api.v1.clients",
    "src.app.api.v1.health",
]


@asynccontextmanager
async def default_lifespan(app: FastAPI):
    """Default application lifespan manager - initializes the database and warms the cache on startup."""
    container: Container = app.state.container
    logger.info("Starting Koravi CRM API...")

    db = container.database()

    async with db._engine.begin() as conn:
        # Enable pg_trgm extension for substring search indexes
        await conn.execute(text("CREATE EXTENSION IF NOT EXISTS pg_trgm"))

        # Create all tables
        from src.shared.database.database import Base
        import src.app.infrastructure.entities  # noqa: F401  registers ClientEntity on Base
        await conn.run_sync(Base.metadata.create_all)

    logger.info("Database initialized successfully")

    config = container.config()
    if config.cache.warm_on_startup:
        await container.client_service().warm_cache()

    yield

    logger.info("Shutting down Koravi CRM API...")
    container.cache().clear()
    await db.dispose()


def create_app(container: Container, lifespan=default_lifespan) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        container: DI container providing configuration and services.
        lifespan: Optional lifespan context manager. Defaults to default_lifespan.

    Returns:
        Configured FastAPI application.
    """
    container.wire(modules=API_MODULES)

    config = container.config()

    app = FastAPI(
        title=config.app_name,
        version=config.app_version,
        lifespan=lifespan,
    )

    # Attach container to app state for access in lifespan and routes
    app.state.container = container

    # Include routers
    app.include_router(clients.router, prefix="/api/v1")
    app.include_router(health.router)

    @app.get("/")
    async def root():
        return {"message": "Welcome to Koravi CRM API"}

    return app


def build_default_app() -> FastAPI:
    """Application wired to the environment's settings; fails fast when DATABASE_URL is missing."""
    return create_app(container=Container())
