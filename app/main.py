"""
Chat Runtime Service - Main application entry point.

FastAPI application for multimodal chat with durable per-session history.
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.api.v1.endpoints import router as v1_router
from app.core.config import AppConfig, logger
from app.core.dependencies import build_container
from app.infrastructure.persistence import (
    SqlAlchemyStateStore,
    close_db,
    init_database,
    init_db,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info("Starting Chat Runtime...")
    logger.info(f"Version: {AppConfig.VERSION}")

    # Контейнер может быть подготовлен заранее (тесты)
    owns_database = getattr(app.state, "container", None) is None
    if owns_database:
        try:
            session_maker = init_database(AppConfig.DATABASE_URL)
            await init_db()
            app.state.container = build_container(SqlAlchemyStateStore(session_maker))
            logger.info("✓ Services initialized")
        except Exception as e:
            logger.error(f"Failed to initialize: {e}")
            raise

    yield

    logger.info("Shutting down Chat Runtime...")
    if owns_database:
        await close_db()


def create_app() -> FastAPI:
    application = FastAPI(
        title="Chat Runtime Service",
        version=AppConfig.VERSION,
        description="Multimodal chat with image, file and live-context enrichment",
        lifespan=lifespan,
    )
    application.include_router(v1_router)
    return application


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8001,
        log_level="info",
        reload=True
    )
