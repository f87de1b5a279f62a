"""
Gemini Chat - Main Application Entry Point

Chat sessions and messages behind a batched RPC endpoint, with Gemini
text and image completions.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from chatapp.core.config import get_settings
from chatapp.core.logger import logger

APP_VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    # Startup
    settings = get_settings()
    logger.info(f"Starting Gemini Chat in {settings.ENVIRONMENT} mode...")

    from chatapp.api.deps import get_auth_provider
    from chatapp.infrastructure.local.database import dispose_db, init_db

    # Fail fast on an auth configuration the environment does not allow
    get_auth_provider()
    await init_db()

    yield

    # Shutdown
    logger.info("Shutting down Gemini Chat...")
    await dispose_db()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Gemini Chat",
        description="Chat sessions with Gemini text and image completions",
        version=APP_VERSION,
        lifespan=lifespan,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    from chatapp.api import rpc

    app.include_router(rpc.router, prefix="/api/rpc", tags=["rpc"])

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "environment": settings.ENVIRONMENT,
            "version": APP_VERSION,
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
