"""FastAPI application factory."""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .. import __version__
from ..config import settings
from ..engine import FreightSmithEngine
from .routes import router

# Global engine instance
_engine: Optional[FreightSmithEngine] = None


def get_engine() -> FreightSmithEngine:
    """Get the global engine instance."""
    global _engine
    if _engine is None:
        _engine = FreightSmithEngine()
    return _engine


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle."""
    # Startup
    engine = get_engine()
    await engine.initialize()
    yield
    # Shutdown
    await engine.shutdown()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="FreightSmith",
        description="Freight tracking header resolution and container risk engine",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router, prefix="/api")

    return app
