"""Meter Reader — FastAPI Application Entry Point.

Utility-meter photo intake: recognize, store, confirm, list.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.engine import Engine

from meterread.config import Settings, settings as default_settings
from meterread.database import _mask_url, build_engine, init_db, test_connection
from meterread.api.measurement_routes import router as measurement_router
from meterread.core.errors import register_error_handlers
from meterread.core.logging import get_logger
from meterread.recognizer.base_recognizer import ReadingRecognizer
from meterread.recognizer.registry import build_recognizer

logger = get_logger("main")

VERSION = "1.0.0"


def create_app(
    settings: Optional[Settings] = None,
    engine: Optional[Engine] = None,
    recognizer: Optional[ReadingRecognizer] = None,
) -> FastAPI:
    """Build the application.

    ``engine`` and ``recognizer`` may be injected (tests do); anything not
    injected is built at startup and disposed of at shutdown.
    """
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup and shutdown lifecycle."""
        logger.info("🚀 Meter Reader starting up...")
        owned_engine = engine is None
        owned_recognizer = recognizer is None

        app.state.engine = engine if engine is not None else build_engine(settings.effective_database_url)
        if test_connection(app.state.engine):
            try:
                init_db(app.state.engine)
            except Exception as e:
                logger.error(f"❌ Table creation failed: {e}")
        else:
            logger.error("❌ Database NOT connected — endpoints will fail")

        app.state.recognizer = recognizer if recognizer is not None else build_recognizer(settings)
        if app.state.recognizer is None:
            logger.error("❌ No recognizer — uploads will fail")
        yield
        if owned_recognizer and app.state.recognizer is not None:
            await app.state.recognizer.close()
        if owned_engine:
            app.state.engine.dispose()
        logger.info("Meter Reader shut down")

    app = FastAPI(
        title="Meter Reader",
        description="Read utility meters from photos, one reading per meter type per month, with a confirmation step.",
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    @app.get("/health", tags=["System"])
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "service": "meterread",
            "version": VERSION,
        }

    @app.get("/debug/db", tags=["System"])
    async def debug_db(request: Request):
        """Debug endpoint — check database connectivity."""
        db_url = settings.effective_database_url
        error = None
        connected = False
        try:
            connected = test_connection(request.app.state.engine)
        except Exception as e:
            error = str(e)

        backend = "postgresql" if db_url.startswith("postgresql") else "sqlite"
        return {
            "connected": connected,
            "backend": backend,
            "url": _mask_url(db_url),
            "error": error,
        }

    # Routers
    app.include_router(measurement_router)

    return app


app = create_app()
