"""FastAPI application entry point.

``create_app`` builds the engine, session factory and notification sink and
stores them on ``app.state``; nothing here holds a module-level database
handle.  Run with ``uvicorn eventhub.main:app``.
"""
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.engine import Engine

from eventhub.config import Settings, settings as default_settings
from eventhub.database import Base, build_engine, build_session_factory
from eventhub.errors import register_error_handlers
from eventhub.logging_config import setup_logging
from eventhub.routers import events, notifications, reservations, users
from eventhub.services.notification_service import Notifier

# Import all models so Base.metadata knows about them
import eventhub.models  # noqa: F401


def create_app(settings: Optional[Settings] = None, engine: Optional[Engine] = None) -> FastAPI:
    """Assemble the app; tests pass their own settings and engine."""
    settings = settings or default_settings
    setup_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title="EventHub",
        description="Event attendance: RSVPs, guest lists, reservations and toggles",
        version="0.1.0",
    )

    engine = engine or build_engine(settings.DATABASE_URL)
    session_factory = build_session_factory(engine)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.notifier = Notifier(session_factory)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS.split(","),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    # Register routers
    app.include_router(users.router, prefix="/api/users", tags=["Users"])
    app.include_router(events.router, prefix="/api/events", tags=["Events"])
    app.include_router(reservations.router, prefix="/api/reservations", tags=["Reservations"])
    app.include_router(notifications.router, prefix="/api/notifications", tags=["Notifications"])

    @app.on_event("startup")
    def on_startup():
        """Create database tables on startup (for SQLite dev mode)."""
        if str(engine.url).startswith("sqlite"):
            Base.metadata.create_all(bind=engine)

    @app.on_event("shutdown")
    def on_shutdown():
        engine.dispose()

    @app.get("/api/health")
    def health_check():
        return {"status": "ok"}

    return app


app = create_app()
