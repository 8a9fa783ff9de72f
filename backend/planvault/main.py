import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from planvault.api.errors import register_exception_handlers
from planvault.api.router import api_router
from planvault.core.config import Settings, get_settings
from planvault.storage import Storage, build_storage

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, storage: Optional[Storage] = None) -> FastAPI:
    """
    Build the application around an explicitly constructed storage backend.

    ``storage`` defaults to whatever the settings select; tests pass their own.
    """
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    if storage is None:
        storage = build_storage(settings)

    app = FastAPI(
        title=settings.app_name,
        description="Private calendar and reminders. Sensitive event fields are encrypted client-side.",
        version="1.0.0",
        debug=settings.debug,
    )
    app.state.storage = storage

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    @app.on_event("startup")
    def startup():
        storage.init()
        logger.info("%s started (%s)", settings.app_name, settings.environment)

    app.include_router(api_router, prefix="/api")

    @app.get("/")
    def root():
        return {"message": settings.app_name, "docs": "/docs"}

    @app.get("/health")
    def health_check():
        return {"message": "healthy"}

    return app
