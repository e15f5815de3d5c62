import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import admin as admin_api
from .api import application as application_api
from .api import auth as auth_api
from .api import dashboard as dashboard_api
from .api import job as job_api
from .api import profile as profile_api
from .config import Settings, load_settings
from .database import build_engine, build_session_factory, init_db
from .logging_config import configure_logging
from .utils.error_handlers import register_exception_handlers

logger = logging.getLogger(__name__)

_DEFAULT_ORIGINS = ["http://localhost:5173", "http://127.0.0.1:5173"]


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Build the API. Settings are resolved once here and exposed to request
    handlers through app.state; the database engine is bound the same way.
    """
    settings = settings or load_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="Job Board API")
    app.state.settings = settings
    app.state.engine = build_engine(settings.database_url)
    app.state.session_factory = build_session_factory(app.state.engine)

    app.include_router(auth_api.router)
    app.include_router(job_api.router)
    app.include_router(application_api.router)
    app.include_router(profile_api.router)
    app.include_router(admin_api.router)
    app.include_router(dashboard_api.router)

    register_exception_handlers(app)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[*_DEFAULT_ORIGINS, *settings.frontend_origins],
        allow_origin_regex=r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    def health_check():
        return {"status": "Backend running", "service": "Job Board API"}

    @app.on_event("startup")
    def on_startup() -> None:
        settings.upload_dir.mkdir(parents=True, exist_ok=True)
        init_db(app.state.engine)
        logger.info("Job Board API started (uploads: %s)", settings.upload_dir)

    return app


app = create_app()
