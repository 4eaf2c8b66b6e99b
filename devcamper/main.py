from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from devcamper.api.router import router as api_router
from devcamper.core.config import Settings
from devcamper.core.errors import install_error_handlers
from devcamper.core.http_hardening import install_http_hardening
from devcamper.db.session import build_engine, build_session_factory
from devcamper.services.file_storage import build_file_storage
from devcamper.services.geocoder import build_geocoder
from devcamper.services.rate_limit import build_rate_limiter


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or Settings()

    app = FastAPI(title=settings.APP_NAME, version="0.1.0")
    app.state.settings = settings
    app.state.engine = build_engine(settings.DATABASE_URL)
    app.state.session_factory = build_session_factory(app.state.engine)
    app.state.rate_limiter = build_rate_limiter(
        settings.REDIS_URL,
        limit=settings.RATE_LIMIT_MAX_REQUESTS,
        window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
    )
    app.state.geocoder = build_geocoder(settings)
    app.state.file_storage = build_file_storage(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    install_http_hardening(app)
    install_error_handlers(app)

    app.include_router(api_router, prefix=settings.API_PREFIX)
    if settings.FILE_STORAGE == "local":
        app.mount("/uploads", StaticFiles(directory=Path(settings.FILE_UPLOAD_PATH), check_dir=False), name="uploads")

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app


app = create_app()
