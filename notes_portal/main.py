import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse

from notes_portal.core.config import Settings, get_settings
from notes_portal.core.deps import build_backends
from notes_portal.core.errors import UpstreamError, register_error_handlers
from notes_portal.core.logging import RequestLogMiddleware, setup_logging
from notes_portal.routers import admin, auth, content, download, system

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Bucket privé créé au démarrage s'il n'existe pas (best-effort)
    try:
        app.state.backends.blobs.ensure_bucket()
    except UpstreamError as e:
        logger.error("Error initializing storage: %s", e.detail)
    yield
    app.state.backends.close()


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings.LOG_LEVEL, json_logs=settings.APP_ENV == "prod")

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="API du portail de documents étudiants (annales, IA, notes de modules)",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.backends = build_backends(settings)

    register_error_handlers(app)

    # Middleware
    app.add_middleware(RequestLogMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins or ["*"],  # fallback si mal configuré
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
        expose_headers=["Content-Length"],
        max_age=600,
    )

    # Routers
    app.include_router(system.router)
    app.include_router(auth.router)
    app.include_router(content.router)
    app.include_router(download.router)
    app.include_router(admin.router)

    # Redirect root → docs
    @app.get("/", include_in_schema=False)
    async def root():
        return RedirectResponse(url="/docs")

    return app


app = create_app()
