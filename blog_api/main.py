import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from blog_api import __version__
from blog_api.auth.tokens import TokenService
from blog_api.config import Settings, settings as default_settings
from blog_api.database import Database
from blog_api.errors import register_exception_handlers
from blog_api.logger import setup_logging
from blog_api.middleware import TimingMiddleware
from blog_api.routers import comments, posts, users

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, db: Database | None = None) -> FastAPI:
    """
    Build the application.

    The persistence handle and token service are constructed here and
    hung off ``app.state``; nothing below this function reaches for a
    module-level engine.
    """
    settings = settings or default_settings
    setup_logging(settings.LOG_LEVEL, settings.LOG_DIR)

    db = db or Database(settings.DATABASE_URL, echo=settings.DEBUG)
    tokens = TokenService.from_settings(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Blog API %s starting (env=%s)", __version__, settings.APP_ENV)
        if settings.AUTO_CREATE_TABLES:
            await db.create_all()
        yield
        logger.info("Blog API shutting down")
        await db.dispose()

    app = FastAPI(
        title="Blog API",
        description="Users, posts and comments with JWT authentication and owner-only mutation",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.db = db
    app.state.tokens = tokens

    # Middleware
    app.add_middleware(TimingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Routers
    app.include_router(users.router)
    app.include_router(posts.router)
    app.include_router(comments.router)

    @app.get("/health")
    async def health():
        return {"status": "healthy", "version": __version__}

    return app


def serve() -> None:
    """Console entry point: run the app under uvicorn."""
    uvicorn.run(
        "blog_api.main:create_app",
        factory=True,
        host=default_settings.HOST,
        port=default_settings.PORT,
        log_level=default_settings.LOG_LEVEL.lower(),
    )
