"""FastAPI application entrypoint. No business logic; only wiring and middleware."""

import logging

from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api import router as api_router
from app.core.config import Settings, get_settings
from app.core.errors import register_exception_handlers
from app.core.middleware import AccessControlMiddleware, SecurityConfig


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%SZ",
    )


def create_app(
    settings: Settings | None = None, security: SecurityConfig | None = None
) -> FastAPI:
    """Build the API. Tests pass their own settings/security config; the server uses env."""
    settings = settings or get_settings()
    security = security or SecurityConfig.from_settings(settings)

    app = FastAPI(
        title="Book Catalog API",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )
    app.state.settings = settings
    app.state.security = security

    register_exception_handlers(app)

    # Added first so CORS wraps it and answers preflight requests without a token.
    app.add_middleware(AccessControlMiddleware, config=security)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.APP_ENV == "dev" else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router, prefix=settings.API_PREFIX)

    @app.get("/")
    def root() -> dict[str, str]:
        """Root route; minimal payload for discovery."""
        return {"message": "Book Catalog API"}

    return app


configure_logging(get_settings().LOG_LEVEL)
app = create_app()
