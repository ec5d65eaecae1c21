"""
FastAPI application factory.

Creates and configures the FastAPI application instance.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from modules.auth.routes import router as auth_router
from modules.battle.routes import router as battle_router
from modules.billing.routes import router as billing_router
from modules.billing.service import validate_stripe_config
from modules.compare.routes import router as compare_router
from modules.debates.routes import router as debates_router
from modules.templates.routes import router as templates_router
from modules.vixra.routes import router as vixra_router
from shared.config import get_settings
from shared.exceptions import ModelCompareError

from .dependencies import get_container
from .routes import health

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Compiles templates and builds the provider registry before serving.
    Template problems are logged; only strict validation stops startup.
    """
    # Startup
    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
    logger.info("Starting %s on %s:%s", settings.app_name, settings.host, settings.port)

    container = get_container()
    compiler = container.templates
    logger.info("Template compiler ready with %d templates", compiler.template_count)

    registry = container.providers
    logger.info("Provider registry ready with %d models", len(registry.get_all_models()))

    if settings.enable_billing:
        stripe_status = validate_stripe_config(settings)
        if not stripe_status.is_valid:
            logger.warning("Stripe configuration incomplete: %s", "; ".join(stripe_status.errors))

    yield
    # Shutdown
    db = container.database
    if db is not None:
        db.close()
    logger.info("Shutting down %s", settings.app_name)


async def modelcompare_error_handler(request: Request, exc: ModelCompareError) -> JSONResponse:
    """Render domain errors that escaped a route handler."""
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", exc.code, request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI instance
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Side-by-side LLM comparison, battles, debates and paper generation",
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/api/docs" if settings.debug else None,
        redoc_url="/api/redoc" if settings.debug else None,
    )

    app.add_exception_handler(ModelCompareError, modelcompare_error_handler)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    # Register routes
    app.include_router(health.router, prefix="/api/health", tags=["health"])
    app.include_router(templates_router, prefix="/api/templates", tags=["templates"])
    app.include_router(compare_router, prefix="/api", tags=["compare"])
    app.include_router(battle_router, prefix="/api/battle", tags=["battle"])
    app.include_router(debates_router, prefix="/api/debate", tags=["debate"])
    app.include_router(vixra_router, prefix="/api/vixra", tags=["vixra"])
    app.include_router(auth_router, prefix="/api/auth", tags=["auth"])
    app.include_router(billing_router, prefix="/api/stripe", tags=["billing"])

    return app


# Application instance for uvicorn
app = create_app()
