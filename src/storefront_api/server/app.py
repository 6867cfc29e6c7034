"""FastAPI application setup and configuration."""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from storefront_api.config.settings import Settings, settings
from storefront_api.core.errors import RequestValidationFailed, StorefrontError
from storefront_api.core.logger import setup_logger
from storefront_api.core.monitoring import capture_exception
from storefront_api.core.validation import violations_from_errors
from storefront_api.db import get_engine, get_session_factory, init_db
from storefront_api.integrations.payment import PaymentGateway

logger = setup_logger(__name__)


def _init_monitoring(app_settings: Settings) -> None:
    """Initialize GlitchTip error monitoring (Sentry-compatible)."""
    try:
        import sentry_sdk
        from sentry_sdk.integrations.fastapi import FastApiIntegration
        from sentry_sdk.integrations.logging import LoggingIntegration

        sentry_sdk.init(
            dsn=app_settings.glitchtip_dsn,
            environment=app_settings.environment,
            integrations=[
                FastApiIntegration(transaction_style="endpoint"),
                LoggingIntegration(
                    level=None,  # Capture all log levels as breadcrumbs
                    event_level=logging.ERROR  # Send ERROR logs as events
                ),
            ],
            traces_sample_rate=0.1,
            profiles_sample_rate=0.0,
            send_default_pii=False,  # Customer names and emails stay out of events
        )
        logger.info("GlitchTip error monitoring initialized")
    except Exception as e:
        logger.error(f"Failed to initialize GlitchTip: {e}")


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(StorefrontError)
    async def storefront_error_handler(request: Request, exc: StorefrontError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(
                f"{request.method} {request.url.path} failed: {exc.message}", exc_info=exc
            )
            capture_exception(exc, context={"path": request.url.path, "method": request.method})
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        error = RequestValidationFailed(violations_from_errors(exc.errors()))
        logger.info(f"Rejected {request.method} {request.url.path}: {error.message}")
        return JSONResponse(status_code=error.status_code, content={"detail": error.message})

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        logger.error(f"Database error on {request.method} {request.url.path}: {exc}", exc_info=exc)
        capture_exception(exc, context={"path": request.url.path, "method": request.method})
        return JSONResponse(status_code=500, content={"detail": "Something went wrong"})


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        app_settings: Settings to run with (defaults to the environment)
    """
    app_settings = app_settings or settings

    app = FastAPI(
        title="Storefront API",
        version="1.0.0",
        description="Dual-channel order backend: in-store POS orders and online checkout",
    )
    app.state.settings = app_settings

    if app_settings.glitchtip_dsn:
        _init_monitoring(app_settings)

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_exception_handlers(app)

    # Import and include routers
    from storefront_api.server import admin_routes, cashier_routes, customer_routes, routes

    app.include_router(routes.router)
    app.include_router(admin_routes.router)
    app.include_router(cashier_routes.router)
    app.include_router(customer_routes.router)

    # Startup handler
    @app.on_event("startup")
    async def startup_handler():
        """Create the database engine, session factory and payment client."""
        logger.info("Starting application resources...")

        try:
            engine = get_engine(app_settings.database_url, echo=app_settings.database_echo)
            await init_db(engine)

            app.state.engine = engine
            app.state.session_factory = get_session_factory(engine)
            logger.info("Database initialized successfully")
        except Exception as e:
            logger.error(f"Failed to initialize database: {e}", exc_info=True)
            raise

        app.state.payment_gateway = PaymentGateway.from_settings(app_settings)
        logger.info(f"Payment gateway client ready ({app_settings.payment_base_url})")

        logger.info("Application startup completed")

    # Graceful shutdown handler
    @app.on_event("shutdown")
    async def shutdown_handler():
        """Close the payment client and database connections."""
        logger.info("Starting graceful shutdown...")

        gateway = getattr(app.state, "payment_gateway", None)
        if gateway:
            try:
                await gateway.close()
                logger.info("Payment gateway client closed")
            except Exception as e:
                logger.error(f"Error closing payment gateway client: {e}", exc_info=True)

        engine = getattr(app.state, "engine", None)
        if engine:
            logger.info("Closing database connections...")
            try:
                await engine.dispose()
                logger.info("Database connections closed successfully")
            except Exception as e:
                logger.error(f"Error closing database connections: {e}")

        logger.info("Graceful shutdown completed successfully")

    return app
