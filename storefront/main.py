from contextlib import asynccontextmanager
from typing import Optional
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storefront.api.routes import auth, cart, products, upload
from storefront.config import Settings, get_settings
from storefront.context import AppContext
from storefront.exceptions import StorefrontError
from storefront.middleware.timing import TimingMiddleware
from storefront.services.image_service import CloudinaryImageStore
from storefront.utils.logging_config import configure_logging

logger = logging.getLogger(__name__)


def _sanitize_error(error):
    """Convert error dict to JSON-serializable format"""
    if isinstance(error, dict):
        return {k: _sanitize_error(v) for k, v in error.items()}
    elif isinstance(error, (list, tuple)):
        return [_sanitize_error(item) for item in error]
    elif isinstance(error, bytes):
        return error.decode('utf-8', errors='replace')
    elif isinstance(error, (str, int, float, bool, type(None))):
        return error
    else:
        return str(error)


def register_exception_handlers(app: FastAPI, settings: Settings) -> None:

    @app.exception_handler(StorefrontError)
    async def storefront_exception_handler(request: Request, exc: StorefrontError):
        """Render domain errors as {success: false, errors}"""
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, "errors": exc.detail},
            headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle validation errors"""
        return JSONResponse(
            status_code=422,
            content={
                "success": False,
                "message": "Validation error",
                "error": {
                    "code": "VALIDATION_ERROR",
                    "details": _sanitize_error(exc.errors())
                }
            }
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Handle general exceptions"""
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "success": False,
                "message": "Internal server error",
                "error": {
                    "code": "SERVER_ERROR",
                    "details": str(exc) if settings.DEBUG else "An error occurred"
                }
            }
        )


def create_app(
    settings: Optional[Settings] = None,
    image_store: Optional[CloudinaryImageStore] = None
) -> FastAPI:
    settings = settings or get_settings()

    if not settings.DEBUG:
        configure_logging(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        context = AppContext.create(settings, image_store=image_store)
        context.init_db()
        app.state.context = context
        logger.info("%s started on %s", settings.APP_NAME, context.engine.url.render_as_string(hide_password=True))
        try:
            yield
        finally:
            context.close()
            logger.info("%s stopped", settings.APP_NAME)

    app = FastAPI(
        title=settings.APP_NAME,
        description="Storefront API: products, accounts and carts",
        version=settings.APP_VERSION,
        docs_url="/docs" if settings.DEBUG else None,
        redoc_url="/redoc" if settings.DEBUG else None,
        openapi_url="/openapi.json" if settings.DEBUG else None,
        lifespan=lifespan
    )

    app.add_middleware(TimingMiddleware)

    # CORS Middleware
    if settings.ENVIRONMENT == "production":
        origins = settings.allowed_origins
        if not origins:
            logger.warning("No ALLOWED_ORIGINS set in production!")
    else:
        # In development, allow all
        origins = ["*"]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Process-Time"],
    )

    register_exception_handlers(app, settings)

    app.include_router(products.router, tags=["Products"])
    app.include_router(auth.router, tags=["Authentication"])
    app.include_router(cart.router, tags=["Cart"])
    app.include_router(upload.router, tags=["Upload"])

    @app.get("/")
    def root():
        """Root endpoint"""
        return {
            "message": f"{settings.APP_NAME} is running",
            "version": settings.APP_VERSION
        }

    @app.get("/health")
    def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "service": settings.APP_NAME
        }

    return app


app = create_app()
