import traceback

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.v1.router import api_router
from app.core.config import settings
from app.core.logging import logger


def create_application() -> FastAPI:
    """Create and configure the FastAPI application."""
    application = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.VERSION,
        description=settings.DESCRIPTION,
        openapi_url=f"{settings.API_V1_STR}/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        debug=settings.DEBUG,
    )

    # Set up CORS middleware
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include API router
    application.include_router(api_router, prefix=settings.API_V1_STR)

    # Register exception handlers
    register_exception_handlers(application)

    return application


def register_exception_handlers(app: FastAPI) -> None:
    """Register custom exception handlers."""

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Global exception handler - logs details to console."""

        # Always log to console
        logger.error(f"Exception: {exc.__class__.__name__}: {exc}")

        if settings.DEBUG:
            logger.error(
                f"Request: {request.method} {request.url}\n"
                f"   Path Params: {request.path_params}\n"
                f"   Query Params: {dict(request.query_params)}\n"
                f"   Client: {request.client.host if request.client else 'unknown'}\n"
                f"   Traceback:\n{traceback.format_exc()}"
            )

        # Clean response to client
        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "error": "Internal server error",
                "message": str(exc) if settings.DEBUG else "An unexpected error occurred",
            },
        )


app = create_application()


@app.on_event("startup")
async def startup_event():
    """Create tables and log startup information."""
    # Import models so they register with Base.metadata
    import app.models  # noqa: F401
    from app.core.database import engine, Base

    async with engine.begin() as conn:
        try:
            await conn.run_sync(Base.metadata.create_all)
        except Exception as e:
            # Ignore "already exists" errors (e.g. ENUM types on restart)
            if "already exists" in str(e):
                logger.warning(f"Some DB objects already exist (safe to ignore): {e}")
            else:
                raise

    logger.info(f"Starting {settings.PROJECT_NAME} v{settings.VERSION} for {settings.COURSE_NAME}")
    logger.info("Documentation: http://127.0.0.1:8000/docs")
    logger.info(
        f"Answer thresholds: query>={settings.MATCH_THRESHOLD_QUERY}, "
        f"term>={settings.MATCH_THRESHOLD_TERM}; AI platform: {settings.DEFAULT_LLM_PLATFORM}"
    )
    if settings.DEBUG:
        logger.warning("DEBUG mode is ON - detailed errors will be logged to console")


@app.get("/", tags=["Health"])
async def root():
    """Root endpoint - health check."""
    return {
        "message": f"Welcome to the {settings.COURSE_NAME} Course Assistant API",
        "version": settings.VERSION,
        "docs": "/docs",
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
