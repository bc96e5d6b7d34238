"""
FastAPI application factory.
Creates the app with CORS, service initialization, domain error mapping and
router registration. Swagger UI available at /docs, ReDoc at /redoc.
"""
import sys
from pathlib import Path
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Ensure src/ is on the path
_src_dir = str(Path(__file__).parent.parent)
if _src_dir not in sys.path:
    sys.path.insert(0, _src_dir)

from errors import (  # noqa: E402
    StitchbookError, ValidationError, LookupMiss, RecognitionError,
    ExportError, AuthorizationError, StorageError,
)
from utils.logger import get_logger  # noqa: E402

ERROR_STATUS = [
    (ValidationError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (RecognitionError, status.HTTP_422_UNPROCESSABLE_ENTITY),
    (LookupMiss, status.HTTP_404_NOT_FOUND),
    (AuthorizationError, status.HTTP_401_UNAUTHORIZED),
    (ExportError, status.HTTP_502_BAD_GATEWAY),
    (StorageError, status.HTTP_500_INTERNAL_SERVER_ERROR),
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown logic for the FastAPI app."""
    import config
    from api.auth.dependencies import build_services, init_services

    logger = get_logger()
    logger.info(f"Initializing Stitchbook API on port {config.API_PORT}", component="API")

    services = build_services()
    init_services(services)

    # Store on app state for route access
    for name, service in services.items():
        setattr(app.state, name, service)

    logger.info(f"Catalog loaded with {len(services['catalog'])} designs", component="API")
    if services["gate"].restore_session() is not None:
        logger.info("Admin mode still active from a previous run", component="API")
    logger.info(f"Swagger UI: http://localhost:{config.API_PORT}/docs", component="API")

    yield

    logger.info("Shutting down API server", component="API")


async def stitchbook_error_handler(request: Request, exc: StitchbookError):
    """Map domain errors to HTTP responses with the error message as detail."""
    code = status.HTTP_400_BAD_REQUEST
    for error_type, error_code in ERROR_STATUS:
        if isinstance(exc, error_type):
            code = error_code
            break

    body = {"detail": str(exc)}
    if isinstance(exc, ValidationError) and exc.field:
        body["field"] = exc.field
    if code >= 500:
        get_logger().error(f"{request.method} {request.url.path} failed: {exc}", component="API")
    return JSONResponse(status_code=code, content=body)


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    import config

    app = FastAPI(
        title="Stitchbook API",
        description=(
            "REST API for Stitchbook - design catalog, tag OCR, GST billing "
            "and bill export for a tailoring workshop.\n\n"
            "**Admin mode**: Use `/auth/login` with the shared passphrase to get a "
            "token, then pass it as `Authorization: Bearer <token>` header on "
            "admin endpoints."
        ),
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.API_CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["Content-Disposition"],
    )

    app.add_exception_handler(StitchbookError, stitchbook_error_handler)

    # Register routers
    from api.routes.auth_routes import router as auth_router
    from api.routes.design_routes import router as design_router
    from api.routes.billing_routes import router as billing_router
    from api.routes.health_routes import router as health_router

    app.include_router(auth_router, prefix="/auth", tags=["Access"])
    app.include_router(design_router, prefix="/designs", tags=["Designs"])
    app.include_router(billing_router, prefix="/billing", tags=["Billing"])
    app.include_router(health_router, prefix="/health", tags=["Health"])

    @app.get("/", tags=["Root"])
    async def root():
        """API root - points to docs."""
        return {
            "service": "Stitchbook API",
            "version": "1.0.0",
            "docs": "/docs",
            "redoc": "/redoc",
            "health": "/health",
        }

    return app
