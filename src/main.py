"""FastAPI application entry point."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from src import __version__
from src.api.router import router
from src.config import get_settings
from src.pdf.overlay import FieldRenderError
from src.pdf.template import BadTemplateError, TemplateEncodingError
from src.utils.logging import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    settings = get_settings()
    logger.info(
        "Starting Template Filler",
        version=__version__,
        environment=settings.environment.value,
    )

    yield

    logger.info("Shutting down Template Filler")


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def register_exception_handlers(app: FastAPI) -> None:
    """Translate failures into ``{"error": ...}`` bodies without internals."""

    @app.exception_handler(TemplateEncodingError)
    async def template_encoding_handler(request: Request, exc: TemplateEncodingError):
        logger.warning("Rejected template encoding", path=request.url.path, reason=exc.message, **exc.details)
        return _error(400, "Invalid template encoding")

    @app.exception_handler(BadTemplateError)
    async def bad_template_handler(request: Request, exc: BadTemplateError):
        logger.warning(
            "Rejected unreadable template",
            path=request.url.path,
            kind=exc.kind,
            size_bytes=exc.details.get("size_bytes"),
        )
        return _error(422, "Unsupported or corrupt template")

    @app.exception_handler(FieldRenderError)
    async def render_error_handler(request: Request, exc: FieldRenderError):
        logger.error("Rendering failed", path=request.url.path)
        return _error(500, "Failed to fill PDF")

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        locations = [".".join(str(part) for part in err.get("loc", ())) for err in exc.errors()]
        logger.warning("Invalid request payload", path=request.url.path, locations=locations)
        return _error(422, "Invalid request payload")

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception("Unexpected error", path=request.url.path)
        return _error(500, "Failed to fill PDF")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance
    """
    settings = get_settings()

    app = FastAPI(
        title="Template Filler",
        description="""
        Renders form field values onto scanned form templates.

        ## Features

        - **Template formats**: PDF, JPEG, PNG
        - **Coordinate scaling**: field boxes measured on a raster are mapped onto the PDF page
        - **List fallback**: when no box can be placed, fields are listed at the top of the page
        - **PII-safe logging**: field values never reach the logs
        """,
        version=__version__,
        lifespan=lifespan,
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if not settings.is_production else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)
    app.include_router(router)

    @app.get("/", include_in_schema=False)
    async def root():
        return {
            "message": "Template Filler API",
            "version": __version__,
            "docs": "/docs",
            "health": "/api/health",
        }

    return app


# Create app instance
app = create_app()
