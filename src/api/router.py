"""API router - FastAPI endpoints."""

from fastapi import APIRouter
from fastapi.responses import Response

from src import __version__
from src.api.models import ErrorResponse, FillPdfRequest, FillPdfResponse, HealthResponse
from src.config import get_settings
from src.pipeline.processor import FillPipeline, FillResult
from src.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["Template Filling"])

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Malformed template encoding"},
    422: {"model": ErrorResponse, "description": "Invalid request or unreadable template"},
    500: {"model": ErrorResponse, "description": "Rendering error"},
}


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health Check",
    description="Check if the API is healthy and running",
)
async def health_check() -> HealthResponse:
    """Health check endpoint."""
    settings = get_settings()
    return HealthResponse(
        status="healthy",
        version=__version__,
        environment=settings.environment.value,
    )


def _fill(request: FillPdfRequest) -> FillResult:
    image_width, image_height = request.claimed_extent()
    logger.info(
        "Fill request received",
        payload_length=len(request.template_base64),
        field_count=len(request.fields),
        image_width=image_width,
        image_height=image_height,
    )

    return FillPipeline().process(
        template_base64=request.template_base64,
        fields=request.to_fields(),
        image_width=image_width,
        image_height=image_height,
    )


# Plain ``def`` handlers: decoding and rendering are CPU-bound, so FastAPI
# runs them in its threadpool.
@router.post(
    "/fill-pdf",
    response_model=FillPdfResponse,
    responses=_ERROR_RESPONSES,
    summary="Fill Template",
    description="""
    Render field values onto a form template and return a single-page PDF.

    **Template formats:** PDF, JPEG, PNG (base64, data URLs accepted).

    Field boxes are in the template raster's pixel space. For image
    templates the decoded pixel size replaces `imageWidth`/`imageHeight`.
    If no field box can be placed, all fields are listed as
    "label: value" lines at the top of the page instead.
    """,
)
def fill_pdf(request: FillPdfRequest) -> FillPdfResponse:
    """Fill a template and return the PDF as base64 JSON."""
    result = _fill(request)
    return FillPdfResponse.from_fill_result(result)


@router.post(
    "/fill-pdf/download",
    responses={
        200: {
            "content": {"application/pdf": {}},
            "description": "Filled PDF file download",
        },
        **_ERROR_RESPONSES,
    },
    summary="Fill Template and Download PDF",
    description="Same as /fill-pdf but returns the PDF as a downloadable file.",
)
def fill_pdf_download(request: FillPdfRequest) -> Response:
    """Fill a template and return the PDF as an attachment."""
    result = _fill(request)

    return Response(
        content=result.pdf_bytes,
        media_type="application/pdf",
        headers={
            "Content-Disposition": 'attachment; filename="filled_form.pdf"',
            "X-Render-Mode": result.mode.value,
            "X-Field-Count": str(result.field_count),
            "X-Processing-Time-Ms": str(result.processing_time_ms),
        },
    )
