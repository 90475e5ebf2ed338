"""Pipeline processor - Orchestrates template loading → scaling → rendering."""

import math
import time
from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from src.pdf.geometry import Extent, FormField, scale_field
from src.pdf.overlay import RenderMode, render_fields
from src.pdf.template import decode_template_payload, load_template
from src.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class FillResult:
    """Result from filling a template.

    Attributes:
        pdf_bytes: The finished single-page PDF
        mode: Layout used for the page
        template_kind: "pdf", "jpeg" or "png"
        source_extent: Extent the field boxes were interpreted in
        page_extent: Output page size in points
        field_count: Number of fields received
        drawn_count: Number of fields that produced text
        processing_time_ms: Total processing time in milliseconds
    """

    pdf_bytes: bytes
    mode: RenderMode
    template_kind: str
    source_extent: Extent
    page_extent: Extent
    field_count: int = 0
    drawn_count: int = 0
    processing_time_ms: int = 0
    metadata: dict[str, Any] = field(default_factory=dict)


def _claimed_extent(width: float | None, height: float | None) -> Extent:
    return Extent(
        width=math.nan if width is None else float(width),
        height=math.nan if height is None else float(height),
    )


class FillPipeline:
    """Fills a form template with field values.

    Usage:
        pipeline = FillPipeline()
        result = pipeline.process(
            template_base64=b64_png,
            fields=fields,
            image_width=1000,
            image_height=1400,
        )

    The pipeline:
    1. Decodes and loads the template as a one-page document
    2. Resolves the extent the field boxes were measured in
    3. Scales every field box to page space
    4. Draws the fields and serializes the PDF

    Each call is independent; nothing is cached between calls.
    """

    def process(
        self,
        template_base64: str,
        fields: Sequence[FormField],
        image_width: float | None = None,
        image_height: float | None = None,
    ) -> FillResult:
        """Run one fill request.

        Args:
            template_base64: Base64 of the PDF, JPEG or PNG template
            fields: Fields in caller order
            image_width: Caller's claimed source width in pixels
            image_height: Caller's claimed source height in pixels

        Returns:
            FillResult with the serialized PDF

        Raises:
            TemplateEncodingError: If the payload is not valid base64
            BadTemplateError: If the template cannot be opened
            FieldRenderError: If the PDF cannot be produced
        """
        start_time = time.time()

        raw = decode_template_payload(template_base64)
        template = load_template(raw)

        # Decoded image size wins over the caller's claim; PDFs have no
        # pixel grid of their own, so the claim is all there is.
        if template.source_extent is not None:
            source = template.source_extent
            if (image_width, image_height) != (source.width, source.height):
                logger.debug(
                    "Overriding claimed image size with decoded size",
                    claimed_width=image_width,
                    claimed_height=image_height,
                    width=source.width,
                    height=source.height,
                )
        else:
            source = _claimed_extent(image_width, image_height)

        page = template.page_extent
        positions = [scale_field(f.bbox, source, page) for f in fields]

        for f, position in zip(fields, positions):
            logger.debug(
                f"Field {f.name} geometry",
                bbox=(f.bbox.x, f.bbox.y, f.bbox.width, f.bbox.height),
                x=position.x,
                y=position.y,
            )

        rendered = render_fields(template, fields, positions)

        processing_time_ms = int((time.time() - start_time) * 1000)

        logger.info(
            "Template filled",
            template_kind=template.kind,
            mode=rendered.mode.value,
            field_count=len(fields),
            drawn_count=rendered.drawn_count,
            processing_time_ms=processing_time_ms,
        )

        return FillResult(
            pdf_bytes=rendered.pdf_bytes,
            mode=rendered.mode,
            template_kind=template.kind,
            source_extent=source,
            page_extent=page,
            field_count=len(fields),
            drawn_count=rendered.drawn_count,
            processing_time_ms=processing_time_ms,
            metadata={"skipped_count": rendered.skipped_count},
        )
