"""PDF text overlay for scanned form templates.

This module uses PyMuPDF (fitz) to draw field values onto a loaded template
page. Positions come from ``src.pdf.geometry`` in page space with a
bottom-left origin; fitz measures y from the top, so the flip to fitz
coordinates happens at the draw call and nowhere else.
"""

import io
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum

import fitz  # PyMuPDF

from src.config import get_settings
from src.pdf.geometry import DrawPosition, FormField
from src.pdf.template import LoadedTemplate
from src.utils.logging import get_logger

logger = get_logger(__name__)


class RenderMode(str, Enum):
    """How field text was laid out on the page."""

    POSITIONED = "positioned"
    FALLBACK_LIST = "fallback_list"


@dataclass
class RenderResult:
    """Serialized output of a render call.

    Attributes:
        pdf_bytes: The finished single-page PDF
        mode: Layout used for the whole page
        drawn_count: Fields that produced text on the page
        skipped_count: Fields dropped because their position was unusable
    """

    pdf_bytes: bytes
    mode: RenderMode
    drawn_count: int
    skipped_count: int = 0


class FieldRenderError(Exception):
    """Exception raised when the filled document cannot be produced."""

    pass


def wrap_text(text: str, max_width: float, font_name: str, font_size: float) -> list[str]:
    """Split text into lines no wider than ``max_width`` where possible.

    Breaks on whitespace; a single word wider than the limit gets its own
    line rather than being cut. Explicit newlines are kept. A non-positive or
    non-finite width disables wrapping.

    Args:
        text: Text to wrap
        max_width: Maximum line width in points
        font_name: fitz font name used for measuring
        font_size: Font size in points

    Returns:
        List of lines
    """
    if not (0 < max_width < float("inf")):
        return text.splitlines() or [text]

    lines: list[str] = []
    for paragraph in text.splitlines() or [text]:
        current = ""
        for word in paragraph.split():
            candidate = f"{current} {word}" if current else word
            if fitz.get_text_length(candidate, fontname=font_name, fontsize=font_size) <= max_width:
                current = candidate
                continue
            if current:
                lines.append(current)
            current = word
        lines.append(current)
    return lines


def missing_glyphs(text: str, font_name: str) -> set[str]:
    """Return the characters of ``text`` the font cannot draw.

    Base-14 fonts such as "helv" only cover Latin, Greek and Cyrillic, so
    Devanagari and other scripts come out blank on the page.
    """
    font = fitz.Font(font_name)
    return {c for c in text if not c.isspace() and not font.has_glyph(ord(c))}


def _warn_missing_glyphs(field: FormField, text: str, font_name: str) -> None:
    missing = missing_glyphs(text, font_name)
    if missing:
        # Count only; the characters themselves are user data
        logger.warning(
            f"Font cannot draw all characters of field {field.name}",
            font=font_name,
            missing_count=len(missing),
        )


def _draw_line(
    page: fitz.Page,
    x: float,
    y: float,
    text: str,
    font_name: str,
    font_size: float,
    font_color: tuple[float, float, float],
) -> None:
    # y is a bottom-origin baseline; fitz wants a top-origin baseline
    point = fitz.Point(x, page.rect.height - y)
    page.insert_text(
        point,
        text,
        fontname=font_name,
        fontsize=font_size,
        color=font_color,
    )


def render_fields(
    template: LoadedTemplate,
    fields: Sequence[FormField],
    positions: Sequence[DrawPosition],
    font_name: str | None = None,
    font_size: float | None = None,
    font_color: tuple[float, float, float] = (0, 0, 0),  # Black
) -> RenderResult:
    """Draw field text onto the template page and serialize the document.

    If at least one position is valid, every valid field is drawn at its
    position and invalid ones are skipped. If none is valid, all bounding
    boxes are ignored and the fields are listed as "label: value" lines from
    the top of the page. The choice is made once for the whole page.

    The template document is closed before returning.

    Args:
        template: Loaded single-page template
        fields: Fields in caller order
        positions: One DrawPosition per field, same order
        font_name: fitz font name (defaults to settings.font_name)
        font_size: Font size in points (defaults to settings.font_size)
        font_color: RGB color tuple (0-1 range)

    Returns:
        RenderResult with the serialized PDF

    Raises:
        ValueError: If fields and positions differ in length
        FieldRenderError: If drawing or serialization fails
    """
    if len(fields) != len(positions):
        raise ValueError(
            f"Got {len(fields)} fields but {len(positions)} positions"
        )

    settings = get_settings()
    font_name = font_name or settings.font_name
    font_size = font_size or settings.font_size

    valid = [(f, p) for f, p in zip(fields, positions) if p.is_valid]
    page = template.page

    try:
        if valid:
            mode = RenderMode.POSITIONED
            drawn = _draw_positioned(page, valid, font_name, font_size, font_color)
            skipped = len(fields) - len(valid)
            if skipped:
                logger.debug("Skipped fields with unusable positions", skipped_count=skipped)
        else:
            mode = RenderMode.FALLBACK_LIST
            if fields:
                logger.warning("No usable field positions, using list layout", field_count=len(fields))
            drawn = _draw_fallback_list(page, fields, font_name, font_size, font_color)
            skipped = 0

        output = io.BytesIO()
        template.document.save(output, garbage=3, deflate=True)
    except Exception as e:
        logger.error("Field rendering failed", error_type=type(e).__name__)
        raise FieldRenderError(f"Failed to render fields: {e}") from e
    finally:
        template.close()

    logger.info(
        "Field rendering complete",
        mode=mode.value,
        drawn_count=drawn,
        field_count=len(fields),
    )
    return RenderResult(
        pdf_bytes=output.getvalue(),
        mode=mode,
        drawn_count=drawn,
        skipped_count=skipped,
    )


def _draw_positioned(
    page: fitz.Page,
    placements: list[tuple[FormField, DrawPosition]],
    font_name: str,
    font_size: float,
    font_color: tuple[float, float, float],
) -> int:
    line_height = get_settings().line_height
    drawn = 0

    for field, position in placements:
        text = field.display_text
        if not text:
            continue

        _warn_missing_glyphs(field, text, font_name)
        lines = wrap_text(text, position.max_width, font_name, font_size)
        for index, line in enumerate(lines):
            _draw_line(
                page,
                position.x,
                position.y - index * line_height,
                line,
                font_name,
                font_size,
                font_color,
            )
        drawn += 1

        logger.debug(
            f"Placed field {field.name}",
            x=round(position.x, 2),
            y=round(position.y, 2),
            max_width=round(position.max_width, 2),
            lines=len(lines),
        )

    return drawn


def _draw_fallback_list(
    page: fitz.Page,
    fields: Sequence[FormField],
    font_name: str,
    font_size: float,
    font_color: tuple[float, float, float],
) -> int:
    settings = get_settings()
    x = settings.fallback_left_margin
    cursor_y = page.rect.height - settings.fallback_top_margin

    for field in fields:
        line = f"{field.label}: {field.value or ''}"
        _warn_missing_glyphs(field, line, font_name)
        _draw_line(page, x, cursor_y, line, font_name, font_size, font_color)
        cursor_y -= settings.line_height

    return len(fields)
