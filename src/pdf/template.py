"""Template loading - turns an uploaded form into a one-page PDF document.

A template is either an existing PDF or a scanned raster image. Images are
wrapped in a fresh page sized one point per pixel, so field boxes measured on
the raster line up with page coordinates without further conversion.
"""

import base64
import binascii
import io
import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import fitz  # PyMuPDF
from PIL import Image

from src.config import get_settings
from src.pdf.geometry import Extent
from src.utils.logging import get_logger

logger = get_logger(__name__)

PDF_MAGIC = b"%PDF"

_DATA_URL_PREFIX = re.compile(r"^data:[\w.+/-]*;base64,", re.IGNORECASE)


class TemplateError(Exception):
    """Base exception for template decoding and loading failures."""

    def __init__(self, message: str, kind: str = "unknown", details: dict[str, Any] | None = None):
        self.message = message
        self.kind = kind
        self.details = details or {}
        super().__init__(f"[{kind}] {message}")


class TemplateEncodingError(TemplateError):
    """Raised when the template payload is not valid base64."""


class BadTemplateError(TemplateError):
    """Raised when the template is neither a readable PDF nor a JPEG/PNG image."""


@dataclass
class LoadedTemplate:
    """A template opened as a single-page document.

    Attributes:
        document: Open PyMuPDF document holding exactly one page
        page: The working page (page 0 of ``document``)
        kind: "pdf", "jpeg" or "png"
        source_extent: True pixel size of an image template, None for PDFs
        page_extent: Page size in points
    """

    document: fitz.Document
    page: fitz.Page
    kind: str
    source_extent: Extent | None
    page_extent: Extent

    def close(self) -> None:
        if not self.document.is_closed:
            self.document.close()


def decode_template_payload(template_base64: str, max_bytes: int | None = None) -> bytes:
    """Decode a base64 template, accepting an optional data URL prefix.

    Args:
        template_base64: Base64 text, optionally ``data:<mime>;base64,...``
        max_bytes: Reject decoded payloads larger than this (0/None disables)

    Returns:
        Raw template bytes

    Raises:
        TemplateEncodingError: If the text is empty, not base64 or too large
    """
    if max_bytes is None:
        max_bytes = get_settings().max_template_bytes

    text = (template_base64 or "").strip()
    text = _DATA_URL_PREFIX.sub("", text, count=1)
    # Line-wrapped base64 is still valid input
    text = re.sub(r"\s+", "", text)

    if not text:
        raise TemplateEncodingError("Empty template payload", kind="base64")

    try:
        raw = base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as e:
        raise TemplateEncodingError(
            f"Template is not valid base64: {e}",
            kind="base64",
            details={"payload_length": len(text)},
        ) from e

    if not raw:
        raise TemplateEncodingError("Template payload decoded to zero bytes", kind="base64")

    if max_bytes and len(raw) > max_bytes:
        raise TemplateEncodingError(
            "Template exceeds size limit",
            kind="base64",
            details={"size_bytes": len(raw), "max_bytes": max_bytes},
        )

    return raw


def detect_template_kind(raw: bytes) -> str:
    """Return "pdf" if the bytes start with the PDF marker, else "image"."""
    if raw.lstrip().startswith(PDF_MAGIC):
        return "pdf"
    return "image"


def load_template(raw: bytes) -> LoadedTemplate:
    """Open raw template bytes as a single-page document.

    Args:
        raw: Decoded template bytes (PDF, JPEG or PNG)

    Returns:
        LoadedTemplate ready for drawing

    Raises:
        BadTemplateError: If the bytes cannot be opened as the detected kind
    """
    if detect_template_kind(raw) == "pdf":
        return _load_pdf(raw)
    return _load_image(raw)


def _load_pdf(raw: bytes) -> LoadedTemplate:
    details = {"size_bytes": len(raw)}
    try:
        doc = fitz.open(stream=raw, filetype="pdf")
    except Exception as e:
        raise BadTemplateError(f"Could not parse PDF template: {e}", kind="pdf", details=details) from e

    try:
        if doc.needs_pass:
            raise BadTemplateError("PDF template is password protected", kind="pdf", details=details)

        page_count = doc.page_count
        if page_count < 1:
            raise BadTemplateError("PDF template has no pages", kind="pdf", details=details)

        if page_count > 1:
            logger.info("Dropping extra template pages", page_count=page_count)
            doc.select([0])

        page = doc[0]
    except BadTemplateError:
        doc.close()
        raise
    except Exception as e:
        doc.close()
        raise BadTemplateError(f"Could not read PDF template: {e}", kind="pdf", details=details) from e

    page_extent = Extent(width=page.rect.width, height=page.rect.height)

    logger.debug(
        "PDF template loaded",
        page_width=page_extent.width,
        page_height=page_extent.height,
    )

    return LoadedTemplate(
        document=doc,
        page=page,
        kind="pdf",
        source_extent=None,
        page_extent=page_extent,
    )


def _open_as(format_name: str) -> Callable[[bytes], Image.Image]:
    def opener(raw: bytes) -> Image.Image:
        image = Image.open(io.BytesIO(raw), formats=[format_name])
        # Force a full decode so truncated files fail here, not at embed time
        image.load()
        return image

    return opener


# Tried in order, first success wins
IMAGE_DECODERS: list[tuple[str, Callable[[bytes], Image.Image]]] = [
    ("jpeg", _open_as("JPEG")),
    ("png", _open_as("PNG")),
]


def decode_image(raw: bytes) -> tuple[str, Image.Image]:
    """Decode raster bytes with the first decoder that accepts them.

    Returns:
        Tuple of (kind, decoded image)

    Raises:
        BadTemplateError: If no decoder accepts the bytes
    """
    failures = {}
    for kind, decoder in IMAGE_DECODERS:
        try:
            return kind, decoder(raw)
        except (OSError, ValueError, SyntaxError, Image.DecompressionBombError) as e:
            failures[kind] = str(e)

    raise BadTemplateError(
        "Template is neither a PDF nor a decodable JPEG/PNG image",
        kind="image",
        details={"size_bytes": len(raw), "attempts": failures},
    )


def _load_image(raw: bytes) -> LoadedTemplate:
    kind, image = decode_image(raw)

    # The decoded pixel grid is what field boxes were measured against
    width, height = image.size
    image.close()

    extent = Extent(width=float(width), height=float(height))

    doc = fitz.open()
    page = doc.new_page(width=extent.width, height=extent.height)
    try:
        page.insert_image(page.rect, stream=raw)
    except Exception as e:
        doc.close()
        raise BadTemplateError(f"Could not embed {kind} template: {e}", kind=kind) from e

    logger.debug("Image template loaded", kind=kind, width=width, height=height)

    return LoadedTemplate(
        document=doc,
        page=page,
        kind=kind,
        source_extent=extent,
        page_extent=extent,
    )
