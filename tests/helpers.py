"""Shared builders and PDF inspection helpers for tests."""

import base64
import io

import fitz  # PyMuPDF
from PIL import Image


def make_image_bytes(width: int, height: int, fmt: str) -> bytes:
    """Render a blank white image of the given size and format."""
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color="white").save(buffer, format=fmt)
    return buffer.getvalue()


def make_pdf_bytes(*page_sizes: tuple[float, float]) -> bytes:
    """Create a blank PDF with one page per (width, height) pair."""
    doc = fitz.open()
    for width, height in page_sizes or ((612, 792),):
        doc.new_page(width=width, height=height)
    data = doc.tobytes()
    doc.close()
    return data


def b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def text_spans(pdf_bytes: bytes) -> list[tuple[str, float, float]]:
    """Return (text, x, y) for every text span on page 0.

    Coordinates are fitz baseline origins (top-left origin, y down).
    """
    doc = fitz.open(stream=pdf_bytes, filetype="pdf")
    try:
        spans = []
        for block in doc[0].get_text("dict")["blocks"]:
            if block.get("type") != 0:
                continue
            for line in block["lines"]:
                for span in line["spans"]:
                    x, y = span["origin"]
                    spans.append((span["text"], x, y))
        return spans
    finally:
        doc.close()


def page_info(pdf_bytes: bytes) -> tuple[int, float, float]:
    """Return (page_count, width, height of page 0)."""
    doc = fitz.open(stream=pdf_bytes, filetype="pdf")
    try:
        rect = doc[0].rect
        return doc.page_count, rect.width, rect.height
    finally:
        doc.close()
