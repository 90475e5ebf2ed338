"""PDF processing package - Template loading, coordinate scaling and text overlay."""

from src.pdf.geometry import BoundingBox, DrawPosition, Extent, FormField, scale_field
from src.pdf.overlay import FieldRenderError, RenderMode, RenderResult, render_fields
from src.pdf.template import (
    BadTemplateError,
    LoadedTemplate,
    TemplateEncodingError,
    TemplateError,
    decode_template_payload,
    load_template,
)

__all__ = [
    "BadTemplateError",
    "BoundingBox",
    "DrawPosition",
    "Extent",
    "FieldRenderError",
    "FormField",
    "LoadedTemplate",
    "RenderMode",
    "RenderResult",
    "TemplateEncodingError",
    "TemplateError",
    "decode_template_payload",
    "load_template",
    "render_fields",
    "scale_field",
]
