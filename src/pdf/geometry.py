"""Coordinate scaling from template pixel space to PDF page space.

Field boxes arrive in the pixel grid of the raster the detection stage looked
at (origin top-left, y grows downward). Text is drawn in page space (origin
bottom-left, y grows upward, units are points). This module is the only place
that converts between the two.
"""

import math
from dataclasses import dataclass
from typing import Any

from src.config import get_settings


@dataclass(frozen=True)
class Extent:
    """Width and height of a coordinate space."""

    width: float
    height: float


@dataclass(frozen=True)
class BoundingBox:
    """Field region in source pixel space (top-left origin)."""

    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class FormField:
    """A detected form region and the value to render into it.

    Attributes:
        name: Unique key of the field
        label: Human-readable label, drawn when value is empty
        bbox: Region in source pixel space
        value: Text to render (may be empty)
    """

    name: str
    label: str
    bbox: BoundingBox
    value: str = ""

    @property
    def display_text(self) -> str:
        return self.value or self.label


@dataclass(frozen=True)
class DrawPosition:
    """Text origin in page space (bottom-left origin) plus wrap width."""

    x: float
    y: float
    max_width: float

    @property
    def is_valid(self) -> bool:
        """True when the position can actually be drawn."""
        return math.isfinite(self.x) and math.isfinite(self.y)


def to_number(value: Any) -> float:
    """Coerce an upstream coordinate to float, NaN when it is not numeric.

    Detection output is not trusted to be well-typed; a bad coordinate must
    turn into an unusable position rather than a rejected request.
    """
    if isinstance(value, bool) or value is None:
        return math.nan
    if isinstance(value, (int, float)):
        try:
            return float(value)
        except OverflowError:
            # Integers beyond float range
            return math.inf if value > 0 else -math.inf
    if isinstance(value, str):
        try:
            return float(value.strip())
        except ValueError:
            return math.nan
    return math.nan


def _ratio(numerator: float, denominator: float) -> float:
    # IEEE-754 division: x/0 is +-inf, 0/0 is nan
    if denominator == 0:
        if numerator == 0 or math.isnan(numerator):
            return math.nan
        return math.copysign(math.inf, numerator) * math.copysign(1.0, denominator)
    return numerator / denominator


def scale_factors(source: Extent, page: Extent) -> tuple[float, float]:
    """Return (scale_x, scale_y) mapping source pixels to page points."""
    return _ratio(page.width, source.width), _ratio(page.height, source.height)


def scale_field(
    bbox: BoundingBox,
    source: Extent,
    page: Extent,
    padding: float | None = None,
    text_inset: float | None = None,
) -> DrawPosition:
    """Map a bounding box to a text draw position on the page.

    The x axis keeps its left origin and only scales. The y axis is flipped
    so the baseline sits ``text_inset`` points below the top edge of the box.

    Args:
        bbox: Field region in source pixel space
        source: Extent the bbox was measured in
        page: Extent of the output page in points
        padding: Left inset in points (defaults to settings.text_padding)
        text_inset: Baseline offset below the box top (defaults to settings.text_inset)

    Returns:
        DrawPosition, which may be invalid (non-finite) for unusable input
    """
    settings = get_settings()
    if padding is None:
        padding = settings.text_padding
    if text_inset is None:
        text_inset = settings.text_inset

    scale_x, scale_y = scale_factors(source, page)

    return DrawPosition(
        x=bbox.x * scale_x + padding,
        y=page.height - bbox.y * scale_y - text_inset,
        max_width=bbox.width * scale_x - 2 * padding,
    )
