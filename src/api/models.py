"""API request and response models."""

import base64
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from src.pdf.geometry import BoundingBox, FormField, to_number


class BoundingBoxModel(BaseModel):
    """Field region in template pixels.

    Coordinates are accepted as sent by the detection stage. Anything that
    is not a number becomes NaN during conversion, which marks the field's
    position as unusable instead of failing the request.
    """

    x: Any = None
    y: Any = None
    width: Any = None
    height: Any = None

    def to_bbox(self) -> BoundingBox:
        return BoundingBox(
            x=to_number(self.x),
            y=to_number(self.y),
            width=to_number(self.width),
            height=to_number(self.height),
        )


class FieldModel(BaseModel):
    """A single form field with the value to render."""

    name: str
    label: str = ""
    bbox: BoundingBoxModel = Field(default_factory=BoundingBoxModel)
    value: str | None = ""

    def to_field(self) -> FormField:
        return FormField(
            name=self.name,
            label=self.label,
            bbox=self.bbox.to_bbox(),
            value=self.value or "",
        )


class FillPdfRequest(BaseModel):
    """Request body for filling a template."""

    model_config = ConfigDict(populate_by_name=True)

    template_base64: str = Field(
        alias="templateBase64",
        description="Base64 of the JPEG, PNG or PDF template",
    )
    image_width: Any = Field(
        default=None,
        alias="imageWidth",
        description="Claimed width of the raster the boxes were measured on",
    )
    image_height: Any = Field(
        default=None,
        alias="imageHeight",
        description="Claimed height of the raster the boxes were measured on",
    )
    fields: list[FieldModel] = Field(default_factory=list)

    def claimed_extent(self) -> tuple[float, float]:
        """Claimed raster size, NaN for anything that is not a number."""
        return to_number(self.image_width), to_number(self.image_height)

    def to_fields(self) -> list[FormField]:
        return [f.to_field() for f in self.fields]


class FillPdfResponse(BaseModel):
    """Response with the filled PDF."""

    model_config = ConfigDict(populate_by_name=True)

    pdf_base64: str = Field(
        alias="pdfBase64",
        description="Filled single-page PDF as base64-encoded string",
    )

    @classmethod
    def from_fill_result(cls, result) -> "FillPdfResponse":
        """Create response from FillResult.

        Args:
            result: FillResult from pipeline

        Returns:
            FillPdfResponse instance
        """
        return cls(pdf_base64=base64.b64encode(result.pdf_bytes).decode("utf-8"))


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "healthy"
    version: str
    environment: str


class ErrorResponse(BaseModel):
    """Error response model."""

    error: str
