"""Pytest configuration and fixtures."""

import pytest
from fastapi.testclient import TestClient

from src.main import app
from tests.helpers import make_image_bytes, make_pdf_bytes


@pytest.fixture
def client():
    """Create a test client for the FastAPI app."""
    return TestClient(app)


@pytest.fixture
def form_png_bytes():
    """A 1000x1400 PNG form scan."""
    return make_image_bytes(1000, 1400, "PNG")


@pytest.fixture
def form_jpeg_bytes():
    """A 1000x1400 JPEG form scan."""
    return make_image_bytes(1000, 1400, "JPEG")


@pytest.fixture
def letter_pdf_bytes():
    """A blank single-page US Letter PDF."""
    return make_pdf_bytes((612, 792))


@pytest.fixture
def rahul_field_payload():
    """The name field from a detected 1000x1400 form."""
    return {
        "name": "full_name",
        "label": "Full Name",
        "bbox": {"x": 100, "y": 200, "width": 300, "height": 40},
        "value": "Rahul",
    }
