"""Template Filler - renders form field values onto scanned form templates."""

__version__ = "0.1.0"
