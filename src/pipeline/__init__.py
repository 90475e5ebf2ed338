"""Pipeline package - Orchestration of template loading, scaling and rendering."""

from src.pipeline.processor import FillPipeline, FillResult

__all__ = [
    "FillPipeline",
    "FillResult",
]
