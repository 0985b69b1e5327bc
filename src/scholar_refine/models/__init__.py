"""Data models for sentence refinement."""

from scholar_refine.models.document import PDF_MEDIA_TYPE, Document
from scholar_refine.models.refinement import (
    RefinementResult,
    RefinementSegment,
    SegmentType,
)

__all__ = [
    "Document",
    "PDF_MEDIA_TYPE",
    "RefinementResult",
    "RefinementSegment",
    "SegmentType",
]
