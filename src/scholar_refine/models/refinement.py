"""Pydantic models for a segmented sentence refinement."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class SegmentType(str, Enum):
    ORIGINAL = "original"  # carried over from the draft
    STYLE = "style"        # wording, grammar, tone
    SOURCE = "source"      # fact added or corrected from an attachment


class RefinementSegment(BaseModel):
    """A contiguous span of the refined sentence tagged with its provenance."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    text: str
    type: SegmentType
    original_source: str | None = Field(default=None, alias="originalSource")
    explanation: str | None = None


class RefinementResult(BaseModel):
    """Ordered segments; concatenated they form the refined sentence."""

    model_config = ConfigDict(frozen=True)

    segments: list[RefinementSegment]

    @property
    def full_text(self) -> str:
        return "".join(s.text for s in self.segments)

    @property
    def notable_segments(self) -> list[tuple[int, RefinementSegment]]:
        """(position, segment) pairs for every segment that is not ``original``."""
        return [
            (i, s) for i, s in enumerate(self.segments)
            if s.type is not SegmentType.ORIGINAL
        ]
