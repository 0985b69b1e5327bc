"""Render a RefinementResult as a highlighted sentence plus change details."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from jinja2 import Environment, FileSystemLoader

from scholar_refine.models.refinement import RefinementResult, SegmentType

TEMPLATE_DIR = Path(__file__).parent / "templates"

EMPTY_STATE_MESSAGE = "No significant changes were made to the sentence."

CATEGORIES: dict[SegmentType, str] = {
    SegmentType.ORIGINAL: "unchanged",
    SegmentType.STYLE: "stylistic",
    SegmentType.SOURCE: "source-backed",
}

DETAIL_LABELS: dict[SegmentType, str] = {
    SegmentType.STYLE: "Stylistic",
    SegmentType.SOURCE: "Based on PDF",
}


@dataclass(frozen=True)
class SegmentView:
    index: int
    text: str
    type: SegmentType
    active: bool = False

    @property
    def category(self) -> str:
        return CATEGORIES[self.type]

    @property
    def css_class(self) -> str:
        return f"seg seg-{self.category}"

    @property
    def hoverable(self) -> bool:
        return self.type is not SegmentType.ORIGINAL


@dataclass(frozen=True)
class DetailView:
    """One entry in the change list. Only built for non-original segments."""

    index: int
    text: str
    type: SegmentType
    explanation: str | None = None
    source_quote: str | None = None
    active: bool = False

    @property
    def label(self) -> str:
        return DETAIL_LABELS[self.type]

    @property
    def category(self) -> str:
        return CATEGORIES[self.type]


@dataclass(frozen=True)
class ResultView:
    sentence: list[SegmentView]
    details: list[DetailView]

    @property
    def full_text(self) -> str:
        return "".join(s.text for s in self.sentence)

    @property
    def is_empty(self) -> bool:
        return not self.details

    @property
    def change_count_label(self) -> str:
        n = len(self.details)
        return f"{n} {'mod' if n == 1 else 'mods'}"


def build_result_view(result: RefinementResult, active_index: int | None = None) -> ResultView:
    """Build the inline sentence and the detail list for ``result``.

    Segments are matched between the two views by position, so repeated
    text stays distinguishable. ``active_index`` marks the same position
    active in both views.
    """
    sentence = [
        SegmentView(index=i, text=s.text, type=s.type, active=i == active_index)
        for i, s in enumerate(result.segments)
    ]
    details = [
        DetailView(
            index=i,
            text=s.text,
            type=s.type,
            explanation=s.explanation or None,
            source_quote=(s.original_source or None) if s.type is SegmentType.SOURCE else None,
            active=i == active_index,
        )
        for i, s in result.notable_segments
    ]
    return ResultView(sentence=sentence, details=details)


def render_result_html(
    result: RefinementResult,
    original_text: str = "",
    active_index: int | None = None,
) -> str:
    """Render the result panel as a self-contained HTML fragment."""
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATE_DIR)),
        autoescape=True,
    )
    template = env.get_template("result_panel.html")
    return template.render(
        view=build_result_view(result, active_index),
        original_text=original_text,
        empty_message=EMPTY_STATE_MESSAGE,
    )
