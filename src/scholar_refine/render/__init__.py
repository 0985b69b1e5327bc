"""HTML rendering of refinement results."""
from scholar_refine.render.segment_renderer import (
    EMPTY_STATE_MESSAGE,
    build_result_view,
    render_result_html,
)

__all__ = ["EMPTY_STATE_MESSAGE", "build_result_view", "render_result_html"]
