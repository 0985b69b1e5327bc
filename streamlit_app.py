"""Streamlit Web UI for ScholarRefine.

Upload reference PDFs, paste a draft sentence, and get a refined sentence
with stylistic edits and PDF-backed edits highlighted separately.
"""

from __future__ import annotations

import asyncio
import logging
import os

logger = logging.getLogger(__name__)

import nest_asyncio
import streamlit as st
import streamlit.components.v1 as components
from dotenv import load_dotenv

load_dotenv()
nest_asyncio.apply()

# Streamlit Cloud: sync st.secrets → os.environ so the Anthropic client can read it
if "ANTHROPIC_API_KEY" not in os.environ:
    try:
        os.environ["ANTHROPIC_API_KEY"] = st.secrets["ANTHROPIC_API_KEY"]
    except (KeyError, FileNotFoundError):
        pass

from scholar_refine.clients.llm_client import LLMClient
from scholar_refine.config import load_config
from scholar_refine.logging.cost_calculator import format_usage
from scholar_refine.pipeline.refinement_request import RefinementRequester
from scholar_refine.render import build_result_view, render_result_html
from scholar_refine.session import RefinementSession, SessionStatus

# ---------------------------------------------------------------------------
# Page config
# ---------------------------------------------------------------------------

st.set_page_config(
    page_title="ScholarRefine",
    page_icon=":books:",
    layout="wide",
)

if "session" not in st.session_state:
    st.session_state.session = RefinementSession()
if "uploader_key" not in st.session_state:
    st.session_state.uploader_key = 0

session: RefinementSession = st.session_state.session

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _get_requester() -> tuple[RefinementRequester, LLMClient]:
    config = load_config()
    try:
        llm = LLMClient(timeout=config.llm.timeout)
    except Exception as e:
        raise RuntimeError(f"Could not start the LLM client. Check ANTHROPIC_API_KEY: {e}") from e
    requester = RefinementRequester(
        llm,
        model=config.llm.model,
        temperature=config.llm.temperature,
        max_tokens=config.llm.max_tokens,
        default_instruction=config.refine.default_instruction,
    )
    return requester, llm


def _panel_height(view) -> int:
    return 360 + 130 * len(view.details)


# ---------------------------------------------------------------------------
# Sidebar
# ---------------------------------------------------------------------------

with st.sidebar:
    st.title("ScholarRefine")
    st.caption("Refine a sentence against your reference papers")
    st.divider()
    if st.button("Start over", use_container_width=True):
        session.reset()
        for key in ("usage_caption", "draft", "instruction"):
            st.session_state.pop(key, None)
        st.session_state.uploader_key += 1
        st.rerun()

# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------

col_in, col_out = st.columns(2, gap="large")

with col_in:
    st.subheader("1. Upload Reference Papers")

    uploads = st.file_uploader(
        "Click to upload or drag and drop" if not session.documents else "Add more PDFs",
        accept_multiple_files=True,
        help="PDF files only",
        key=f"uploader_{st.session_state.uploader_key}",
    )
    if uploads:
        report = session.documents.add(uploads)
        if report.has_rejections:
            st.session_state["rejected_notice"] = report.rejected
        # Fresh uploader so the next drop appends instead of replacing
        st.session_state.uploader_key += 1
        st.rerun()

    rejected = st.session_state.pop("rejected_notice", None)
    if rejected:
        st.warning("Only PDF files are accepted. Skipped: " + ", ".join(rejected))

    for i, doc in enumerate(session.documents):
        name_col, rm_col = st.columns([6, 1])
        with name_col:
            st.markdown(f"**{doc.name}**  \n{doc.size / 1024 / 1024:.2f} MB")
        with rm_col:
            if st.button("✕", key=f"remove_{i}", help="Remove file"):
                session.documents.remove(i)
                st.rerun()

    st.subheader("2. Draft Sentence")
    session.draft = st.text_area(
        "Draft sentence",
        key="draft",
        height=130,
        placeholder="Paste the sentence you want to verify or refine...",
        label_visibility="collapsed",
    )

    st.subheader("3. Instructions (Optional)")
    session.instruction = st.text_input(
        "Instructions",
        key="instruction",
        placeholder="e.g., Check for factual errors, make it concise...",
        label_visibility="collapsed",
    )

    refine_clicked = st.button(
        "Refine Sentence",
        type="primary",
        disabled=not session.can_refine,
        use_container_width=True,
    )

    if refine_clicked:
        with st.spinner("Analyzing papers..."):
            try:
                requester, llm = _get_requester()
            except (ValueError, RuntimeError) as e:
                logger.exception("Could not set up the refinement request")
                st.error(str(e))
                st.stop()
            asyncio.run(session.run(requester))
            st.session_state["usage_caption"] = format_usage(llm.get_token_summary())

    if session.status is SessionStatus.ERROR:
        err_col, dismiss_col = st.columns([6, 1])
        with err_col:
            st.error(session.error_message)
        with dismiss_col:
            if st.button("Dismiss", key="dismiss_error"):
                session.dismiss_error()
                st.rerun()

# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------

with col_out:
    st.subheader("Refinement Result")

    if session.result is None:
        st.info(
            "Upload PDF(s) and enter your sentence. Stylistic changes are marked in "
            "green and PDF-backed corrections in orange."
        )
    else:
        view = build_result_view(session.result)
        components.html(
            render_result_html(session.result, original_text=session.last_refined_input),
            height=_panel_height(view),
            scrolling=True,
        )
        usage = st.session_state.get("usage_caption")
        if usage:
            st.caption(usage)
