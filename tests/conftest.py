"""Shared test fixtures."""

from __future__ import annotations

import json
from dataclasses import dataclass
from unittest.mock import AsyncMock

import pytest

from scholar_refine.clients.llm_client import LLMClient, LLMResponse
from scholar_refine.models.document import Document
from scholar_refine.models.refinement import RefinementResult


@dataclass
class FakeUpload:
    """Stand-in for Streamlit's UploadedFile."""

    name: str
    type: str
    content: bytes = b"%PDF-1.4 fake"

    def getvalue(self) -> bytes:
        return self.content


@pytest.fixture
def pdf_document() -> Document:
    return Document(name="paper.pdf", media_type="application/pdf", data=b"%PDF-1.4 paper")


@pytest.fixture
def sample_segments() -> list[dict]:
    return [
        {"text": "Domestic cats ", "type": "style", "explanation": "More precise subject"},
        {"text": "are mammals", "type": "original"},
        {
            "text": " of the family Felidae",
            "type": "source",
            "originalSource": "Felis catus is a member of the family Felidae.",
            "explanation": "Added classification from the paper",
        },
        {"text": ".", "type": "original"},
    ]


@pytest.fixture
def sample_result(sample_segments) -> RefinementResult:
    return RefinementResult.model_validate({"segments": sample_segments})


@pytest.fixture
def mock_llm_client(sample_segments) -> LLMClient:
    """Create a mock LLM client returning a valid segments body."""
    client = AsyncMock(spec=LLMClient)
    client.generate_structured = AsyncMock(
        return_value=LLMResponse(
            text=json.dumps({"segments": sample_segments}),
            input_tokens=1200,
            output_tokens=150,
        )
    )
    return client


@pytest.fixture
def make_upload():
    """Factory for fake uploads: make_upload("a.pdf", "application/pdf")."""
    return FakeUpload
