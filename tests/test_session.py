"""Tests for the per-user refinement session state machine."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock

import pytest

from scholar_refine.clients.llm_client import LLMResponse
from scholar_refine.intake.file_intake import DocumentList
from scholar_refine.pipeline.refinement_request import (
    RefinementError,
    RefinementErrorKind,
    RefinementRequester,
)
from scholar_refine.session import RefinementSession, SessionStatus


@pytest.fixture
def ready_session(pdf_document) -> RefinementSession:
    return RefinementSession(documents=DocumentList([pdf_document]), draft="Cats are mammals.")


class TestCanRefine:
    def test_new_session_is_idle(self):
        session = RefinementSession()
        assert session.status is SessionStatus.IDLE
        assert session.result is None
        assert not session.can_refine

    def test_requires_documents(self):
        assert not RefinementSession(draft="Cats are mammals.").can_refine

    def test_requires_non_blank_draft(self, pdf_document):
        session = RefinementSession(documents=DocumentList([pdf_document]), draft="  \n ")
        assert not session.can_refine

    def test_ready(self, ready_session):
        assert ready_session.can_refine

    def test_disabled_while_requesting(self, ready_session):
        ready_session.begin_request()
        assert not ready_session.can_refine
        with pytest.raises(RuntimeError):
            ready_session.begin_request()


class TestTransitions:
    def test_begin_clears_previous_result_and_error(self, ready_session, sample_result):
        ready_session.complete(sample_result, "old")
        ready_session.error = RefinementError("x", RefinementErrorKind.PARSE)
        ready_session.begin_request()
        assert ready_session.status is SessionStatus.REQUESTING
        assert ready_session.result is None
        assert ready_session.error is None

    def test_begin_without_inputs_raises(self):
        with pytest.raises(RuntimeError):
            RefinementSession().begin_request()

    def test_fail_keeps_generic_message(self, ready_session):
        ready_session.begin_request()
        ready_session.fail(RefinementError("No response from the model", RefinementErrorKind.NO_RESPONSE))
        assert ready_session.status is SessionStatus.ERROR
        assert ready_session.error_message == "No response from the model"

    def test_dismiss_error(self, ready_session):
        ready_session.begin_request()
        ready_session.fail(RefinementError("boom", RefinementErrorKind.REQUEST))
        ready_session.dismiss_error()
        assert ready_session.status is SessionStatus.IDLE
        assert ready_session.error_message is None

    def test_reset(self, ready_session, sample_result):
        ready_session.instruction = "Be brief"
        ready_session.complete(sample_result, "Cats are mammals.")
        ready_session.reset()
        assert ready_session == RefinementSession(documents=ready_session.documents)
        assert len(ready_session.documents) == 0
        assert ready_session.draft == ""
        assert ready_session.last_refined_input == ""


class TestRun:
    async def test_success(self, ready_session, mock_llm_client, sample_result):
        await ready_session.run(RefinementRequester(mock_llm_client))
        assert ready_session.status is SessionStatus.SUCCESS
        assert ready_session.result == sample_result
        assert ready_session.last_refined_input == "Cats are mammals."
        assert ready_session.error is None

    async def test_uses_instruction_when_given(self, ready_session, mock_llm_client):
        requester = RefinementRequester(mock_llm_client, default_instruction="DEFAULT INSTRUCTION")

        await ready_session.run(requester)
        assert "DEFAULT INSTRUCTION" in mock_llm_client.generate_structured.call_args.args[0]

        ready_session.instruction = "Check the numbers"
        await ready_session.run(requester)
        prompt = mock_llm_client.generate_structured.call_args.args[0]
        assert "Check the numbers" in prompt
        assert "DEFAULT INSTRUCTION" not in prompt

    async def test_failure_records_error(self, ready_session, mock_llm_client):
        mock_llm_client.generate_structured.return_value = LLMResponse(
            text="", input_tokens=1, output_tokens=0
        )
        await ready_session.run(RefinementRequester(mock_llm_client))
        assert ready_session.status is SessionStatus.ERROR
        assert ready_session.result is None
        assert ready_session.error.kind is RefinementErrorKind.NO_RESPONSE
        assert ready_session.error_message

    async def test_failed_request_clears_prior_result(self, ready_session, mock_llm_client, sample_result):
        ready_session.complete(sample_result, "Cats are mammals.")
        mock_llm_client.generate_structured.return_value = LLMResponse(
            text="not json", input_tokens=1, output_tokens=1
        )
        await ready_session.run(RefinementRequester(mock_llm_client))
        assert ready_session.status is SessionStatus.ERROR
        assert ready_session.result is None

    async def test_new_result_replaces_old(self, ready_session, mock_llm_client, sample_result):
        ready_session.complete(sample_result, "old")
        mock_llm_client.generate_structured.return_value = LLMResponse(
            text='{"segments":[{"text":"Cats are mammals.","type":"original"}]}',
            input_tokens=1,
            output_tokens=1,
        )
        await ready_session.run(RefinementRequester(mock_llm_client))
        assert ready_session.result.full_text == "Cats are mammals."
        assert len(ready_session.result.segments) == 1

    async def test_cancelled_request_returns_to_idle(self, ready_session, mock_llm_client):
        started = asyncio.Event()

        async def _hang(*args, **kwargs):
            started.set()
            await asyncio.sleep(3600)

        mock_llm_client.generate_structured = AsyncMock(side_effect=_hang)
        task = asyncio.create_task(ready_session.run(RefinementRequester(mock_llm_client)))
        await started.wait()
        assert ready_session.status is SessionStatus.REQUESTING
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert ready_session.status is SessionStatus.IDLE
        assert ready_session.can_refine
