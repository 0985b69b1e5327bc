"""Per-user refinement session.

Holds everything one browser session edits: the uploaded PDFs, the draft
sentence, the optional instruction, and the outcome of the latest request.
A session is disposable; ``reset`` returns it to a clean idle state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from scholar_refine.intake.file_intake import DocumentList
from scholar_refine.models.refinement import RefinementResult
from scholar_refine.pipeline.refinement_request import RefinementError, RefinementRequester

logger = logging.getLogger(__name__)


class SessionStatus(str, Enum):
    IDLE = "idle"
    REQUESTING = "requesting"
    SUCCESS = "success"
    ERROR = "error"


@dataclass
class RefinementSession:
    documents: DocumentList = field(default_factory=DocumentList)
    draft: str = ""
    instruction: str = ""
    status: SessionStatus = SessionStatus.IDLE
    result: RefinementResult | None = None
    error: RefinementError | None = None
    last_refined_input: str = ""

    @property
    def can_refine(self) -> bool:
        return (
            bool(self.documents)
            and bool(self.draft.strip())
            and self.status is not SessionStatus.REQUESTING
        )

    @property
    def error_message(self) -> str | None:
        return self.error.message if self.error is not None else None

    def begin_request(self) -> None:
        """Enter ``requesting``; any previous result or error is cleared."""
        if not self.can_refine:
            raise RuntimeError("Cannot start a refinement: add a PDF and a sentence first")
        self.status = SessionStatus.REQUESTING
        self.result = None
        self.error = None

    def complete(self, result: RefinementResult, refined_input: str) -> None:
        self.status = SessionStatus.SUCCESS
        self.result = result
        self.last_refined_input = refined_input

    def fail(self, error: RefinementError) -> None:
        self.status = SessionStatus.ERROR
        self.error = error

    async def run(self, requester: RefinementRequester) -> None:
        """Run one refinement with the current inputs and record the outcome."""
        self.begin_request()
        sentence = self.draft
        try:
            result = await requester.refine(
                list(self.documents), sentence, self.instruction or None
            )
        except RefinementError as e:
            logger.info("Session request ended in error (kind=%s)", e.kind.value)
            self.fail(e)
            return
        except BaseException:
            # Cancelled or crashed mid-flight: leave no stale requesting state.
            self.status = SessionStatus.IDLE
            raise
        self.complete(result, sentence)

    def dismiss_error(self) -> None:
        if self.status is SessionStatus.ERROR:
            self.status = SessionStatus.IDLE
        self.error = None

    def reset(self) -> None:
        self.documents.clear()
        self.draft = ""
        self.instruction = ""
        self.status = SessionStatus.IDLE
        self.result = None
        self.error = None
        self.last_refined_input = ""
