"""Refinement request: PDFs + draft sentence in, tagged segments out."""

from __future__ import annotations

import asyncio
import base64
import logging
from collections.abc import Iterable
from enum import Enum

from pydantic import ValidationError

from scholar_refine.clients.llm_client import Attachment, LLMClient
from scholar_refine.config import DEFAULT_INSTRUCTION
from scholar_refine.models.document import Document
from scholar_refine.models.refinement import RefinementResult

logger = logging.getLogger(__name__)

GENERIC_FAILURE_MESSAGE = "An unknown error occurred"

SEGMENTS_SCHEMA: dict = {
    "type": "object",
    "properties": {
        "segments": {
            "type": "array",
            "description": (
                "The rewritten sentence broken down into sequential segments "
                "to support color-coding."
            ),
            "items": {
                "type": "object",
                "properties": {
                    "text": {
                        "type": "string",
                        "description": "The text content of this segment.",
                    },
                    "type": {
                        "type": "string",
                        "enum": ["original", "style", "source"],
                        "description": (
                            "original: unchanged text. style: changed for flow or "
                            "grammar. source: changed based on PDF content."
                        ),
                    },
                    "originalSource": {
                        "type": "string",
                        "description": (
                            "If type is 'source', the exact quote from the PDF used "
                            "as reference. Leave empty otherwise."
                        ),
                    },
                    "explanation": {
                        "type": "string",
                        "description": (
                            "Brief reason for the change (e.g. 'Corrected grammar', "
                            "'Added specific finding from PDF')."
                        ),
                    },
                },
                "required": ["text", "type"],
            },
        },
    },
    "required": ["segments"],
}

REFINE_PROMPT = """\
You are an expert academic editor.

Task:
1. Read the attached PDF(s).
2. Rewrite the User's Input Sentence to be academically rigorous.
3. You MUST output the result as a sequential list of text segments that reconstruct the full refined sentence.

Tagging Rules:
- If a part of the text is largely unchanged from the input (ignoring minor punctuation), tag it as "original".
- If you modify words solely for better flow, grammar, conciseness, or academic tone, tag it as "style".
- If you modify, add, or correct facts/claims based specifically on content found in the PDF, tag it as "source".

Constraint:
- The concatenation of all 'text' fields in the segments array must form the complete, readable rewritten sentence.
- For "source" tags, you MUST provide 'originalSource' (the verbatim quote from the PDF).

User Instruction: {instruction}

User Input Sentence: "{sentence}"
"""


class RefinementErrorKind(str, Enum):
    NO_RESPONSE = "no_response"
    PARSE = "parse"
    REQUEST = "request"


class RefinementError(RuntimeError):
    """A refinement request failed. ``kind`` is kept for logs, not for users."""

    def __init__(self, message: str, kind: RefinementErrorKind):
        super().__init__(message)
        self.message = message
        self.kind = kind


def encode_document(document: Document) -> Attachment:
    """Base64-encode a document for inline transport."""
    return Attachment(
        data=base64.b64encode(document.data).decode("ascii"),
        media_type=document.media_type,
    )


def build_prompt(sentence: str, instruction: str | None, default_instruction: str) -> str:
    return REFINE_PROMPT.format(
        instruction=(instruction or "").strip() or default_instruction,
        sentence=sentence,
    )


def parse_result(text: str) -> RefinementResult:
    """Parse a response body into a RefinementResult.

    The body must be exactly one JSON object; fences or surrounding prose
    make it malformed.

    Raises:
        RefinementError: empty body (``NO_RESPONSE``) or a body that does not
            match the segments shape (``PARSE``).
    """
    if not text or not text.strip():
        raise RefinementError("No response from the model", RefinementErrorKind.NO_RESPONSE)
    try:
        return RefinementResult.model_validate_json(text.strip())
    except ValidationError as e:
        raise RefinementError(
            "Failed to parse the model response", RefinementErrorKind.PARSE
        ) from e


class RefinementRequester:
    """Send one refinement request per call and return the tagged segments.

    Callers are expected to pass at least one document and a non-blank
    sentence; the UI enforces that by disabling the trigger.
    """

    def __init__(
        self,
        llm: LLMClient,
        *,
        model: str = "claude-sonnet-4-5-20250929",
        temperature: float = 0.1,
        max_tokens: int = 4096,
        default_instruction: str = DEFAULT_INSTRUCTION,
    ):
        self.llm = llm
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.default_instruction = default_instruction

    async def refine(
        self,
        documents: Iterable[Document],
        sentence: str,
        instruction: str | None = None,
    ) -> RefinementResult:
        """Refine ``sentence`` against ``documents``.

        Raises:
            RefinementError: on any failure; there is no partial result.
        """
        prompt = build_prompt(sentence, instruction, self.default_instruction)
        try:
            attachments = await asyncio.gather(
                *(asyncio.to_thread(encode_document, d) for d in documents)
            )
            response = await self.llm.generate_structured(
                prompt,
                SEGMENTS_SCHEMA,
                attachments=list(attachments),
                tool_name="record_segments",
                tool_description="Record the refined sentence as tagged segments.",
                model=self.model,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except Exception as e:
            logger.warning("Refinement request failed (kind=%s): %s", RefinementErrorKind.REQUEST.value, e)
            raise RefinementError(
                str(e) or GENERIC_FAILURE_MESSAGE, RefinementErrorKind.REQUEST
            ) from e

        try:
            result = parse_result(response.text)
        except RefinementError as e:
            logger.warning("Refinement response rejected (kind=%s)", e.kind.value)
            raise

        logger.info(
            "Refinement succeeded: %d segment(s), %d changed",
            len(result.segments),
            len(result.notable_segments),
        )
        return result
