"""Claude API wrapper for schema-constrained requests with PDF attachments."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass

import anthropic

logger = logging.getLogger(__name__)


@dataclass
class LLMResponse:
    """Response from the LLM including usage metadata."""

    text: str
    input_tokens: int
    output_tokens: int


@dataclass(frozen=True)
class Attachment:
    """A base64-encoded binary sent alongside the prompt."""

    data: str
    media_type: str


class LLMClient:
    """Async Claude API client. Makes exactly one API call per request."""

    def __init__(self, api_key: str | None = None, timeout: float | None = None):
        # The SDK retries 408/409/429/5xx on its own by default
        kwargs: dict = {"max_retries": 0}
        if api_key is not None:
            kwargs["api_key"] = api_key
        if timeout is not None:
            kwargs["timeout"] = timeout
        self.client = anthropic.AsyncAnthropic(**kwargs)
        self._token_log: list[tuple[str, int, int]] = []  # (model, input_tokens, output_tokens)

    async def generate_structured(
        self,
        prompt: str,
        schema: dict,
        *,
        attachments: list[Attachment] | None = None,
        tool_name: str = "record_result",
        tool_description: str = "Record the structured result.",
        model: str = "claude-sonnet-4-5-20250929",
        temperature: float = 0.0,
        max_tokens: int = 4096,
    ) -> LLMResponse:
        """Send attachments plus a prompt and force the reply into ``schema``.

        The schema is offered as the input schema of a single tool the model
        must call. The returned ``text`` is the tool input serialized as JSON,
        or the plain text content if the model answered without the tool.
        An empty string means the backend returned nothing usable.
        """
        content: list[dict] = [
            {
                "type": "document",
                "source": {
                    "type": "base64",
                    "media_type": a.media_type,
                    "data": a.data,
                },
            }
            for a in attachments or []
        ]
        content.append({"type": "text", "text": prompt})

        logger.debug(
            "LLM structured call: model=%s, attachments=%d", model, len(attachments or [])
        )
        try:
            message = await self.client.messages.create(
                model=model,
                max_tokens=max_tokens,
                temperature=temperature,
                messages=[{"role": "user", "content": content}],
                tools=[
                    {
                        "name": tool_name,
                        "description": tool_description,
                        "input_schema": schema,
                    }
                ],
                tool_choice={"type": "tool", "name": tool_name},
            )
        except Exception:
            logger.error("LLM call failed", exc_info=True)
            raise

        input_tokens = message.usage.input_tokens
        output_tokens = message.usage.output_tokens
        logger.debug("LLM response: %d input, %d output tokens", input_tokens, output_tokens)
        self._token_log.append((model, input_tokens, output_tokens))
        return LLMResponse(
            text=self._response_text(message.content, tool_name),
            input_tokens=input_tokens,
            output_tokens=output_tokens,
        )

    @staticmethod
    def _response_text(blocks: list, tool_name: str) -> str:
        for block in blocks:
            if getattr(block, "type", None) == "tool_use" and getattr(block, "name", None) == tool_name:
                return json.dumps(block.input) if block.input else ""
        return "".join(
            block.text for block in blocks if getattr(block, "type", None) == "text"
        )

    def get_token_summary(self) -> dict:
        """Return accumulated token usage and reset the log."""
        summary = {
            "input": sum(t[1] for t in self._token_log),
            "output": sum(t[2] for t in self._token_log),
            "calls": list(self._token_log),
        }
        self._token_log.clear()
        return summary
