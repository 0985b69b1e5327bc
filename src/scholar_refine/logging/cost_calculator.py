"""Cost calculator for Claude API usage."""

from __future__ import annotations

# Pricing per 1M tokens (USD)
MODEL_PRICING: dict[str, dict[str, float]] = {
    "claude-haiku-4-5-20251001": {"input": 1.00, "output": 5.00},
    "claude-sonnet-4-5-20250929": {"input": 3.00, "output": 15.00},
    "claude-opus-4-1-20250805": {"input": 15.00, "output": 75.00},
}


def calculate_cost(calls: list[tuple[str, int, int]]) -> float:
    """Calculate total cost for a set of API calls.

    Args:
        calls: List of (model_id, input_tokens, output_tokens) tuples, as
            returned in ``LLMClient.get_token_summary()["calls"]``.

    Returns:
        Total estimated cost in USD. Unknown models count as zero.
    """
    total = 0.0
    for model_id, input_tokens, output_tokens in calls:
        pricing = MODEL_PRICING.get(model_id)
        if pricing is None:
            continue
        total += (input_tokens / 1_000_000) * pricing["input"]
        total += (output_tokens / 1_000_000) * pricing["output"]
    return total


def format_usage(summary: dict) -> str:
    """One-line usage caption from a token summary."""
    cost = calculate_cost(summary.get("calls", []))
    return (
        f"{summary.get('input', 0):,} input / {summary.get('output', 0):,} output tokens"
        f" · ~${cost:.4f}"
    )
