"""Insight service async client.

Sends the resolved trade plan to an OpenAI-compatible chat-completions
endpoint and returns the decoded JSON content of the reply.  A failed
call raises ``InsightServiceError``; nothing is retried.
"""

import json
import logging
from typing import Iterable

import httpx

from tradeplan.config import Config
from tradeplan.errors import InsightServiceError
from tradeplan.insights.models import InsightRequestItem

logger = logging.getLogger("tradeplan")

_SYSTEM_PROMPT = (
    "You are an expert Forex trading analyst. You answer only with JSON."
)


def build_prompt(items: Iterable[InsightRequestItem], top_n: int) -> str:
    """Render the user prompt listing every pair with its bias and confidence."""
    lines = [
        f"Given the following Forex pairs, their trading biases, and confidence "
        f"scores, recommend the top {top_n} best pairs to trade and explain your "
        f"reasoning for each.",
        "",
        "Forex Pairs:",
    ]
    for item in items:
        lines.append(
            f"- Pair: {item.pair}, Bias: {item.bias}, Confidence: {item.confidence:g}"
        )
    lines += [
        "",
        "Consider the strength of the bias, the correlation between the "
        "currencies in the pair, and overall market conditions.",
        f'Respond with a JSON object {{"recommendations": [...]}} holding exactly '
        f"{top_n} objects with the keys pair, action (BUY, SELL or HOLD), "
        "reasoning, and confidence (echo the confidence given above).",
    ]
    return "\n".join(lines)


class InsightClient:
    """Async client for the external insight (LLM) service."""

    def __init__(self, config: Config) -> None:
        if not config.insight_api_key:
            raise ValueError("INSIGHT_API_KEY environment variable is required")
        self._base_url = config.insight_base_url.rstrip("/")
        self._model = config.insight_model
        self._headers = {
            "Authorization": f"Bearer {config.insight_api_key}",
            "Content-Type": "application/json",
        }

    async def generate(self, items: list[InsightRequestItem], top_n: int):
        """Request *top_n* recommendations for *items*.

        Returns:
            The decoded JSON content of the model reply (unvalidated).

        Raises:
            InsightServiceError: On transport errors, non-2xx responses, or
                a reply without decodable JSON content.
        """
        url = f"{self._base_url}/chat/completions"
        body = {
            "model": self._model,
            "messages": [
                {"role": "system", "content": _SYSTEM_PROMPT},
                {"role": "user", "content": build_prompt(items, top_n)},
            ],
            "response_format": {"type": "json_object"},
            "temperature": 0.2,
        }

        try:
            async with httpx.AsyncClient() as client:
                resp = await client.post(
                    url,
                    headers=self._headers,
                    json=body,
                    timeout=60.0,
                )
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.warning("Insight service returned %d", exc.response.status_code)
            raise InsightServiceError(
                f"Insight service returned HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            logger.warning("Insight service transport error: %s", exc)
            raise InsightServiceError(f"Insight service unreachable: {exc}") from exc

        try:
            content = resp.json()["choices"][0]["message"]["content"]
            return json.loads(content)
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            raise InsightServiceError(
                "Insight service reply has no JSON content"
            ) from exc
