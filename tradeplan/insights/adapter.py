"""Insight request adapter — shapes the outbound request and validates replies.

Validation is all-or-nothing: a batch with any malformed entry is rejected
as a whole with an ``InsightValidationError`` listing every problem.
"""

import json
from typing import Iterable, Optional

from pydantic import ValidationError

from tradeplan.errors import InsightValidationError
from tradeplan.insights.models import (
    InsightRequestItem,
    Recommendation,
    RecommendationBatch,
)
from tradeplan.signals.models import ResolvedPair


def build_request(pairs: Iterable[ResolvedPair]) -> list[InsightRequestItem]:
    """Strip resolved pairs down to ``{pair, bias, confidence}``."""
    return [
        InsightRequestItem(pair=p.pair, bias=p.bias.value, confidence=p.confidence)
        for p in pairs
    ]


def _format_errors(exc: ValidationError) -> list[str]:
    messages = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err["loc"])
        messages.append(f"{loc}: {err['msg']}")
    return messages


def validate_response(raw, top_n: Optional[int] = None) -> list[Recommendation]:
    """Validate a raw insight-service reply into typed recommendations.

    Args:
        raw: A list of recommendation objects, an object with a
            ``recommendations`` list, or a JSON string of either.
        top_n: When given, the batch must contain exactly this many items.

    Returns:
        The fully-typed list of ``Recommendation`` objects.

    Raises:
        InsightValidationError: If the reply is not valid JSON, does not
            match the schema, or has the wrong length.
    """
    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise InsightValidationError(
                "Insight response is not valid JSON", [str(exc)]
            ) from exc

    if isinstance(raw, list):
        raw = {"recommendations": raw}
    if not isinstance(raw, dict):
        raise InsightValidationError(
            "Insight response must be a list of recommendations",
            [f"got {type(raw).__name__}"],
        )

    try:
        batch = RecommendationBatch.model_validate(raw)
    except ValidationError as exc:
        raise InsightValidationError(
            "Insight response failed validation", _format_errors(exc)
        ) from exc

    if top_n is not None and len(batch.recommendations) != top_n:
        raise InsightValidationError(
            "Insight response has the wrong number of recommendations",
            [f"expected {top_n}, got {len(batch.recommendations)}"],
        )
    return batch.recommendations
