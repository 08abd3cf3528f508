"""Insight coordinator — one logical in-flight request, newest wins.

Every call to ``request`` takes a new ticket.  When a response arrives for
a ticket that has since been superseded, the outcome is flagged ``stale``
and the coordinator's recommendations are left alone.  Failures never
clear the last good recommendations.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Protocol, runtime_checkable

from tradeplan.errors import InsightServiceError, InsightValidationError
from tradeplan.insights.adapter import build_request, validate_response
from tradeplan.insights.models import InsightOutcome, InsightRequestItem, Recommendation
from tradeplan.signals.models import ResolvedPair

logger = logging.getLogger("tradeplan")


@runtime_checkable
class InsightProvider(Protocol):
    """Anything that can turn request items into a raw recommendation reply."""

    async def generate(self, items: list[InsightRequestItem], top_n: int):
        ...


class InsightCoordinator:
    """Serialises insight requests and guards state against stale replies.

    Args:
        provider: The external insight service client.
        default_top_n: Number of recommendations requested when the caller
            does not pass ``top_n``.
    """

    def __init__(self, provider: InsightProvider, default_top_n: int = 5) -> None:
        self._provider = provider
        self._default_top_n = default_top_n
        self._latest_ticket = 0
        self._recommendations: Optional[list[Recommendation]] = None

    @property
    def recommendations(self) -> Optional[list[Recommendation]]:
        """Recommendations from the newest successful request, if any."""
        return self._recommendations

    @property
    def latest_ticket(self) -> int:
        return self._latest_ticket

    async def request(
        self,
        pairs: Iterable[ResolvedPair],
        top_n: Optional[int] = None,
    ) -> InsightOutcome:
        """Request recommendations for *pairs* and return the outcome."""
        n = top_n if top_n is not None else self._default_top_n
        self._latest_ticket += 1
        ticket = self._latest_ticket
        items = build_request(pairs)

        try:
            raw = await self._provider.generate(items, n)
            recs = validate_response(raw, top_n=n)
        except InsightValidationError as exc:
            logger.warning("Insight ticket %d rejected: %s %s", ticket, exc, exc.errors)
            return self._failure(ticket, str(exc), exc.errors)
        except InsightServiceError as exc:
            logger.warning("Insight ticket %d failed: %s", ticket, exc)
            return self._failure(ticket, str(exc))
        except Exception as exc:
            logger.exception("Insight ticket %d raised unexpectedly", ticket)
            return self._failure(ticket, f"Insight request failed: {exc}")

        if ticket != self._latest_ticket:
            logger.info(
                "Insight ticket %d superseded by %d, discarding result",
                ticket, self._latest_ticket,
            )
            return InsightOutcome(ok=True, ticket=ticket, recommendations=recs, stale=True)

        self._recommendations = recs
        logger.info("Insight ticket %d returned %d recommendation(s)", ticket, len(recs))
        return InsightOutcome(ok=True, ticket=ticket, recommendations=recs)

    def _failure(
        self,
        ticket: int,
        message: str,
        errors: Optional[list[str]] = None,
    ) -> InsightOutcome:
        return InsightOutcome(
            ok=False,
            ticket=ticket,
            error=message,
            errors=list(errors or []),
            stale=ticket != self._latest_ticket,
        )
