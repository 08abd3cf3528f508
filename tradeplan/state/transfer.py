"""Bulk paste and portable-state transfer of correlation inputs.

Paste rows look like ``EUR\\t3\\t2\\t2``.  The portable payload is a list of
``{"id", "d1", "4h", "1h"}`` objects, small enough for a scannable code.
Neither function mutates its input; a rejected import leaves the caller's
state as it was.
"""

import json
import logging
import math
from typing import Mapping

from tradeplan.errors import InputValidationError
from tradeplan.signals.models import CorrelationInput, Currency, parse_currency
from tradeplan.state.session import initial_correlations, parse_number

logger = logging.getLogger("tradeplan")


def _parse_cell(cell: str) -> float | None:
    try:
        number = float(cell.strip())
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def parse_paste(
    text: str,
    current: Mapping[Currency, CorrelationInput],
) -> tuple[dict[Currency, CorrelationInput], int]:
    """Apply tab-separated ``Currency D1 4H 1H`` rows to *current*.

    Rows whose first column is not a known currency, or whose next three
    columns are not all numbers, are skipped.

    Returns:
        ``(updated_mapping, updated_count)``; with zero updates the mapping
        equals *current*.
    """
    result = dict(current)
    updated = 0
    for line in text.splitlines():
        cols = line.split("\t")
        if len(cols) < 4:
            continue
        currency = parse_currency(cols[0])
        if currency is None:
            continue
        values = [_parse_cell(c) for c in cols[1:4]]
        if any(v is None for v in values):
            continue
        d1, h4, h1 = values
        result[currency] = CorrelationInput(currency=currency, d1=d1, h4=h4, h1=h1)
        updated += 1
    logger.info("Paste import updated %d currenc%s", updated, "y" if updated == 1 else "ies")
    return result, updated


def export_portable(correlations: Mapping[Currency, CorrelationInput]) -> list[dict]:
    """Serialise the correlation set in ``Currency`` order."""
    rows = []
    for currency in Currency:
        corr = correlations.get(currency, CorrelationInput(currency=currency))
        rows.append({"id": currency.value, "d1": corr.d1, "4h": corr.h4, "1h": corr.h1})
    return rows


def dumps_portable(correlations: Mapping[Currency, CorrelationInput]) -> str:
    """Compact JSON string of the portable payload."""
    return json.dumps(export_portable(correlations), separators=(",", ":"))


def import_portable(payload) -> dict[Currency, CorrelationInput]:
    """Build a full correlation set from a portable payload.

    Args:
        payload: A list of ``{id, d1, '4h', '1h'}`` objects or its JSON string.

    Returns:
        A complete mapping: currencies missing from the payload are zeroed,
        unknown ids are ignored.

    Raises:
        InputValidationError: If the payload is not a non-empty list of
            objects each holding at least ``id`` and ``d1``, or a value is
            not numeric.
    """
    if isinstance(payload, (str, bytes)):
        try:
            payload = json.loads(payload)
        except json.JSONDecodeError as exc:
            raise InputValidationError(f"payload is not valid JSON: {exc}") from exc

    if not isinstance(payload, list) or not payload:
        raise InputValidationError("payload must be a non-empty list")
    for i, row in enumerate(payload):
        if not isinstance(row, dict) or "id" not in row or "d1" not in row:
            raise InputValidationError(f"payload item {i} must be an object with 'id' and 'd1'")

    correlations = initial_correlations()
    for row in payload:
        currency = parse_currency(str(row["id"]))
        if currency is None:
            continue
        correlations[currency] = CorrelationInput(
            currency=currency,
            d1=parse_number(row["d1"]),
            h4=parse_number(row.get("4h", 0)),
            h1=parse_number(row.get("1h", 0)),
        )
    return correlations
