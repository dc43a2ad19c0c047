"""Stock-status classification and reorder suggestion.

Every view that shows a status or a purchase suggestion goes through
:func:`classify`; nothing else compares stock against minimum levels.
"""

from __future__ import annotations

import math
import numbers
import re
from enum import StrEnum
from typing import NamedTuple

MIN_REORDER_BUFFER = 5
BUFFER_RATIO = 0.5
ATTENTION_RATIO = 1.5

LEADING_INTEGER = re.compile(r"\s*([+-]?\d+)")


class StockStatus(StrEnum):
    CRITICAL = "critical"
    LOW = "low"
    ATTENTION = "attention"
    OK = "ok"

    @property
    def severity(self) -> int:
        """Rank from worst (0) to healthiest."""
        return STATUS_ORDER.index(self)

    @property
    def needs_reorder(self) -> bool:
        return self in REORDER_STATUSES


STATUS_ORDER: tuple[StockStatus, ...] = (
    StockStatus.CRITICAL,
    StockStatus.LOW,
    StockStatus.ATTENTION,
    StockStatus.OK,
)
REORDER_STATUSES = frozenset({StockStatus.CRITICAL, StockStatus.LOW})


class StockClassification(NamedTuple):
    status: StockStatus
    suggested_order_qty: int
    total_stock: int


def coerce_quantity(value: object) -> int:
    """Best-effort conversion of a spreadsheet cell to a non-negative int.

    Text cells use their leading integer (``"12 un"`` is 12, ``"3.9"`` is 3).
    Missing, non-numeric and non-finite values become 0, fractions truncate
    toward zero and negatives clamp to 0.
    """
    if isinstance(value, str):
        match = LEADING_INTEGER.match(value)
        return max(0, int(match.group(1))) if match else 0
    if isinstance(value, numbers.Integral):
        return max(0, int(value))
    if not isinstance(value, numbers.Real) or not math.isfinite(value):
        return 0
    return max(0, int(value))


def reorder_buffer(minimum_level: int) -> int:
    return max(MIN_REORDER_BUFFER, math.floor(minimum_level * BUFFER_RATIO))


def classify(available: object, in_transit: object, minimum_level: int) -> StockClassification:
    total = coerce_quantity(available) + coerce_quantity(in_transit)

    if total <= 0:
        status = StockStatus.CRITICAL
    elif total <= minimum_level:
        status = StockStatus.LOW
    elif total <= minimum_level * ATTENTION_RATIO:
        status = StockStatus.ATTENTION
    else:
        status = StockStatus.OK

    suggested = 0
    if status.needs_reorder:
        suggested = max(0, minimum_level + reorder_buffer(minimum_level) - total)

    return StockClassification(status=status, suggested_order_qty=suggested, total_stock=total)
