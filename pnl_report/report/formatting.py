"""
Presentation rules for report cells: currency text, zero placeholder, tone and trend arrows.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Optional, Sequence

from .aggregator import pct_change

ZERO_PLACEHOLDER = "—"
CURRENCY_SYMBOL = "$"


class Tone(str, Enum):
    FAVORABLE = "favorable"
    UNFAVORABLE = "unfavorable"
    NEUTRAL = "neutral"


class TrendDirection(str, Enum):
    UP = "up"
    DOWN = "down"
    FLAT = "flat"


@dataclass(frozen=True)
class Trend:
    direction: TrendDirection
    percent: float
    tone: Tone

    @property
    def arrow(self) -> str:
        if self.direction is TrendDirection.UP:
            return "▲"
        if self.direction is TrendDirection.DOWN:
            return "▼"
        return ""

    def as_text(self) -> str:
        if self.direction is TrendDirection.FLAT:
            return ""
        return f"{self.arrow} {abs(self.percent):.1f}%"


def format_currency(value: float, symbol: str = CURRENCY_SYMBOL) -> str:
    """
    Whole-unit currency with thousands grouping, halves rounded away from zero; negatives in parentheses.

    >>> format_currency(-1234)
    '($1,234)'
    """

    magnitude = Decimal(str(abs(float(value)))).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    text = f"{symbol}{magnitude:,.0f}"
    if value < 0 and magnitude != 0:
        return f"({text})"
    return text


def format_cell(value: Optional[float], *, leaf: bool = False, symbol: str = CURRENCY_SYMBOL) -> str:
    if value is None:
        return ""
    if leaf and value == 0:
        return ZERO_PLACEHOLDER
    return format_currency(value, symbol)


def value_tone(value: float, *, invert: bool = False) -> Tone:
    """
    Sign-based tone. With `invert` (expense rows) a positive figure reads as unfavorable.
    """

    if value == 0:
        return Tone.NEUTRAL
    positive = value > 0
    if invert:
        positive = not positive
    return Tone.FAVORABLE if positive else Tone.UNFAVORABLE


def trend_for(values: Sequence[float], index: int, *, invert: bool = False) -> Optional[Trend]:
    """
    Trend between column `index` and the one before it.

    Suppressed on the first column (nothing to compare against) and on the last column (the
    period total).
    """

    if index <= 0 or index >= len(values) - 1:
        return None
    current = float(values[index])
    previous = float(values[index - 1])
    percent = pct_change(current, previous)
    if current > previous:
        direction = TrendDirection.UP
    elif current < previous:
        direction = TrendDirection.DOWN
    else:
        direction = TrendDirection.FLAT

    if direction is TrendDirection.FLAT:
        tone = Tone.NEUTRAL
    else:
        rising = direction is TrendDirection.UP
        tone = Tone.FAVORABLE if rising != invert else Tone.UNFAVORABLE
    return Trend(direction=direction, percent=percent, tone=tone)


__all__ = [
    "CURRENCY_SYMBOL",
    "Tone",
    "Trend",
    "TrendDirection",
    "ZERO_PLACEHOLDER",
    "format_cell",
    "format_currency",
    "trend_for",
    "value_tone",
]
