#!/usr/bin/env python3
"""
Utility functions for the Utilisation Reporting system
"""

import logging
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Callable, Optional

import numpy as np
import pandas as pd

# Display configuration
NO_DATA = "–"
ZERO_EPSILON = 1e-6
CURRENCY_SYMBOL = "€"
THOUSANDS_SEPARATOR = "."


def to_number(raw: Any) -> Optional[float]:
    """
    Best-effort numeric coercion of a raw source value.

    Numbers pass through, strings are parsed after trimming. Missing values,
    empty strings, unparseable strings and non-finite results all yield None.

    Examples:
    - 0.82 → 0.82
    - "2000" → 2000.0
    - "" → None
    - "1,500" → None
    """
    if raw is None or isinstance(raw, (list, tuple, dict, set)):
        return None

    if isinstance(raw, str):
        raw = raw.strip()
        if not raw:
            return None
        value = pd.to_numeric(raw, errors='coerce')
    elif isinstance(raw, (bool, int, float, np.number)):
        value = raw
    else:
        return None

    try:
        value = float(value)
    except (TypeError, ValueError, OverflowError):
        return None

    if not np.isfinite(value):
        return None
    return value


def normalize_zero(value: float, epsilon: float = ZERO_EPSILON) -> float:
    """Snap floating noise (and negative zero) to exactly 0.0"""
    if abs(value) < epsilon:
        return 0.0
    return value


def _round_half_up(value: float) -> int:
    # Floats this large carry no fraction digits
    if abs(value) >= 2 ** 52:
        return int(value)
    # Half-up away from zero: 0.5 → 1, -0.5 → -1
    return int(Decimal(repr(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def format_percent(raw: Any) -> str:
    """
    Format a utilisation fraction as a whole percentage.

    Args:
        raw: Fraction (number or numeric string), e.g. 0.4567

    Returns:
        str: "46%" for 0.4567, NO_DATA when the value is missing or not numeric
    """
    value = to_number(raw)
    if value is None:
        return NO_DATA
    scaled = value * 100
    if not np.isfinite(scaled):
        return NO_DATA
    return f"{_round_half_up(scaled)}%"


def format_currency(raw: Any) -> str:
    """
    Format an amount as German-style Euro currency without fraction digits.

    Args:
        raw: Amount (number or numeric string); magnitudes below ZERO_EPSILON render as zero

    Returns:
        str: e.g. "1.500 €", "-2.500 €", "0 €"; NO_DATA for missing or non-numeric input
    """
    value = to_number(raw)
    if value is None:
        return NO_DATA

    amount = _round_half_up(normalize_zero(value))
    grouped = f"{abs(amount):,}".replace(",", THOUSANDS_SEPARATOR)
    sign = "-" if amount < 0 else ""
    return f"{sign}{grouped} {CURRENCY_SYMBOL}"


def previous_month_iso(now: Optional[datetime] = None) -> str:
    """Return the calendar month before `now` as YYYY-MM"""
    current = pd.Period(now or datetime.now(), freq='M')
    return (current - 1).strftime('%Y-%m')


class TableCache:
    """Memoizes the derived table of the most recent source dataset, by identity."""

    def __init__(self):
        self._entry: Optional[tuple] = None

    def get_or_build(self, records: Any, build: Callable[[Any], Any]) -> Any:
        """
        Return the cached result for this exact dataset object, building it on a miss.

        Only one dataset is held; building for a new dataset replaces the previous entry.

        Args:
            records: Source dataset; compared by identity, not by value
            build: Callable producing the derived result from `records`

        Returns:
            The cached or freshly built result
        """
        if self._entry is not None and self._entry[0] is records:
            logging.debug(f"Table cache hit for dataset {id(records)}")
            return self._entry[1]

        result = build(records)
        self._entry = (records, result)
        return result

    def clear(self) -> None:
        self._entry = None

    def __len__(self):
        return 0 if self._entry is None else 1


# Global table cache instance
_table_cache = TableCache()


def get_table_cache() -> TableCache:
    """Return the process-wide table cache."""
    return _table_cache
