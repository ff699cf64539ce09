#!/usr/bin/env python3
"""
Month resolution for the utilisation report

Picks the three report months from the data itself: the first roster entry
whose individual monthly breakdown covers at least three distinct months
decides. Only when no entry qualifies do the months come from the clock.
"""

import logging
from datetime import datetime
from typing import Any, Iterable, Optional, Tuple

import pandas as pd

from person_record import PersonRecord

MONTH_ORDER = [
    'January', 'February', 'March', 'April', 'May', 'June',
    'July', 'August', 'September', 'October', 'November', 'December',
]

_MONTH_INDEX = {name.lower(): i for i, name in enumerate(MONTH_ORDER)}


def canonical_month(raw: Any) -> Optional[str]:
    """
    Map a month name onto its canonical spelling.

    Examples:
    - "july" → "July"
    - " May " → "May"
    - "Jul" → None (abbreviations are not month names)
    """
    if not isinstance(raw, str):
        return None
    index = _MONTH_INDEX.get(raw.strip().lower())
    return MONTH_ORDER[index] if index is not None else None


def latest_three_months(breakdown: Iterable[Any]) -> Optional[Tuple[str, str, str]]:
    """
    Return the chronologically last three distinct months of one breakdown.

    Args:
        breakdown: Sequence of {month, utilisationRate} items

    Returns:
        Tuple of three month names oldest first, or None if fewer than three distinct months
    """
    months = set()
    for item in breakdown:
        if isinstance(item, dict):
            month = canonical_month(item.get('month'))
            if month:
                months.add(month)

    if len(months) < 3:
        return None

    ordered = sorted(months, key=MONTH_ORDER.index)[-3:]
    return ordered[0], ordered[1], ordered[2]


def fallback_months(now: Optional[datetime] = None) -> Tuple[str, str, str]:
    """The three calendar months before `now`, oldest first"""
    current = pd.Period(now or datetime.now(), freq='M')
    names = [MONTH_ORDER[(current - offset).month - 1] for offset in (3, 2, 1)]
    return names[0], names[1], names[2]


def resolve_months(records: Iterable[Any], now: Optional[datetime] = None) -> Tuple[str, str, str]:
    """
    Resolve the three report months for a roster.

    Scans entries in source order and returns the latest three months of the
    first entry whose breakdown holds at least three items and three distinct
    months. Falls back to the three months before `now` when none qualifies.

    Args:
        records: Parsed roster entries
        now: Reference time for the fallback (defaults to the current time)

    Returns:
        Tuple[str, str, str]: Month names in chronological order
    """
    for position, entry in enumerate(records or []):
        record = PersonRecord.from_entry(entry)
        if record is None:
            continue

        breakdown = record.monthly_utilisation
        if len(breakdown) < 3:
            continue

        months = latest_three_months(breakdown)
        if months is not None:
            logging.debug(f"Resolved report months {months} from entry {position}")
            return months

    months = fallback_months(now)
    logging.info(f"No entry covers three distinct months, using calendar months {months}")
    return months
