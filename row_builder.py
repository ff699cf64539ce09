#!/usr/bin/env python3
"""
Row building for the utilisation report

Turns roster entries into flat display rows: name, utilisation rates for the
trailing twelve months, year to date and each report month, and the net
earnings of the previous calendar month.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from person_record import DisplayRow, PersonRecord
from utils import (NO_DATA, format_currency, format_percent, normalize_zero,
                   previous_month_iso, to_number)

# Column keys are fixed; the three month columns take the resolved month names as headers
COLUMN_LAYOUT = [
    ('person', 'Person', 260),
    ('past12Months', 'Past 12 Months', 120),
    ('y2d', 'Y2D', 80),
    ('may', None, 80),
    ('june', None, 80),
    ('july', None, 80),
    ('netEarningsPrevMonth', 'Net Earnings Prev Month', 200),
]

MONTH_COLUMN_KEYS = ('may', 'june', 'july')


def get_columns(months: Sequence[str]) -> List[Dict[str, Any]]:
    """
    Column descriptors for the report table.

    Args:
        months: Resolved report months, oldest first

    Returns:
        List of {key, header, size} dicts in display order
    """
    month_headers = dict(zip(MONTH_COLUMN_KEYS, months))
    return [
        {'key': key, 'header': header or month_headers.get(key, ''), 'size': size}
        for key, header, size in COLUMN_LAYOUT
    ]


def resolve_name(payload: Dict[str, Any]) -> str:
    """
    Display name of a person.

    Uses the explicit `name` when set, otherwise "firstname lastname".

    Examples:
    - {"name": "Jane Doe"} → "Jane Doe"
    - {"firstname": "Max", "lastname": "Muster"} → "Max Muster"
    - {"firstname": "Cher"} → "Cher"
    """
    name = payload.get('name')
    if name:
        return str(name).strip()

    first = payload.get('firstname')
    last = payload.get('lastname')
    parts = [str(part) for part in (first, last) if part is not None]
    return " ".join(parts).strip()


def pick_month_utilisation(breakdown: Iterable[Any], month: str) -> str:
    """Formatted utilisation for `month` (case-insensitive), NO_DATA if not listed"""
    wanted = month.lower()
    for item in breakdown:
        if not isinstance(item, dict):
            continue
        label = item.get('month')
        if isinstance(label, str) and label.strip().lower() == wanted:
            return format_percent(item.get('utilisationRate'))
    return NO_DATA


def net_earnings_prev_month(record: PersonRecord, prev_month: str) -> Optional[float]:
    """
    Signed net earnings of `record` for the month `prev_month` (YYYY-MM).

    Employee potential earnings count as positive, external contractor costs
    are negated. A month without a cost line counts as zero; a cost line with
    a non-numeric amount gives None.
    """
    for line in record.cost_lines:
        if isinstance(line, dict) and line.get('month') == prev_month:
            amount = to_number(line.get('costs'))
            if amount is None:
                return None
            if not record.is_employee:
                amount = -amount
            return normalize_zero(amount)
    return 0.0


def build_row(record: PersonRecord, months: Tuple[str, str, str], prev_month: str) -> DisplayRow:
    """Build the display row of one active person"""
    util = record.utilisation
    breakdown = record.monthly_utilisation
    month_a, month_b, month_c = months

    return DisplayRow(
        person=resolve_name(record.payload),
        past_12_months=format_percent(util.get('utilisationRateLastTwelveMonths')),
        y2d=format_percent(util.get('utilisationRateYearToDate')),
        may=pick_month_utilisation(breakdown, month_a),
        june=pick_month_utilisation(breakdown, month_b),
        july=pick_month_utilisation(breakdown, month_c),
        net_earnings_prev_month=format_currency(net_earnings_prev_month(record, prev_month)),
    )


def build_rows(records: Iterable[Any], months: Tuple[str, str, str],
               now: Optional[datetime] = None) -> List[DisplayRow]:
    """
    Build display rows for every active person, in source order.

    Entries without an employee or external payload and people whose status
    is not "active" (case-insensitive) are skipped.

    Args:
        records: Parsed roster entries
        months: Resolved report months, oldest first
        now: Reference time for the previous-month earnings (defaults to the current time)

    Returns:
        List[DisplayRow]: One row per active person
    """
    prev_month = previous_month_iso(now)
    rows = []
    no_payload = 0
    inactive = 0

    for entry in records or []:
        record = PersonRecord.from_entry(entry)
        if record is None:
            no_payload += 1
            continue
        if not record.is_active:
            inactive += 1
            logging.debug(f"Skipping {resolve_name(record.payload)!r} with status {record.status!r}")
            continue
        rows.append(build_row(record, months, prev_month))

    if no_payload or inactive:
        logging.info(f"Built {len(rows)} rows, skipped {no_payload} entries without payload "
                     f"and {inactive} inactive people")
    return rows
