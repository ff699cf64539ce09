#!/usr/bin/env python3
"""
Unit tests for display row building
Tests filtering, name resolution, utilisation lookup and net earnings signs
"""

import sys
import os
from datetime import datetime

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from person_record import PersonRecord
from row_builder import build_rows, get_columns, net_earnings_prev_month, resolve_name

MONTHS = ('May', 'June', 'July')
NOW = datetime(2025, 8, 12)  # previous month is 2025-07


def _jane_doe():
    return {
        'employees': {
            'firstname': 'Jane',
            'lastname': 'Doe',
            'status': 'active',
            'workforceUtilisation': {
                'utilisationRateYearToDate': 0.82,
                'lastThreeMonthsIndividually': [
                    {'month': 'March', 'utilisationRate': 0.6},
                ]
            },
            'costsByMonth': {
                'potentialEarningsByMonth': [
                    {'month': '2025-06', 'costs': 1800},
                    {'month': '2025-07', 'costs': 2000},
                ]
            }
        }
    }


def _external(name='Contractor', status='active', costs=None):
    lines = [] if costs is None else [{'month': '2025-07', 'costs': costs}]
    return {
        'externals': {
            'name': name,
            'status': status,
            'workforceUtilisation': {
                'utilisationRateLastTwelveMonths': '0.5',
                'lastThreeMonthsIndividually': [
                    {'month': 'july', 'utilisationRate': '0.915'},
                    {'month': 'June', 'utilisationRate': 'n/a'},
                ]
            },
            'costsByMonth': {'costsByMonth': lines}
        }
    }


def test_employee_example_row():
    rows = build_rows([_jane_doe()], MONTHS, NOW)

    assert len(rows) == 1
    assert rows[0].as_dict() == {
        'person': 'Jane Doe',
        'past12Months': '–',
        'y2d': '82%',
        'may': '–',
        'june': '–',
        'july': '–',
        'netEarningsPrevMonth': '2.000 €',
    }


def test_external_costs_are_negated():
    rows = build_rows([_external(costs='1500')], MONTHS, NOW)
    row = rows[0]

    assert row.net_earnings_prev_month == '-1.500 €', f"Got {row.net_earnings_prev_month}"
    assert row.past_12_months == '50%'
    assert row.july == '92%', "Month lookup should be case-insensitive"
    assert row.june == '–', "Non-numeric rate should show no data"
    assert row.may == '–'


def test_missing_cost_line_counts_as_zero():
    rows = build_rows([_external(costs=None)], MONTHS, NOW)
    assert rows[0].net_earnings_prev_month == '0 €'


def test_non_numeric_cost_shows_no_data():
    rows = build_rows([_external(costs='twelve hundred')], MONTHS, NOW)
    assert rows[0].net_earnings_prev_month == '–'


def test_tiny_costs_render_as_zero():
    rows = build_rows([_external(costs=0.0000001)], MONTHS, NOW)
    assert rows[0].net_earnings_prev_month == '0 €', "No negative zero for negated tiny costs"


def test_extreme_numbers_degrade_to_no_data():
    entry = _jane_doe()
    entry['employees']['workforceUtilisation']['utilisationRateYearToDate'] = 1e307
    entry['employees']['costsByMonth']['potentialEarningsByMonth'][1]['costs'] = 10 ** 400

    rows = build_rows([entry, _external(costs=10 ** 400)], MONTHS, NOW)

    assert rows[0].y2d == '–'
    assert rows[0].net_earnings_prev_month == '–'
    assert rows[1].net_earnings_prev_month == '–'


def test_empty_cost_amount_shows_no_data():
    rows = build_rows([_external(costs=''), _external(costs=None)], MONTHS, NOW)
    assert rows[0].net_earnings_prev_month == '–', "Empty amount on a matching line is not numeric"
    assert rows[1].net_earnings_prev_month == '0 €', "No cost line for the month counts as zero"


def test_inactive_and_payloadless_entries_are_dropped():
    records = [
        _external(name='Gone Contractor', status='Inactive', costs=900),
        {'note': 'no payload'},
        {'employees': {}, 'externals': None},
        _external(name='No Status', status=None),
        _jane_doe(),
    ]
    rows = build_rows(records, MONTHS, NOW)

    assert [row.person for row in rows] == ['Jane Doe']


def test_status_is_case_insensitive():
    records = [
        _external(name='A', status='ACTIVE'),
        _external(name='B', status='Active'),
        _external(name='C', status='active '),
    ]
    rows = build_rows(records, MONTHS, NOW)
    assert [row.person for row in rows] == ['A', 'B']


def test_row_order_follows_source_order():
    records = [
        _external(name='Zoe'),
        _external(name='Inactive', status='inactive'),
        _external(name='Adam'),
        _external(name='Mia'),
    ]
    rows = build_rows(records, MONTHS, NOW)
    assert [row.person for row in rows] == ['Zoe', 'Adam', 'Mia']


def test_build_rows_is_idempotent():
    records = [_jane_doe(), _external(costs='700')]
    first = build_rows(records, MONTHS, NOW)
    second = build_rows(records, MONTHS, NOW)
    assert first == second


def test_empty_input():
    assert build_rows([], MONTHS, NOW) == []
    assert build_rows(None, MONTHS, NOW) == []


def test_resolve_name():
    test_cases = [
        ({'name': 'Jane Doe', 'firstname': 'X'}, 'Jane Doe'),
        ({'firstname': 'Max', 'lastname': 'Muster'}, 'Max Muster'),
        ({'firstname': 'Cher'}, 'Cher'),
        ({'firstname': 'Cher', 'lastname': None}, 'Cher'),
        ({'name': '', 'firstname': ' Ada', 'lastname': 'Lovelace '}, 'Ada Lovelace'),
        ({}, ''),
    ]

    for payload, expected in test_cases:
        result = resolve_name(payload)
        assert result == expected, f"Payload: {payload} -> Expected: {expected!r}, Got: {result!r}"


def test_employee_earnings_keep_sign():
    record = PersonRecord.from_entry(_jane_doe())
    assert net_earnings_prev_month(record, '2025-07') == 2000.0
    assert net_earnings_prev_month(record, '2025-06') == 1800.0
    assert net_earnings_prev_month(record, '2024-01') == 0.0


def test_employee_payload_preferred_over_external():
    entry = {
        'employees': {'name': 'Employee Side', 'status': 'active'},
        'externals': {'name': 'External Side', 'status': 'active'},
    }
    record = PersonRecord.from_entry(entry)
    assert record.is_employee
    assert build_rows([entry], MONTHS, NOW)[0].person == 'Employee Side'


def test_columns_use_resolved_months():
    columns = get_columns(('August', 'September', 'October'))

    assert [col['key'] for col in columns] == [
        'person', 'past12Months', 'y2d', 'may', 'june', 'july', 'netEarningsPrevMonth'
    ]
    assert [col['header'] for col in columns] == [
        'Person', 'Past 12 Months', 'Y2D', 'August', 'September', 'October', 'Net Earnings Prev Month'
    ]
    assert [col['size'] for col in columns] == [260, 120, 80, 80, 80, 80, 200]


if __name__ == "__main__":
    test_employee_example_row()
    test_external_costs_are_negated()
    test_inactive_and_payloadless_entries_are_dropped()
    test_row_order_follows_source_order()
    print("✅ Row builder tests passed!")
