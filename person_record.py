#!/usr/bin/env python3
"""
Person records and display rows for the utilisation report
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

EMPLOYEE = 'employee'
EXTERNAL = 'external'

# Source entry key for each variant, in lookup precedence order
PAYLOAD_KEYS = {
    EMPLOYEE: 'employees',
    EXTERNAL: 'externals',
}


def _as_list(value: Any) -> List[Any]:
    return list(value) if isinstance(value, (list, tuple)) else []


@dataclass(frozen=True)
class PersonRecord:
    """
    One roster entry, tagged by which payload it carries.

    A source entry holds either an `employees` or an `externals` object.
    The employee payload wins when both are present.
    """
    kind: str
    payload: Mapping[str, Any]

    @classmethod
    def from_entry(cls, entry: Any) -> Optional['PersonRecord']:
        """
        Build a record from a parsed source entry.

        Returns:
            PersonRecord, or None when the entry carries no usable payload
        """
        if not isinstance(entry, Mapping):
            return None

        for kind, key in PAYLOAD_KEYS.items():
            payload = entry.get(key)
            if isinstance(payload, Mapping) and payload:
                return cls(kind=kind, payload=payload)
        return None

    @property
    def is_employee(self) -> bool:
        return self.kind == EMPLOYEE

    @property
    def status(self) -> str:
        status = self.payload.get('status')
        return status if isinstance(status, str) else ""

    @property
    def is_active(self) -> bool:
        return self.status.lower() == 'active'

    @property
    def utilisation(self) -> Mapping[str, Any]:
        util = self.payload.get('workforceUtilisation')
        return util if isinstance(util, Mapping) else {}

    @property
    def monthly_utilisation(self) -> List[Any]:
        """The `lastThreeMonthsIndividually` breakdown, or [] when absent"""
        return _as_list(self.utilisation.get('lastThreeMonthsIndividually'))

    @property
    def cost_lines(self) -> List[Any]:
        """Potential earnings for employees, contractor costs for externals"""
        costs = self.payload.get('costsByMonth')
        if not isinstance(costs, Mapping):
            return []
        key = 'potentialEarningsByMonth' if self.is_employee else 'costsByMonth'
        return _as_list(costs.get(key))


@dataclass(frozen=True)
class DisplayRow:
    person: str
    past_12_months: str
    y2d: str
    may: str
    june: str
    july: str
    net_earnings_prev_month: str

    def as_dict(self) -> Dict[str, str]:
        """Row keyed by the report's column keys"""
        return {
            'person': self.person,
            'past12Months': self.past_12_months,
            'y2d': self.y2d,
            'may': self.may,
            'june': self.june,
            'july': self.july,
            'netEarningsPrevMonth': self.net_earnings_prev_month,
        }
