"""Tests for compliance period labels and windows."""

import pytest
from datetime import date

from app.domain.compliance import (
    CompliancePeriod,
    compliance_end_date,
    format_compliance_period,
    next_compliance_period,
)


@pytest.mark.parametrize("frequency,start,expected", [
    ("Quarterly", date(2025, 5, 1), "Q2 2025"),
    ("quarterly", date(2025, 12, 31), "Q4 2025"),
    ("Semi-Annual", date(2025, 3, 1), "H1 2025"),
    ("Semi-Annual", date(2025, 9, 1), "H2 2025"),
    ("Annual", date(2025, 4, 1), "2025"),
    ("2 Years", date(2025, 1, 1), "2025-2026"),
    ("3 years", date(2025, 1, 1), "2025-2027"),
    ("4 Years", date(2025, 1, 1), "2025-2028"),
    ("5 Years", date(2025, 1, 1), "2025-2029"),
    ("One Time", date(2025, 5, 10), "May 2025 (One-time)"),
    ("Monthly", date(2025, 5, 10), "May 2025"),
])
def test_format_compliance_period(frequency, start, expected):
    assert format_compliance_period(frequency, start) == expected


@pytest.mark.parametrize("frequency,start,expected", [
    ("Quarterly", date(2025, 5, 1), date(2025, 6, 30)),
    ("Semi-Annual", date(2025, 1, 1), date(2025, 6, 30)),
    ("Annual", date(2025, 1, 1), date(2025, 12, 31)),
    ("3 Years", date(2025, 1, 1), date(2027, 12, 31)),
    ("One Time", date(2025, 5, 10), date(2025, 5, 10)),
    ("Monthly", date(2024, 2, 1), date(2024, 2, 29)),
])
def test_compliance_end_date(frequency, start, expected):
    assert compliance_end_date(frequency, start) == expected


@pytest.mark.parametrize("frequency,reference,duration,expected", [
    ("daily", date(2025, 1, 31), None, (date(2025, 2, 1), date(2025, 2, 1))),
    ("weekly", date(2025, 1, 31), None, (date(2025, 2, 1), date(2025, 2, 7))),
    ("biweekly", date(2025, 1, 31), None, (date(2025, 2, 1), date(2025, 2, 14))),
    ("monthly", date(2025, 1, 15), None, (date(2025, 2, 1), date(2025, 2, 28))),
    ("monthly", date(2025, 12, 15), None, (date(2026, 1, 1), date(2026, 1, 31))),
    ("monthly", date(2025, 1, 15), "previous", (date(2024, 12, 1), date(2024, 12, 31))),
    ("quarterly", date(2025, 5, 1), None, (date(2025, 7, 1), date(2025, 9, 30))),
    ("quarterly", date(2025, 11, 3), None, (date(2026, 1, 1), date(2026, 3, 31))),
    ("semi-annual", date(2025, 3, 1), None, (date(2025, 7, 1), date(2025, 12, 31))),
    ("biannual", date(2025, 8, 1), None, (date(2026, 1, 1), date(2026, 6, 30))),
    ("annual", date(2025, 6, 1), None, (date(2026, 1, 1), date(2026, 12, 31))),
    ("yearly", date(2025, 8, 1), "FY", (date(2026, 7, 1), date(2027, 6, 30))),
    ("annual", date(2025, 3, 1), "fiscal year", (date(2025, 7, 1), date(2026, 6, 30))),
])
def test_next_compliance_period(frequency, reference, duration, expected):
    assert next_compliance_period(frequency, reference, duration) == CompliancePeriod(*expected)


def test_unknown_frequency_has_no_next_period():
    assert next_compliance_period("fortnightly-ish", date(2025, 1, 1)) is None
