"""Compliance period helpers.

Frequencies are free text as entered by practice staff ("Quarterly",
"Semi-Annual", "5 Years", "One Time", ...), so matching is by keyword.
"""

import calendar
import logging
import re
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Optional

logger = logging.getLogger(__name__)

FISCAL_YEAR_START_MONTH = 7


@dataclass(frozen=True)
class CompliancePeriod:
    start_date: date
    end_date: date


def _month_end(year: int, month: int) -> date:
    return date(year, month, calendar.monthrange(year, month)[1])


def _add_months(year: int, month: int, months: int) -> tuple[int, int]:
    index = year * 12 + (month - 1) + months
    return index // 12, index % 12 + 1


def _multi_year_span(frequency: str) -> int:
    """2..5 for "2 years" ... "5 years", otherwise 1."""
    match = re.search(r"([2-5])", frequency)
    return int(match.group(1)) if match else 1


def _is_semi_annual(frequency: str) -> bool:
    return "semi" in frequency or "bi-annual" in frequency or "biannual" in frequency


def _is_annual(frequency: str) -> bool:
    return "annual" in frequency or "year" in frequency


def _is_one_time(frequency: str) -> bool:
    return "one time" in frequency or "one-time" in frequency or "once" in frequency


def format_compliance_period(frequency: str, start_date: date) -> str:
    """
    Human label for the compliance period starting at ``start_date``.

    >>> format_compliance_period("Quarterly", date(2025, 5, 1))
    'Q2 2025'
    >>> format_compliance_period("3 Years", date(2025, 1, 1))
    '2025-2027'
    """
    frequency = (frequency or "").lower()
    year = start_date.year

    if "quarter" in frequency:
        return f"Q{(start_date.month - 1) // 3 + 1} {year}"
    if _is_semi_annual(frequency):
        return f"H{1 if start_date.month <= 6 else 2} {year}"
    if _is_annual(frequency):
        span = _multi_year_span(frequency)
        if span > 1:
            return f"{year}-{year + span - 1}"
        return str(year)

    month_label = start_date.strftime("%B %Y")
    if _is_one_time(frequency):
        return f"{month_label} (One-time)"
    return month_label


def compliance_end_date(frequency: str, start_date: date) -> date:
    """Last day of the compliance period starting at ``start_date``."""
    frequency = (frequency or "").lower()

    if "quarter" in frequency:
        quarter_end_month = ((start_date.month - 1) // 3 + 1) * 3
        return _month_end(start_date.year, quarter_end_month)
    if _is_semi_annual(frequency):
        year, month = _add_months(start_date.year, start_date.month, 5)
        return _month_end(year, month)
    if _is_annual(frequency):
        return date(start_date.year + _multi_year_span(frequency) - 1, 12, 31)
    if _is_one_time(frequency):
        return start_date
    return _month_end(start_date.year, start_date.month)


def next_compliance_period(
    frequency: str,
    reference: date,
    duration: Optional[str] = None,
) -> Optional[CompliancePeriod]:
    """
    The next period window after ``reference``.

    ``duration`` refines monthly ("previous" selects the month before the
    reference) and annual ("fy" / "fiscal year" selects a July-start fiscal
    year). Unknown frequencies return None.
    """
    frequency = (frequency or "").strip().lower()
    duration = (duration or "").strip().lower()
    year, month = reference.year, reference.month

    if frequency == "daily":
        start = reference + timedelta(days=1)
        return CompliancePeriod(start, start)

    if frequency == "weekly":
        start = reference + timedelta(days=1)
        return CompliancePeriod(start, start + timedelta(days=6))

    if frequency == "biweekly":
        start = reference + timedelta(days=1)
        return CompliancePeriod(start, start + timedelta(days=13))

    if frequency == "monthly":
        if duration == "previous":
            prev_year, prev_month = _add_months(year, month, -1)
            return CompliancePeriod(date(prev_year, prev_month, 1), _month_end(prev_year, prev_month))
        next_year, next_month = _add_months(year, month, 1)
        return CompliancePeriod(date(next_year, next_month, 1), _month_end(next_year, next_month))

    if frequency == "quarterly":
        quarter_start = ((month - 1) // 3) * 3 + 1
        next_year, next_month = _add_months(year, quarter_start, 3)
        end_year, end_month = _add_months(next_year, next_month, 2)
        return CompliancePeriod(date(next_year, next_month, 1), _month_end(end_year, end_month))

    if frequency in ("semi-annual", "biannual"):
        if month <= 6:
            return CompliancePeriod(date(year, 7, 1), date(year, 12, 31))
        return CompliancePeriod(date(year + 1, 1, 1), date(year + 1, 6, 30))

    if frequency in ("annual", "yearly"):
        if duration in ("fy", "fiscal year"):
            current_fy = year if month >= FISCAL_YEAR_START_MONTH else year - 1
            next_fy = current_fy + 1
            return CompliancePeriod(
                date(next_fy, FISCAL_YEAR_START_MONTH, 1),
                date(next_fy + 1, FISCAL_YEAR_START_MONTH - 1, 30),
            )
        return CompliancePeriod(date(year + 1, 1, 1), date(year + 1, 12, 31))

    logger.warning(f"Unsupported compliance frequency: {frequency}")
    return None
