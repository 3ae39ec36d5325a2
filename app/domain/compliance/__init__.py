"""Compliance period labels and scheduling windows."""

from .periods import (
    CompliancePeriod,
    compliance_end_date,
    format_compliance_period,
    next_compliance_period,
)

__all__ = [
    "CompliancePeriod",
    "compliance_end_date",
    "format_compliance_period",
    "next_compliance_period",
]
