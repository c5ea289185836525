"""Meter Reader — Duplicate Guard.

A billing period is (year, month) of the reading's date. Day and time never
take part in the comparison.
"""

from datetime import date
from typing import Optional

from sqlmodel import Session

from meterread.models.measurement_models import MeasureType
from meterread.store.measurement_store import count_in_period


def has_existing(
    session: Session,
    measure_type: MeasureType,
    year: int,
    month: int,
    customer_code: Optional[str] = None,
) -> bool:
    """True if a reading of this type already exists for the period.

    ``customer_code=None`` checks across all customers.
    """
    return count_in_period(session, measure_type, year, month, customer_code) > 0


def period_key(
    measure_type: MeasureType,
    billing_date: date,
    customer_code: Optional[str] = None,
) -> str:
    """Unique store key matching the scope ``has_existing`` checks."""
    period = f"{measure_type.value}:{billing_date.year:04d}-{billing_date.month:02d}"
    if customer_code is None:
        return period
    return f"{customer_code}:{period}"
