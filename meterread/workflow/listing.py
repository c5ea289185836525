"""Meter Reader — Listing Query."""

from typing import List, Optional

from sqlmodel import Session

from meterread.core.errors import InvalidTypeError, MeasuresNotFoundError
from meterread.models.measurement_models import MeasureSummary, MeasureType
from meterread.store.measurement_store import list_for_customer


def parse_measure_type(raw: Optional[str]) -> Optional[MeasureType]:
    """Map a case-insensitive query value onto MeasureType. None passes through."""
    if raw is None:
        return None
    try:
        return MeasureType(raw.strip().upper())
    except ValueError:
        raise InvalidTypeError(
            "Invalid value to parameter measure_type. Expected values WATER | GAS."
        )


def list_measurements(
    session: Session,
    customer_code: str,
    measure_type: Optional[MeasureType] = None,
) -> List[MeasureSummary]:
    """All readings for a customer, oldest billing date first.

    An empty result is reported as MeasuresNotFoundError, not an empty list.
    """
    records = list_for_customer(session, customer_code, measure_type)
    if not records:
        raise MeasuresNotFoundError("No measure readings found for this customer.")
    return [MeasureSummary.from_record(record) for record in records]
