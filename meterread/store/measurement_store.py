"""Meter Reader — Measurement Store.

All reads and writes of the ``measurement`` table go through here. Writes are
single conditional statements so concurrent requests cannot both succeed:
inserts rely on the unique ``period_key`` and confirmation is a
compare-and-set on ``confirmed``.
"""

from typing import List, Optional

from sqlalchemy import extract, func, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, col, select

from meterread.core.errors import DuplicateReportError, StoreError
from meterread.core.logging import get_logger
from meterread.models.measurement_models import Measurement, MeasureType

logger = get_logger("store")

# PostgreSQL names the constraint; SQLite names the column
PERIOD_CONSTRAINT = "uq_measurement_period"


def count_in_period(
    session: Session,
    measure_type: MeasureType,
    year: int,
    month: int,
    customer_code: Optional[str] = None,
) -> int:
    """Count readings of ``measure_type`` whose billing date falls in year/month."""
    query = (
        select(func.count(col(Measurement.uuid)))
        .where(extract("year", col(Measurement.datetime)) == year)
        .where(extract("month", col(Measurement.datetime)) == month)
        .where(Measurement.type == measure_type.value)
    )
    if customer_code is not None:
        query = query.where(Measurement.customer_code == customer_code)
    try:
        return session.exec(query).one()
    except SQLAlchemyError as e:
        raise StoreError(f"Period lookup failed: {e}") from e


def _violates_period_key(error: IntegrityError) -> bool:
    """True when the unique billing-period key, not another constraint, was hit."""
    message = str(error.orig)
    return PERIOD_CONSTRAINT in message or "measurement.period_key" in message


def insert_measurement(session: Session, measurement: Measurement) -> Measurement:
    """Insert a new reading, rejecting it if its period is already taken."""
    measure_uuid, measure_type, key = measurement.uuid, measurement.type, measurement.period_key
    session.add(measurement)
    try:
        session.commit()
    except IntegrityError as e:
        session.rollback()
        if not _violates_period_key(e):
            raise StoreError(f"Insert of {measure_uuid} failed: {e}") from e
        logger.warning(
            f"Insert rejected for period {key}",
            extra={"measure_uuid": measure_uuid},
        )
        raise DuplicateReportError(
            f"There is already a reading for the type {measure_type} "
            f"for the month entered."
        ) from e
    except SQLAlchemyError as e:
        session.rollback()
        raise StoreError(f"Insert failed: {e}") from e
    session.refresh(measurement)
    return measurement


def get_measurement(session: Session, measure_uuid: str) -> Optional[Measurement]:
    try:
        return session.get(Measurement, measure_uuid)
    except SQLAlchemyError as e:
        raise StoreError(f"Lookup failed: {e}") from e


def confirm_if_unconfirmed(session: Session, measure_uuid: str, value: int) -> bool:
    """Set confirmed=true and overwrite value, only if still unconfirmed.

    Returns True when this call performed the transition.
    """
    statement = (
        update(Measurement)
        .where(col(Measurement.uuid) == measure_uuid)
        .where(col(Measurement.confirmed) == False)  # noqa: E712
        .values(confirmed=True, value=value)
    )
    try:
        result = session.connection().execute(statement)
        session.commit()
    except SQLAlchemyError as e:
        session.rollback()
        raise StoreError(f"Confirmation update failed: {e}") from e
    return result.rowcount == 1


def list_for_customer(
    session: Session,
    customer_code: str,
    measure_type: Optional[MeasureType] = None,
) -> List[Measurement]:
    query = select(Measurement).where(Measurement.customer_code == customer_code)
    if measure_type is not None:
        query = query.where(Measurement.type == measure_type.value)
    query = query.order_by(col(Measurement.datetime), col(Measurement.uuid))
    try:
        return list(session.exec(query).all())
    except SQLAlchemyError as e:
        raise StoreError(f"Listing failed: {e}") from e
