"""Meter Reader — Confirmation Workflow."""

from pydantic import BaseModel, field_validator
from pydantic_core import PydanticCustomError
from sqlmodel import Session

from meterread.core.errors import ConfirmationDuplicateError, MeasureNotFoundError
from meterread.core.logging import get_logger
from meterread.models.measurement_models import ReadingValue
from meterread.store.measurement_store import confirm_if_unconfirmed, get_measurement

logger = get_logger("workflow.confirmation")


class ConfirmationRequest(BaseModel):
    """Request body for PATCH /confirm."""

    measure_uuid: str
    confirmed_value: ReadingValue

    @field_validator("measure_uuid")
    @classmethod
    def check_measure_uuid(cls, value: str) -> str:
        if not value.strip():
            raise PydanticCustomError("empty", "UUID can not be empty!")
        return value


def confirm_measurement(session: Session, measure_uuid: str, confirmed_value: int) -> None:
    """Mark a reading confirmed and store the corrected value.

    Confirmation happens once; a second call for the same reading is an
    error rather than a no-op.

    Raises:
        MeasureNotFoundError: no reading has this identifier.
        ConfirmationDuplicateError: the reading was already confirmed.
    """
    if confirm_if_unconfirmed(session, measure_uuid, confirmed_value):
        logger.info(
            f"Reading confirmed with value {confirmed_value}",
            extra={"measure_uuid": measure_uuid},
        )
        return

    if get_measurement(session, measure_uuid) is None:
        raise MeasureNotFoundError(f"Measure with UUID: {measure_uuid} not found.")
    raise ConfirmationDuplicateError(f"Measure with UUID: {measure_uuid} already confirmed.")
