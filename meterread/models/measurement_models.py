"""Meter Reader — Measurement Models."""

from datetime import date
from enum import Enum
from typing import Annotated, List, Optional

from pydantic import BaseModel, Field as PydanticField
from sqlalchemy import BigInteger
from sqlmodel import SQLModel, Field, UniqueConstraint

# Range of the bigint `value` column
BIGINT_MIN = -(2**63)
BIGINT_MAX = 2**63 - 1

ReadingValue = Annotated[int, PydanticField(strict=True, ge=BIGINT_MIN, le=BIGINT_MAX)]
"""A meter value: a JSON integer (no strings, bools or floats) that fits the column."""


class MeasureType(str, Enum):
    """Kinds of utility meter a reading can come from."""

    WATER = "WATER"
    GAS = "GAS"


# ─────────────────────────────────────────────
# DATABASE MODEL — One row per meter reading
# ─────────────────────────────────────────────


class Measurement(SQLModel, table=True):
    """A recognized meter reading.

    ``uuid`` is the identifier handed out by the recognizer. ``period_key``
    encodes (scope, type, year, month) and is unique, so a second reading for
    the same billing period is rejected by the database itself.
    """

    __tablename__ = "measurement"
    __table_args__ = (
        UniqueConstraint("period_key", name="uq_measurement_period"),
    )

    uuid: str = Field(primary_key=True, description="Recognizer-assigned identifier")
    value: Optional[int] = Field(default=None, sa_type=BigInteger)
    datetime: date = Field(index=True, description="Billing-period date")
    type: str = Field(index=True, description="WATER | GAS")
    confirmed: bool = Field(default=False)
    customer_code: str = Field(index=True)
    url: Optional[str] = Field(default=None, description="Stored image reference")
    period_key: str = Field(description="Duplicate-detection key")


# ─────────────────────────────────────────────
# PYDANTIC SCHEMAS — HTTP responses
# ─────────────────────────────────────────────


class IntakeResult(BaseModel):
    """Response for POST /upload."""

    image_url: Optional[str] = None
    measure_value: int
    measure_uuid: str


class ConfirmResult(BaseModel):
    """Response for PATCH /confirm."""

    success: bool = True


class MeasureSummary(BaseModel):
    """One reading in a customer listing."""

    measure_uuid: str
    measure_datetime: date
    measure_type: MeasureType
    has_confirmed: bool
    image_url: Optional[str] = None

    @classmethod
    def from_record(cls, record: Measurement) -> "MeasureSummary":
        return cls(
            measure_uuid=record.uuid,
            measure_datetime=record.datetime,
            measure_type=MeasureType(record.type),
            has_confirmed=record.confirmed,
            image_url=record.url,
        )


class MeasureListing(BaseModel):
    """Response for GET /{customer_code}/list."""

    customer_code: str
    measures: List[MeasureSummary]
