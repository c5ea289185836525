"""Meter Reader — Measurement Validator.

``MeasurementSubmission`` is both the FastAPI request body for ``POST
/upload`` and the model behind ``validate_submission``. Each field reports at
most one message.
"""

import base64
import binascii
import re
from typing import Any, Dict

from pydantic import BaseModel, ValidationError, field_validator
from pydantic_core import PydanticCustomError

from meterread.core.dates import is_valid_date
from meterread.core.errors import InvalidDataError, format_validation_errors
from meterread.models.measurement_models import MeasureType

IMAGE_DATA_URI = re.compile(
    r"^data:image/(?P<subtype>jpeg|jpg|png|webp|gif);base64,(?P<payload>[A-Za-z0-9+/=]+)\Z"
)


def _require_text(value: str, message: str) -> str:
    if not value.strip():
        raise PydanticCustomError("empty", message)
    return value


class MeasurementSubmission(BaseModel):
    """Request body for POST /upload."""

    image: str
    """Base64 data URI, e.g. ``data:image/png;base64,iVBOR...``."""
    customer_code: str
    measure_datetime: str
    measure_type: MeasureType

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "image": "data:image/jpeg;base64,/9j/4AAQSkZJRg...",
                    "customer_code": "cust123",
                    "measure_datetime": "15/03/2024",
                    "measure_type": "WATER",
                }
            ]
        }
    }

    @field_validator("image")
    @classmethod
    def check_image(cls, value: str) -> str:
        _require_text(value, "Image Base64 can not be empty!")
        match = IMAGE_DATA_URI.match(value)
        if match is None:
            raise PydanticCustomError("image_format", "Invalid Base64 image format")
        try:
            base64.b64decode(match.group("payload"), validate=True)
        except (binascii.Error, ValueError):
            raise PydanticCustomError("image_format", "Invalid Base64 image format")
        return value

    @field_validator("customer_code")
    @classmethod
    def check_customer_code(cls, value: str) -> str:
        return _require_text(value, "Customer Code can not be empty!")

    @field_validator("measure_datetime")
    @classmethod
    def check_measure_datetime(cls, value: str) -> str:
        _require_text(value, "Datetime can not be empty!")
        if not is_valid_date(value):
            raise PydanticCustomError("datetime_format", "Invalid datetime format")
        return value


def validate_submission(payload: Dict[str, Any]) -> MeasurementSubmission:
    """Validate a raw intake payload.

    Raises:
        InvalidDataError: with a field -> messages map covering every
            violated field.
    """
    try:
        return MeasurementSubmission.model_validate(payload)
    except ValidationError as e:
        raise InvalidDataError(format_validation_errors(e.errors())) from e
