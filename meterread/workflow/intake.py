"""Meter Reader — Intake Workflow.

Validate → normalize date → duplicate check → recognize → store.

Nothing is written before recognition succeeds, and the staged image file
is removed whichever step fails.
"""

import asyncio
import time
from typing import Optional

from sqlmodel import Session

from meterread.config import Settings
from meterread.core.dates import normalize_date
from meterread.core.errors import DuplicateReportError, InvalidDataError, RecognitionError
from meterread.core.logging import get_logger
from meterread.models.measurement_models import IntakeResult, Measurement
from meterread.recognizer.base_recognizer import ReadingRecognizer, RecognitionResult
from meterread.recognizer.staging import DecodedImage, decode_image, staged_image
from meterread.store.measurement_store import insert_measurement
from meterread.workflow.duplicate_guard import has_existing, period_key
from meterread.workflow.validator import MeasurementSubmission

logger = get_logger("workflow.intake")


async def _recognize(
    image: DecodedImage,
    recognizer: Optional[ReadingRecognizer],
    settings: Settings,
) -> RecognitionResult:
    if recognizer is None:
        raise RecognitionError("No recognizer configured")

    try:
        with staged_image(image, settings.staging_dir) as path:
            return await asyncio.wait_for(
                recognizer.recognize(path, image.mime_type),
                timeout=settings.recognition_timeout_seconds,
            )
    except asyncio.TimeoutError as e:
        raise RecognitionError(
            f"Recognition timed out after {settings.recognition_timeout_seconds}s"
        ) from e
    except OSError as e:
        raise RecognitionError(f"Could not stage image: {e}") from e


async def intake_measurement(
    submission: MeasurementSubmission,
    session: Session,
    recognizer: Optional[ReadingRecognizer],
    settings: Settings,
) -> IntakeResult:
    """Run a validated submission through recognition and store it unconfirmed.

    Raises:
        InvalidDataError: date cannot be normalized or image is too large.
        DuplicateReportError: a reading already exists for the period.
        RecognitionError: the recognizer failed, timed out or is missing.
        StoreError: the database failed.
    """
    billing_date = normalize_date(submission.measure_datetime)
    if billing_date is None:
        raise InvalidDataError({"measure_datetime": ["Invalid datetime format"]})

    image = decode_image(submission.image)
    if len(image.data) > settings.max_image_bytes:
        raise InvalidDataError(
            {"image": [f"Image exceeds the {settings.max_image_mb} MB limit"]}
        )

    scope = submission.customer_code if settings.duplicates_per_customer else None
    measure_type = submission.measure_type

    if has_existing(session, measure_type, billing_date.year, billing_date.month, scope):
        raise DuplicateReportError(
            f"There is already a reading for the type {measure_type.value} "
            f"for the month entered."
        )

    started = time.monotonic()
    recognition = await _recognize(image, recognizer, settings)
    logger.info(
        f"Recognized {measure_type.value} reading {recognition.value}",
        extra={
            "measure_uuid": recognition.identifier,
            "customer_code": submission.customer_code,
            "provider": recognizer.name,
            "duration_ms": round((time.monotonic() - started) * 1000),
        },
    )

    record = insert_measurement(
        session,
        Measurement(
            uuid=recognition.identifier,
            value=recognition.value,
            datetime=billing_date,
            type=measure_type.value,
            confirmed=False,
            customer_code=submission.customer_code,
            url=recognition.artifact_url,
            period_key=period_key(measure_type, billing_date, scope),
        ),
    )

    return IntakeResult(
        image_url=record.url,
        measure_value=record.value,
        measure_uuid=record.uuid,
    )
