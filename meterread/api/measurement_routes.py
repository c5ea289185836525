"""Meter Reader — Measurement API Routes."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlmodel import Session

from meterread.config import Settings
from meterread.database import get_session
from meterread.models.measurement_models import ConfirmResult, IntakeResult, MeasureListing
from meterread.recognizer.base_recognizer import ReadingRecognizer
from meterread.workflow.confirmation import ConfirmationRequest, confirm_measurement
from meterread.workflow.intake import intake_measurement
from meterread.workflow.listing import list_measurements, parse_measure_type
from meterread.workflow.validator import MeasurementSubmission
from meterread.core.logging import get_logger

logger = get_logger("api.measurements")

router = APIRouter(tags=["Measurements"])


# ── Dependencies ──


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_recognizer(request: Request) -> Optional[ReadingRecognizer]:
    """The recognizer built at startup, or None if no provider is configured."""
    return getattr(request.app.state, "recognizer", None)


# ── Endpoints ──


@router.post("/upload", response_model=IntakeResult)
async def upload_measurement(
    submission: MeasurementSubmission,
    session: Session = Depends(get_session),
    recognizer: Optional[ReadingRecognizer] = Depends(get_recognizer),
    settings: Settings = Depends(get_settings),
):
    """Recognize a meter photo and store the reading unconfirmed."""
    return await intake_measurement(submission, session, recognizer, settings)


@router.patch("/confirm", response_model=ConfirmResult)
async def confirm(
    confirmation: ConfirmationRequest,
    session: Session = Depends(get_session),
):
    """Confirm (and optionally correct) a recognized reading."""
    confirm_measurement(session, confirmation.measure_uuid, confirmation.confirmed_value)
    return ConfirmResult(success=True)


@router.get("/{customer_code}/list", response_model=MeasureListing)
async def list_customer_measurements(
    customer_code: str,
    measure_type: Optional[str] = Query(None, description="WATER or GAS, any case"),
    session: Session = Depends(get_session),
):
    """List a customer's readings, optionally only one meter type."""
    measures = list_measurements(session, customer_code, parse_measure_type(measure_type))
    logger.info(
        f"Listed {len(measures)} readings",
        extra={"customer_code": customer_code, "endpoint": "list"},
    )
    return MeasureListing(customer_code=customer_code, measures=measures)
