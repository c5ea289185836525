from datetime import date

import pytest

from sqlmodel import Session, select

from meterread.core.errors import (
    ConfirmationDuplicateError,
    DuplicateReportError,
    MeasureNotFoundError,
    StoreError,
)
from meterread.models.measurement_models import Measurement, MeasureType
from meterread.store.measurement_store import (
    confirm_if_unconfirmed,
    get_measurement,
    insert_measurement,
    list_for_customer,
)
from meterread.workflow.confirmation import confirm_measurement
from meterread.workflow.duplicate_guard import period_key


def _insert(session, uuid, billing_date, measure_type=MeasureType.WATER, customer="cust123"):
    return insert_measurement(
        session,
        Measurement(
            uuid=uuid,
            value=100,
            datetime=billing_date,
            type=measure_type.value,
            customer_code=customer,
            url=None,
            period_key=period_key(measure_type, billing_date, customer),
        ),
    )


def test_confirm_is_compare_and_set(session):
    _insert(session, "r1", date(2024, 3, 15))

    assert confirm_if_unconfirmed(session, "r1", 250) is True
    assert confirm_if_unconfirmed(session, "r1", 300) is False

    record = get_measurement(session, "r1")
    assert record.confirmed is True
    assert record.value == 250


def test_confirm_unknown_uuid(session):
    assert confirm_if_unconfirmed(session, "nope", 1) is False
    with pytest.raises(MeasureNotFoundError) as exc_info:
        confirm_measurement(session, "nope", 1)
    assert exc_info.value.error_code == "MEASURE_NOT_FOUND"


def test_confirm_twice_is_an_error(session):
    _insert(session, "r1", date(2024, 3, 15))

    confirm_measurement(session, "r1", 42)
    with pytest.raises(ConfirmationDuplicateError):
        confirm_measurement(session, "r1", 43)

    assert get_measurement(session, "r1").value == 42


def test_list_for_customer_filters_and_orders(session):
    _insert(session, "april", date(2024, 4, 1))
    _insert(session, "march", date(2024, 3, 1))
    _insert(session, "gas", date(2024, 3, 1), MeasureType.GAS)
    _insert(session, "someone-else", date(2024, 3, 1), customer="other")

    assert [r.uuid for r in list_for_customer(session, "cust123", MeasureType.WATER)] == [
        "march",
        "april",
    ]
    assert {r.uuid for r in list_for_customer(session, "cust123")} == {"march", "april", "gas"}
    assert list_for_customer(session, "nobody") == []


def test_identifier_collision_is_a_store_error(engine, session):
    _insert(session, "r1", date(2024, 3, 15))

    with Session(engine) as other_session:
        with pytest.raises(StoreError) as exc_info:
            _insert(other_session, "r1", date(2024, 4, 15))

    assert not isinstance(exc_info.value, DuplicateReportError)
    assert exc_info.value.error_code == "INTERNAL_ERROR"
    assert [r.uuid for r in session.exec(select(Measurement)).all()] == ["r1"]


def test_period_collision_is_a_double_report(engine, session):
    _insert(session, "r1", date(2024, 3, 15))

    with Session(engine) as other_session:
        with pytest.raises(DuplicateReportError):
            _insert(other_session, "r2", date(2024, 3, 1))
