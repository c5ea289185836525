import pytest

from meterread.core.errors import InvalidDataError
from meterread.models.measurement_models import MeasureType
from meterread.workflow.validator import validate_submission

from conftest import make_submission


def test_valid_submission():
    submission = validate_submission(make_submission(measure_type="GAS"))
    assert submission.measure_type is MeasureType.GAS
    assert submission.customer_code == "cust123"


def test_every_field_reports_one_message():
    with pytest.raises(InvalidDataError) as exc_info:
        validate_submission(
            {"image": "", "customer_code": "", "measure_datetime": "", "measure_type": "water"}
        )

    errors = exc_info.value.description
    assert set(errors) == {"image", "customer_code", "measure_datetime", "measure_type"}
    assert all(len(messages) == 1 for messages in errors.values())
    assert errors["image"] == ["Image Base64 can not be empty!"]
    assert errors["customer_code"] == ["Customer Code can not be empty!"]
    assert errors["measure_datetime"] == ["Datetime can not be empty!"]
    assert exc_info.value.error_code == "INVALID_DATA"
    assert exc_info.value.status_code == 400


def test_only_violated_fields_are_reported():
    with pytest.raises(InvalidDataError) as exc_info:
        validate_submission(make_submission(measure_datetime="2024-13-45"))
    assert exc_info.value.description == {"measure_datetime": ["Invalid datetime format"]}


@pytest.mark.parametrize(
    "image",
    [
        "not-a-data-uri",
        "data:image/bmp;base64,AAAA",
        "data:text/plain;base64,AAAA",
        "data:image/png;base64,abc",
        "data:image/png;base64,",
        "iVBORw0KGgo=",
    ],
)
def test_malformed_images(image):
    with pytest.raises(InvalidDataError) as exc_info:
        validate_submission(make_submission(image=image))
    assert exc_info.value.description == {"image": ["Invalid Base64 image format"]}


def test_whitespace_customer_code_is_empty():
    with pytest.raises(InvalidDataError) as exc_info:
        validate_submission(make_submission(customer_code="   "))
    assert exc_info.value.description == {"customer_code": ["Customer Code can not be empty!"]}


@pytest.mark.parametrize("measure_type", ["water", "Gas", "ELECTRIC", ""])
def test_measure_type_is_case_sensitive(measure_type):
    with pytest.raises(InvalidDataError) as exc_info:
        validate_submission(make_submission(measure_type=measure_type))
    assert list(exc_info.value.description) == ["measure_type"]


def test_missing_fields():
    with pytest.raises(InvalidDataError) as exc_info:
        validate_submission({})
    assert set(exc_info.value.description) == {
        "image",
        "customer_code",
        "measure_datetime",
        "measure_type",
    }


def test_trailing_newline_after_payload_is_rejected():
    with pytest.raises(InvalidDataError) as exc_info:
        validate_submission(make_submission(image=make_submission()["image"] + "\n"))
    assert exc_info.value.description == {"image": ["Invalid Base64 image format"]}
