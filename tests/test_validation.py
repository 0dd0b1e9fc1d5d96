import pytest

from errors import ValidationError
from utils import parse_mark, validate_student_payload

SUBJECTS = ("tamil", "english", "maths", "science", "social")


def test_valid_payload_is_cleaned(make_payload):
    payload = make_payload(name="  Asha  ", reg=" R1 ")
    payload["extra"] = "ignored"
    record = validate_student_payload(payload, SUBJECTS)
    assert record == {
        "studentName": "Asha",
        "registerNumber": "R1",
        "tamil": 80, "english": 75, "maths": 90, "science": 65, "social": 70,
    }


def test_string_marks_are_coerced(make_payload):
    record = validate_student_payload(make_payload(marks=("80", " 75", "90", "65", "70")), SUBJECTS)
    assert record["english"] == 75


def test_integral_float_is_accepted():
    assert parse_mark(85.0) == 85


@pytest.mark.parametrize("value", ["abc", "85.5", 85.5, True, [80], {}, float("nan"), "1_0", "\u0661\u0660", "+5", "8 5"])
def test_non_integer_marks_rejected(value):
    with pytest.raises(ValueError):
        parse_mark(value)


@pytest.mark.parametrize("value", [-1, 101, "150"])
def test_out_of_range_marks_rejected(value):
    with pytest.raises(ValueError):
        parse_mark(value)


def test_missing_name_is_reported(make_payload):
    payload = make_payload()
    del payload["studentName"]
    with pytest.raises(ValidationError) as exc:
        validate_student_payload(payload, SUBJECTS)
    assert "studentName" in exc.value.details
    assert exc.value.message == "Please provide all required fields."


def test_blank_register_number_is_reported(make_payload):
    with pytest.raises(ValidationError) as exc:
        validate_student_payload(make_payload(reg="   "), SUBJECTS)
    assert "registerNumber" in exc.value.details


def test_every_missing_mark_is_reported(make_payload):
    payload = make_payload()
    del payload["maths"]
    payload["social"] = None
    with pytest.raises(ValidationError) as exc:
        validate_student_payload(payload, SUBJECTS)
    assert set(exc.value.details) == {"maths", "social"}


def test_bad_mark_message(make_payload):
    with pytest.raises(ValidationError) as exc:
        validate_student_payload(make_payload(marks=(80, 75, "ninety", 65, 70)), SUBJECTS)
    assert exc.value.details == {"maths": "maths mark must be a whole number."}
    assert exc.value.message == "Please correct the highlighted marks."


@pytest.mark.parametrize("payload", [None, [], "student"])
def test_non_object_body_rejected(payload):
    with pytest.raises(ValidationError):
        validate_student_payload(payload, SUBJECTS)


def test_custom_subjects(make_payload):
    subjects = ("subject1", "subject2", "subject3", "subject4", "subject5")
    record = validate_student_payload(make_payload(subjects=subjects), subjects)
    assert record["subject5"] == 70
