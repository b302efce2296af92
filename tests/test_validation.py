import math

import pytest

from models.schema import parse_schema
from services.validation import is_blank, is_date, is_numeric, validate_submission


def field(fid, ftype="text", **extra):
    return {"id": fid, "type": ftype, "label": fid.title(), **extra}


def test_valid_payload_has_no_errors():
    schema = [field("name", required=True), field("email", "email", required=True)]
    assert validate_submission({"name": "Ann", "email": "a@b.co"}, schema) == []


def test_required_missing_reports_label_and_id():
    schema = [field("name", required=True), field("email", "email", required=True)]
    errors = validate_submission({"email": "a@b.co"}, schema)
    assert errors == ["Field 'Name' (name) is required"]


@pytest.mark.parametrize("value", [None, ""])
def test_required_empty_values(value):
    errors = validate_submission({"name": value}, [field("name", required=True)])
    assert errors == ["Field 'Name' (name) is required"]


def test_required_false_checkbox_is_present():
    assert validate_submission({"agree": False}, [field("agree", "checkbox", required=True)]) == []


def test_missing_label_falls_back_to_id():
    schema = [{"id": "q1", "type": "text", "required": True}]
    assert validate_submission({}, schema) == ["Field 'q1' (q1) is required"]


@pytest.mark.parametrize("value", [None, "", False, 0])
def test_optional_blank_values_skip_type_checks(value):
    schema = [field("email", "email"), field("color", "select", options=["red"])]
    assert validate_submission({"email": value, "color": value}, schema) == []


def test_all_errors_are_collected_in_schema_order():
    schema = [
        field("email", "email"),
        field("age", "number"),
        field("when", "date"),
        field("agree", "checkbox"),
    ]
    errors = validate_submission(
        {"email": "nope", "age": "abc", "when": "not a date", "agree": "yes"},
        schema,
    )
    assert errors == [
        "Field 'Email' must be a valid email address",
        "Field 'Age' must be a valid number",
        "Field 'When' must be a valid date",
        "Field 'Agree' must be a boolean value (true or false)",
    ]


def test_choice_membership():
    schema = [field("color", "radio", options=["red", "blue"])]
    assert validate_submission({"color": "red"}, schema) == []
    assert validate_submission({"color": "green"}, schema) == ["Field 'Color' must be one of: red, blue"]


def test_choice_without_options_accepts_anything():
    assert validate_submission({"color": "green"}, [field("color", "select")]) == []


def test_multiselect_rules():
    schema = [field("tags", "multiselect", options=["a", "b"])]
    assert validate_submission({"tags": ["a", "b"]}, schema) == []
    assert validate_submission({"tags": "a"}, schema) == ["Field 'Tags' must be an array"]
    assert validate_submission({"tags": ["a", "x", "y"]}, schema) == [
        "Field 'Tags' contains invalid options: x, y"
    ]


def test_empty_list_is_not_blank():
    schema = [field("tags", "multi-dropdown", options=["a"], required=True)]
    assert validate_submission({"tags": []}, schema) == []


def test_decorative_fields_are_ignored():
    schema = [field("heading", "title", required=True), field("hr", "separator", required=True)]
    assert validate_submission({}, schema) == []


def test_multistep_schema_is_flattened():
    steps = [
        {"id": "s1", "fields": [field("first", required=True)]},
        {"id": "s2", "fields": [field("email", "email", required=True)]},
    ]
    errors = validate_submission({"first": "Ann"}, steps)
    assert errors == ["Field 'Email' (email) is required"]

    typed = parse_schema(steps, is_multistep=True)
    assert validate_submission({"first": "Ann"}, typed) == errors


def test_unknown_field_type_is_not_checked():
    assert validate_submission({"sig": {"x": 1}}, [field("sig", "signature")]) == []


def test_validation_is_deterministic():
    schema = [field("age", "number"), field("email", "email", required=True)]
    payload = {"age": "x"}
    assert validate_submission(payload, schema) == validate_submission(payload, schema)


@pytest.mark.parametrize("value", ["42", " 3.5 ", "-1e3", "0x1f", "Infinity", "", True, [], ["7"], 12])
def test_is_numeric_accepts(value):
    assert is_numeric(value)


@pytest.mark.parametrize("value", ["abc", "1,5", "12px", [1, 2], {"a": 1}, math.nan])
def test_is_numeric_rejects(value):
    assert not is_numeric(value)


@pytest.mark.parametrize("value", ["2024-01-01", "2024-01-01T10:00:00Z", "Tue, 01 Jan 2024 10:00:00 GMT", "01/31/2024", "March 5, 2024", 1700000000000])
def test_is_date_accepts(value):
    assert is_date(value)


@pytest.mark.parametrize("value", ["not a date", "2024-13-45", True, [], " "])
def test_is_date_rejects(value):
    assert not is_date(value)


def test_is_blank():
    assert is_blank(0) and is_blank("") and is_blank(None) and is_blank(False) and is_blank(math.nan)
    assert not is_blank([]) and not is_blank("0") and not is_blank({})


def test_wrongly_typed_field_attributes_are_still_enforced():
    schema = [
        {"id": "email", "type": "email", "label": 5, "required": True},
        {"id": "color", "type": "select", "label": "Color", "required": True, "options": "x"},
    ]
    assert validate_submission({}, schema) == [
        "Field '5' (email) is required",
        "Field 'Color' (color) is required",
    ]
    # a non-list options blob only disables the membership check
    assert validate_submission({"email": "a@b.co", "color": "anything"}, schema) == []


def test_required_uses_truthiness():
    schema = [{"id": "a", "required": None}, {"id": "b", "required": 1}]
    assert validate_submission({}, schema) == ["Field 'b' (b) is required"]
