from models.schema import MultiStepSchema, SingleStepSchema, parse_embedding, parse_schema, parse_settings
from models.validators import validate_form
from services.example_request import example_body, example_request
from services.presets import get_preset, list_presets


def test_parse_single_and_multi_step():
    single = parse_schema([{"id": "a", "type": "text"}], is_multistep=False)
    assert isinstance(single, SingleStepSchema)
    assert [f.id for f in single.flat_fields()] == ["a"]

    multi = parse_schema(
        [{"id": "s1", "fields": [{"id": "a"}]}, {"id": "s2", "fields": [{"id": "b"}, {"id": "c"}]}],
        is_multistep=True,
    )
    assert isinstance(multi, MultiStepSchema)
    assert [f.id for f in multi.flat_fields()] == ["a", "b", "c"]


def test_missing_schema_is_none_and_bad_fields_are_skipped():
    assert parse_schema(None, is_multistep=False) is None
    schema = parse_schema([{"id": "ok"}, {"type": "text"}, "junk"], is_multistep=False)
    assert [f.id for f in schema.flat_fields()] == ["ok"]


def test_settings_and_embedding_defaults():
    assert parse_settings(None).allow_multiple_submissions is False
    assert parse_settings({"allowMultipleSubmissions": True}).allow_multiple_submissions is True
    embedding = parse_embedding({"requireOrigin": True, "allowedOrigins": ["https://x.io"]})
    assert embedding.require_origin and embedding.allowed_origins == ["https://x.io"]


def test_example_body_per_type():
    schema = parse_schema(
        [
            {"id": "name", "type": "text", "label": "Name"},
            {"id": "bio", "type": "textarea", "label": "Bio", "placeholder": "About you"},
            {"id": "mail", "type": "email"},
            {"id": "n", "type": "number"},
            {"id": "d", "type": "date"},
            {"id": "pick", "type": "radio", "options": ["x", "y"]},
            {"id": "empty", "type": "select"},
            {"id": "many", "type": "multiselect", "options": ["a", "b", "c"]},
            {"id": "ok", "type": "checkbox"},
            {"id": "hr", "type": "separator"},
        ],
        is_multistep=False,
    )
    body = example_body(schema)
    assert body["metadata"] == {"source": "api", "version": "1.0"}
    assert body["data"] == {
        "name": "Sample Name",
        "bio": "About you",
        "mail": "user@example.com",
        "n": 123,
        "d": "2024-01-01",
        "pick": "x",
        "empty": "Option 1",
        "many": ["a", "b"],
        "ok": True,
    }


def test_example_request_shape():
    schema = parse_schema([{"id": "a"}], is_multistep=False)
    request = example_request("f1", schema)
    assert request["method"] == "POST"
    assert request["url"] == "/api/forms/f1/submit"
    assert request["headers"] == {"Content-Type": "application/json"}


def test_form_model_requires_title_and_matching_schema():
    ok, errors = validate_form({"title": "", "fields": []})
    assert not ok
    ok, _ = validate_form({"title": "T", "isMultistep": True, "fields": []})
    assert not ok
    ok, model = validate_form({"title": "<b>Hello</b>", "fields": []})
    assert ok and model.title == "Hello"


def test_presets_are_valid_forms():
    presets = list_presets()
    assert {p["id"] for p in presets} == {"contact-form", "survey-form", "newsletter-signup", "onboarding-form"}
    onboarding = get_preset("onboarding-form")
    ok, _ = validate_form({"title": onboarding["title"], "isMultistep": True, "steps": onboarding["steps"]})
    assert ok
    assert get_preset("missing") is None


def test_stored_fields_are_parsed_leniently():
    schema = parse_schema(
        [{"id": 1, "title": 5, "fields": [{"id": 2, "label": 3.5, "required": "yes", "styling": "bold", "options": "x"}]}],
        is_multistep=True,
    )
    step = schema.steps[0]
    assert step.id == "1" and step.title == "5"
    field = step.fields[0]
    assert field.id == "2"
    assert field.label == "3.5"
    assert field.required is True
    assert field.styling is None and field.options is None


def test_form_model_rejects_fields_without_id():
    ok, _ = validate_form({"title": "T", "fields": [{"type": "text", "label": "No id"}]})
    assert not ok
    ok, _ = validate_form({"title": "T", "isMultistep": True, "steps": [{"id": "s1", "fields": [{"label": "x"}]}]})
    assert not ok
    ok, _ = validate_form({"title": "T", "isMultistep": True, "steps": [{"id": "s1"}]})
    assert not ok


def test_form_model_strips_every_tag():
    ok, model = validate_form({"title": "<i>Intro</i> <script>x</script>", "description": "<b>bold</b>", "fields": []})
    assert ok
    assert model.title == "Intro x"
    assert model.description == "bold"
