import json

from conftest import ORG_HEADERS, contact_form

SECURITY_HEADERS = {
    "x-content-type-options": "nosniff",
    "x-frame-options": "DENY",
    "x-xss-protection": "1; mode=block",
    "cache-control": "no-store, no-cache, must-revalidate",
    "pragma": "no-cache",
}


def submit(client, form_id, body, headers=None):
    return client.post(f"/api/forms/{form_id}/submit", json=body, headers=headers or {})


def assert_security_headers(response):
    for name, value in SECURITY_HEADERS.items():
        assert response.headers[name] == value


def test_valid_submission_is_stored(client, create_form):
    form = create_form()
    response = submit(
        client,
        form["id"],
        {"data": {"name": "Ann", "email": "ann@example.com", "age": "31"}, "metadata": {"source": "test"}},
        headers={"x-forwarded-for": "10.0.0.1, 10.0.0.2", "user-agent": "pytest"},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Form submitted successfully"
    assert body["entryId"]
    assert_security_headers(response)

    entries = client.get(f"/api/forms/{form['id']}/entries", headers=ORG_HEADERS).json()["entries"]
    assert len(entries) == 1
    answers = entries[0]["answers"]
    assert answers["name"] == "Ann"
    assert answers["_metadata"]["ipAddress"] == "10.0.0.1"
    assert answers["_metadata"]["userAgent"] == "pytest"
    assert answers["_metadata"]["source"] == "test"
    assert "submittedAt" in answers["_metadata"]


def test_submission_is_sanitized_before_storage(client, create_form):
    form = create_form()
    response = submit(client, form["id"], {"data": {"name": "<script>x</script>", "email": "a@b.co", "x<y": "javascript:1"}})
    assert response.status_code == 200

    answers = client.get(f"/api/forms/{form['id']}/entries", headers=ORG_HEADERS).json()["entries"][0]["answers"]
    assert answers["name"] == "scriptx/script"
    assert answers["xy"] == "1"


def test_missing_required_field(client, create_form):
    form = create_form()
    response = submit(client, form["id"], {"data": {"email": "a@b.co"}})
    assert response.status_code == 400
    assert response.json() == {"error": "Validation failed", "details": ["Field 'Name' (name) is required"]}
    assert_security_headers(response)


def test_type_errors_are_all_reported(client, create_form):
    form = create_form()
    response = submit(client, form["id"], {"data": {"name": "A", "email": "nope", "age": "x", "color": "green"}})
    assert response.status_code == 400
    assert response.json()["details"] == [
        "Field 'Email' must be a valid email address",
        "Field 'Age' must be a valid number",
        "Field 'Color' must be one of: red, blue",
    ]


def test_duplicate_submission_rejected_when_not_allowed(client, create_form):
    form = create_form(contact_form(settings={"allowMultipleSubmissions": False}))
    headers = {"x-forwarded-for": "10.0.0.9"}
    body = {"data": {"name": "Ann", "email": "a@b.co"}}

    assert submit(client, form["id"], body, headers).status_code == 200
    second = submit(client, form["id"], body, headers)
    assert second.status_code == 400
    assert second.json() == {
        "error": "Multiple submissions not allowed for this form",
        "details": "A submission from this IP address already exists",
    }
    assert submit(client, form["id"], body, {"x-forwarded-for": "10.0.0.10"}).status_code == 200


def test_multiple_submissions_allowed(client, create_form):
    form = create_form()
    body = {"data": {"name": "Ann", "email": "a@b.co"}}
    assert submit(client, form["id"], body).status_code == 200
    assert submit(client, form["id"], body).status_code == 200


def test_eleventh_request_is_rate_limited(client, create_form, clock):
    form = create_form()
    headers = {"x-forwarded-for": "10.1.1.1"}
    body = {"data": {"name": "Ann", "email": "a@b.co"}}
    for _ in range(10):
        assert submit(client, form["id"], body, headers).status_code == 200

    limited = submit(client, form["id"], body, headers)
    assert limited.status_code == 429
    assert limited.json() == {"error": "Too many requests. Please try again later."}
    assert_security_headers(limited)

    clock.advance(15 * 60 + 1)
    assert submit(client, form["id"], body, headers).status_code == 200


def test_request_too_large(client, create_form, settings):
    form = create_form()
    blob = json.dumps({"data": {"name": "x" * settings.MAX_REQUEST_BYTES, "email": "a@b.co"}})
    response = client.post(
        f"/api/forms/{form['id']}/submit",
        content=blob,
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 413
    assert response.json() == {"error": "Request too large"}


def test_cross_site_origin_rejected(client, create_form):
    form = create_form()
    response = submit(
        client,
        form["id"],
        {"data": {"name": "Ann", "email": "a@b.co"}},
        headers={"Origin": "https://evil.example", "Referer": "https://forms.example/f/1"},
    )
    assert response.status_code == 403
    assert response.json() == {"error": "Invalid request origin"}


def test_same_site_origin_accepted(client, create_form):
    form = create_form()
    response = submit(
        client,
        form["id"],
        {"data": {"name": "Ann", "email": "a@b.co"}},
        headers={"Origin": "https://forms.example", "Referer": "https://forms.example/f/1"},
    )
    assert response.status_code == 200


def test_wrong_content_type(client, create_form):
    form = create_form()
    response = client.post(
        f"/api/forms/{form['id']}/submit",
        content="name=Ann",
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )
    assert response.status_code == 400
    assert response.json() == {"error": "Invalid content type. Expected application/json"}


def test_malformed_body(client, create_form):
    form = create_form()
    url = f"/api/forms/{form['id']}/submit"
    bad_json = client.post(url, content="{nope", headers={"Content-Type": "application/json"})
    assert bad_json.status_code == 400

    no_data = client.post(url, json={"answers": {}})
    assert no_data.status_code == 400

    data_not_object = client.post(url, json={"data": ["a"]})
    assert data_not_object.status_code == 400


def test_inactive_and_unknown_forms_are_not_found(client, create_form):
    form = create_form(contact_form(isActive=False))
    body = {"data": {"name": "Ann", "email": "a@b.co"}}
    for form_id in (form["id"], "does-not-exist"):
        response = submit(client, form_id, body)
        assert response.status_code == 404
        assert response.json() == {"error": "Form not found or inactive"}


def test_multistep_form_validates_every_step(client, create_form):
    form = create_form({
        "title": "Onboarding",
        "isMultistep": True,
        "steps": [
            {"id": "s1", "fields": [{"id": "first", "type": "text", "label": "First", "required": True}]},
            {"id": "s2", "fields": [{"id": "role", "type": "select", "label": "Role", "required": True, "options": ["dev"]}]},
        ],
    })
    response = submit(client, form["id"], {"data": {"first": "Ann"}})
    assert response.status_code == 400
    assert response.json()["details"] == ["Field 'Role' (role) is required"]

    assert submit(client, form["id"], {"data": {"first": "Ann", "role": "dev"}}).status_code == 200


def test_submit_documentation(client, create_form):
    form = create_form()
    response = client.get(f"/api/forms/{form['id']}/submit")
    assert response.status_code == 200
    assert_security_headers(response)
    doc = response.json()
    assert doc["formId"] == form["id"]
    assert doc["title"] == "Contact"
    assert doc["isMultistep"] is False
    assert doc["allowMultipleSubmissions"] is True
    assert doc["apiEndpoint"] == f"/api/forms/{form['id']}/submit"
    assert [f["id"] for f in doc["schema"]] == ["name", "email", "heading", "age", "color"]
    example = doc["exampleRequest"]
    assert example["body"]["data"] == {
        "name": "Sample Name",
        "email": "user@example.com",
        "age": 123,
        "color": "red",
    }


def test_submit_documentation_not_found(client):
    response = client.get("/api/forms/missing/submit")
    assert response.status_code == 404
    assert response.json() == {"error": "Form not found or inactive"}


def test_header_client_key_strategy(client, create_form, settings):
    settings.CLIENT_KEY_STRATEGY = "header"
    form = create_form(contact_form(settings={"allowMultipleSubmissions": False}))
    body = {"data": {"name": "Ann", "email": "a@b.co"}}
    ip = {"x-forwarded-for": "10.0.0.5"}

    assert submit(client, form["id"], body, {**ip, "x-client-id": "device-a"}).status_code == 200
    # Same address, different device: not a duplicate
    assert submit(client, form["id"], body, {**ip, "x-client-id": "device-b"}).status_code == 200
    assert submit(client, form["id"], body, {**ip, "x-client-id": "device-a"}).status_code == 400


def test_chunked_body_over_limit(client, create_form, settings):
    form = create_form()
    settings.MAX_REQUEST_BYTES = 64

    def chunks():
        yield b'{"data": {"name": "'
        yield b"x" * 100
        yield b'", "email": "a@b.co"}}'

    response = client.post(
        f"/api/forms/{form['id']}/submit",
        content=chunks(),
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 413
    assert response.json() == {"error": "Request too large"}


def test_stored_field_with_odd_attributes_stays_required(client, create_form):
    form = create_form(contact_form(fields=[{"id": "email", "type": "email", "label": 5, "required": True}]))
    response = submit(client, form["id"], {"data": {}})
    assert response.status_code == 400
    assert response.json()["details"] == ["Field '5' (email) is required"]
