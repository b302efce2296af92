"""
Public submission endpoint for published forms.

POST runs every check in a fixed order and stops at the first failure:
size, rate limit, same-site origin, content type, body shape, form lookup,
schema validation, duplicate detection, then persistence. GET returns the
machine-readable documentation of a form's API.
"""
import json
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from db.database import session_scope
from models.validators import validate_submission as validate_submission_body
from services.example_request import example_request
from services.forms_service import allows_multiple_submissions, form_schema, AsyncFormsService
from services.submissions_service import CLIENT_KEY_FIELD, IP_FIELD, SubmissionsService, build_answers
from services.validation import validate_submission
from utils.client_identity import client_ip, resolve_client_key
from utils.origin import is_same_site
from utils.sanitizer import sanitize_input
from utils.settings import get_settings

router = APIRouter(prefix="/api/forms", tags=["submissions"])
logger = logging.getLogger("forms.submit")

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Cache-Control": "no-store, no-cache, must-revalidate",
    "Pragma": "no-cache",
}


def _json(status_code: int, content: Dict[str, Any]) -> JSONResponse:
    """JSON response carrying the security headers every submit response gets"""
    return JSONResponse(status_code=status_code, content=content, headers=dict(SECURITY_HEADERS))


def _error(status_code: int, message: str, **extra) -> JSONResponse:
    return _json(status_code, {"error": message, **extra})


def _settings(request: Request):
    return getattr(request.app.state, "settings", None) or get_settings()


def _declared_length_too_large(request: Request, max_bytes: int) -> bool:
    raw = request.headers.get("content-length")
    if raw is None:
        return False
    try:
        return int(raw) > max_bytes
    except ValueError:
        # Unparseable length: refuse rather than read an unbounded body
        return True


def _client_key(request: Request, settings) -> str:
    return resolve_client_key(request, settings.CLIENT_KEY_STRATEGY, settings.CLIENT_KEY_HEADER)


async def _read_body(request: Request, max_bytes: int) -> Optional[bytes]:
    """Body bytes, or None as soon as more than max_bytes have arrived"""
    chunks = []
    size = 0
    async for chunk in request.stream():
        size += len(chunk)
        if size > max_bytes:
            return None
        chunks.append(chunk)
    return b"".join(chunks)


@router.post("/{form_id}/submit")
async def submit_form(form_id: str, request: Request):
    """Accept an anonymous submission for an active form"""
    try:
        settings = _settings(request)

        if _declared_length_too_large(request, settings.MAX_REQUEST_BYTES):
            return _error(413, "Request too large")

        client_key = _client_key(request, settings)
        if not request.app.state.submission_limiter.allow(client_key):
            logger.info("submit rate limited form=%s client=%s", form_id, client_key)
            return _error(429, "Too many requests. Please try again later.")

        if not is_same_site(request.headers.get("origin"), request.headers.get("referer")):
            return _error(403, "Invalid request origin")

        content_type = request.headers.get("content-type") or ""
        if "application/json" not in content_type.lower():
            return _error(400, "Invalid content type. Expected application/json")

        body = await _read_body(request, settings.MAX_REQUEST_BYTES)
        if body is None:
            return _error(413, "Request too large")

        try:
            payload = json.loads(body)
        except ValueError:
            return _error(400, "Invalid JSON body")

        ok, parsed = validate_submission_body(payload)
        if not ok:
            return _error(400, "Invalid submission data")

        data = sanitize_input(parsed.data)
        metadata = sanitize_input(parsed.metadata) if isinstance(parsed.metadata, dict) else None

        async with session_scope(commit=True) as session:
            form = await AsyncFormsService.get_active_form(session, form_id)
            if not form:
                return _error(404, "Form not found or inactive")

            schema = form_schema(form)
            if schema is None:
                logger.error("form %s has no usable schema", form_id)
                return _error(500, "Form schema not found")

            errors = validate_submission(data, schema)
            if errors:
                return _error(400, "Validation failed", details=errors)

            ip_address = client_ip(request)
            if not allows_multiple_submissions(form):
                key_field = IP_FIELD if client_key == ip_address else CLIENT_KEY_FIELD
                if await SubmissionsService.has_existing_submission(session, form_id, client_key, key_field):
                    return _error(
                        400,
                        "Multiple submissions not allowed for this form",
                        details="A submission from this IP address already exists",
                    )

            answers = build_answers(
                data,
                metadata,
                request.headers.get("user-agent"),
                ip_address,
                client_key=client_key,
            )
            entry = await SubmissionsService.create_entry(session, form_id, answers)

        return _json(200, {
            "success": True,
            "entryId": entry.id,
            "message": "Form submitted successfully",
        })
    except Exception:
        logger.exception("submit failed form=%s", form_id)
        return _error(500, "Internal server error")


@router.get("/{form_id}/submit")
async def submit_documentation(form_id: str, request: Request):
    """Describe how to submit to a form: its schema and an example request"""
    try:
        settings = _settings(request)
        if not request.app.state.submission_limiter.allow(_client_key(request, settings)):
            return _error(429, "Too many requests. Please try again later.")

        async with session_scope() as session:
            form = await AsyncFormsService.get_active_form(session, form_id)
            if not form:
                return _error(404, "Form not found or inactive")

            schema = form_schema(form)
            if schema is None:
                logger.error("form %s has no usable schema", form_id)
                return _error(500, "Form schema not found")

            return _json(200, {
                "formId": form.id,
                "title": form.title,
                "description": form.description,
                "isMultistep": bool(form.is_multistep),
                "allowMultipleSubmissions": allows_multiple_submissions(form),
                "schema": schema.dump(),
                "apiEndpoint": f"/api/forms/{form.id}/submit",
                "exampleRequest": example_request(form.id, schema),
            })
    except Exception:
        logger.exception("submit documentation failed form=%s", form_id)
        return _error(500, "Internal server error")
