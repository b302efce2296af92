"""
Schema-driven validation of submission payloads.

``validate_submission(payload, schema)`` checks every field of a single-step
or multi-step schema against one flat payload and returns all error messages
(never fail-fast). An empty list means the payload is valid.

Blank/number/date/membership rules follow what browsers do with the same
values, because the form renderer and API clients send JSON produced by
JavaScript: ``0``, ``false`` and ``""`` count as empty, ``"0x1f"`` is a
number, ``[]`` is not empty.
"""
import math
import re
from datetime import datetime
from email.utils import parsedate_to_datetime
from typing import Any, Dict, Iterable, List, Sequence, Union

from models.schema import (
    MULTI_CHOICE_TYPES,
    SINGLE_CHOICE_TYPES,
    FormField,
    FormSchema,
    FormStep,
    MultiStepSchema,
    SingleStepSchema,
    flatten,
    parse_schema,
)

_DECIMAL_RE = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")
_PREFIXED_INT_RE = re.compile(r"^0(?:[xX][0-9a-fA-F]+|[oO][0-7]+|[bB][01]+)$")
_INFINITY_RE = re.compile(r"^[+-]?Infinity$")

_DATE_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y/%m/%d",
    "%m/%d/%Y",
    "%m/%d/%Y %H:%M",
    "%B %d, %Y",
    "%b %d, %Y",
    "%B %d %Y",
    "%b %d %Y",
    "%d %B %Y",
    "%d %b %Y",
    "%a %b %d %Y",
    "%Y",
)

SchemaLike = Union[FormSchema, Sequence[FormField], Sequence[FormStep], Sequence[Dict[str, Any]]]


def is_blank(value: Any) -> bool:
    """Falsy in the JavaScript sense: None, False, 0, NaN or ''."""
    if value is None or value is False:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (int, float)):
        return value == 0 or (isinstance(value, float) and math.isnan(value))
    return False


def _missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value == "")


def is_numeric(value: Any) -> bool:
    """True when Number(value) would not be NaN."""
    if isinstance(value, bool) or value is None:
        return True
    if isinstance(value, (int, float)):
        return not (isinstance(value, float) and math.isnan(value))
    if isinstance(value, str):
        s = value.strip()
        if not s:
            return True
        return bool(_DECIMAL_RE.match(s) or _PREFIXED_INT_RE.match(s) or _INFINITY_RE.match(s))
    if isinstance(value, list):
        if not value:
            return True
        if len(value) == 1 and not isinstance(value[0], (bool, dict)):
            inner = value[0]
            if inner is None:
                return True
            return is_numeric(inner if isinstance(inner, list) else _display(inner))
        return False
    return False


def is_date(value: Any) -> bool:
    """True when the value parses as a calendar date or timestamp."""
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return math.isfinite(value)
    if not isinstance(value, str):
        return False
    s = value.strip()
    if not s:
        return False

    iso = s[:-1] + "+00:00" if s.endswith(("Z", "z")) else s
    try:
        datetime.fromisoformat(iso)
        return True
    except ValueError:
        pass

    try:
        parsedate_to_datetime(s)
        return True
    except (TypeError, ValueError, IndexError):
        pass

    for fmt in _DATE_FORMATS:
        try:
            datetime.strptime(s, fmt)
            return True
        except ValueError:
            continue
    return False


def _display(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _same_value(a: Any, b: Any) -> bool:
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a == b
    if isinstance(a, (int, float)) and isinstance(b, (int, float)):
        return a == b
    if isinstance(a, str) and isinstance(b, str):
        return a == b
    if a is None and b is None:
        return True
    return False


def _includes(options: Iterable[Any], value: Any) -> bool:
    return any(_same_value(option, value) for option in options)


def _as_fields(schema: SchemaLike) -> List[FormField]:
    if isinstance(schema, (SingleStepSchema, MultiStepSchema)):
        return schema.flat_fields()
    items = list(schema or [])
    if items and isinstance(items[0], dict):
        parsed = parse_schema(items, is_multistep="fields" in items[0])
        return parsed.flat_fields() if parsed else []
    return flatten(items)


def _check_field(field: FormField, value: Any) -> List[str]:
    label = field.display_label
    ftype = field.type

    if ftype == "email":
        if not isinstance(value, str) or "@" not in value:
            return [f"Field '{label}' must be a valid email address"]
    elif ftype == "number":
        if not is_numeric(value):
            return [f"Field '{label}' must be a valid number"]
    elif ftype == "date":
        if not is_date(value):
            return [f"Field '{label}' must be a valid date"]
    elif ftype in SINGLE_CHOICE_TYPES:
        if field.options is not None and not _includes(field.options, value):
            allowed = ", ".join(_display(o) for o in field.options)
            return [f"Field '{label}' must be one of: {allowed}"]
    elif ftype in MULTI_CHOICE_TYPES:
        if not isinstance(value, list):
            return [f"Field '{label}' must be an array"]
        if field.options is not None:
            invalid = [v for v in value if not _includes(field.options, v)]
            if invalid:
                return [f"Field '{label}' contains invalid options: {', '.join(_display(v) for v in invalid)}"]
    elif ftype == "checkbox":
        if not isinstance(value, bool):
            return [f"Field '{label}' must be a boolean value (true or false)"]
    return []


def validate_submission(payload: Dict[str, Any], schema: SchemaLike) -> List[str]:
    """
    Validate a flat submission payload against a form schema.

    Args:
        payload: Field id -> submitted value (already sanitized)
        schema: SingleStepSchema/MultiStepSchema, a list of fields or steps,
            or the raw stored JSON list

    Returns:
        Every error message, in schema order; empty when valid
    """
    errors: List[str] = []
    payload = payload or {}

    for field in _as_fields(schema):
        if field.is_decorative:
            continue
        value = payload.get(field.id)

        if field.required and _missing(value):
            errors.append(f"Field '{field.display_label}' ({field.id}) is required")
            continue

        if is_blank(value):
            continue

        errors.extend(_check_field(field, value))

    return errors
