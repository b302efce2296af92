"""
Input sanitization for untrusted submission payloads.

Applied once at ingress to both the ``data`` and ``metadata`` parts of a
public submission, before validation and persistence:

- strings lose ``<`` and ``>``, any ``javascript:`` (case-insensitive) and any
  inline event-handler prefix such as ``onclick=``, then get trimmed
- lists are sanitized element by element (order and length preserved)
- dict keys keep only ``[A-Za-z0-9_-]``; values are sanitized recursively.
  Two keys that clean to the same name collapse and the later one wins.
- numbers, booleans and None are returned unchanged

Removals are repeated until the string stops changing, so nested tricks like
``javajavascript:script:`` cannot reassemble a forbidden token and
``sanitize_input(sanitize_input(x)) == sanitize_input(x)``.
"""
import re
from typing import Any

_ANGLE_BRACKETS = re.compile(r"[<>]")
_JS_PROTOCOL = re.compile(r"javascript:", re.IGNORECASE)
_EVENT_HANDLER = re.compile(r"on\w+=", re.IGNORECASE | re.ASCII)
_UNSAFE_KEY_CHARS = re.compile(r"[^a-zA-Z0-9_-]")


def sanitize_string(value: str) -> str:
    """
    Strip markup and script vectors from a single string.

    Examples:
        >>> sanitize_string("  <b>hi</b> ")
        'bhi/b'
        >>> sanitize_string('<a onclick=alert(1)>')
        'a alert(1)'
    """
    previous = None
    cleaned = value
    while cleaned != previous:
        previous = cleaned
        cleaned = _ANGLE_BRACKETS.sub("", cleaned)
        cleaned = _JS_PROTOCOL.sub("", cleaned)
        cleaned = _EVENT_HANDLER.sub("", cleaned)
        cleaned = cleaned.strip()
    return cleaned


def sanitize_key(key: Any) -> str:
    return _UNSAFE_KEY_CHARS.sub("", str(key))


def sanitize_input(value: Any) -> Any:
    """
    Recursively sanitize a JSON-compatible value.

    Args:
        value: Any decoded JSON value (dict, list, str, number, bool, None)

    Returns:
        A value of the same shape with every string leaf and dict key cleaned

    Examples:
        >>> sanitize_input({"na<me>": " <script>x</script> ", "n": 3})
        {'name': 'scriptx/script', 'n': 3}
    """
    if isinstance(value, str):
        return sanitize_string(value)

    if isinstance(value, list):
        return [sanitize_input(item) for item in value]

    if isinstance(value, dict):
        result = {}
        for key, item in value.items():
            result[sanitize_key(key)] = sanitize_input(item)
        return result

    return value
