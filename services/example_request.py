"""
Example request bodies for a form's API documentation
"""
from typing import Any, Dict

from models.schema import MULTI_CHOICE_TYPES, SINGLE_CHOICE_TYPES, FormField, FormSchema


def example_value(field: FormField) -> Any:
    """One representative value per field type"""
    label = field.display_label
    options = [o for o in (field.options or [])]
    ftype = field.type

    if ftype == "text":
        return field.placeholder or f"Sample {label}"
    if ftype == "email":
        return "user@example.com"
    if ftype == "textarea":
        return field.placeholder or f"Sample {label} text"
    if ftype == "number":
        return 123
    if ftype == "date":
        return "2024-01-01"
    if ftype in SINGLE_CHOICE_TYPES:
        return options[0] if options else "Option 1"
    if ftype in MULTI_CHOICE_TYPES:
        return options[:2] if options else ["Option 1", "Option 2"]
    if ftype == "checkbox":
        return True
    return f"Sample {label}"


def example_body(schema: FormSchema) -> Dict[str, Any]:
    data = {
        field.id: example_value(field)
        for field in schema.flat_fields()
        if not field.is_decorative
    }
    return {
        "data": data,
        "metadata": {
            "source": "api",
            "version": "1.0",
        },
    }


def example_request(form_id: str, schema: FormSchema) -> Dict[str, Any]:
    url = f"/api/forms/{form_id}/submit"
    return {
        "method": "POST",
        "url": url,
        "headers": {"Content-Type": "application/json"},
        "body": example_body(schema),
    }
