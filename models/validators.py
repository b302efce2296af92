"""
Utility functions for data validation and sanitization using Pydantic models
"""
from typing import Any, Dict, List, Tuple, Type, TypeVar, Union

from pydantic import BaseModel, ValidationError

from .base import EmbeddingUpdateModel, FormModel, SubmitEntryModel

T = TypeVar('T', bound=BaseModel)


def validate_data(data: Any, model_class: Type[T]) -> Tuple[bool, Union[T, List[Dict[str, Any]]]]:
    """
    Validate and sanitize input data using a Pydantic model

    Args:
        data: The input data to validate
        model_class: The Pydantic model class to use for validation

    Returns:
        Tuple of (is_valid, result) where result is either the validated
        model instance or the list of pydantic error dicts
    """
    if not isinstance(data, dict):
        return False, [{"loc": [], "msg": "Expected a JSON object", "type": "dict_type"}]
    try:
        return True, model_class.model_validate(data)
    except ValidationError as e:
        return False, e.errors(include_url=False, include_context=False)


def sanitize_for_db(model_instance: FormModel) -> Dict[str, Any]:
    """Column-name dict for a validated form payload"""
    return model_instance.model_dump(by_alias=False)


def validate_form(form_data: Any):
    """Validate and sanitize form data"""
    return validate_data(form_data, FormModel)


def validate_embedding(payload: Any):
    """Validate the embedding settings PATCH body"""
    return validate_data(payload, EmbeddingUpdateModel)


def validate_submission(payload: Any):
    """Validate the shape of a public submission body"""
    return validate_data(payload, SubmitEntryModel)
