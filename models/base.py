"""
Pydantic payload models for tenant form management
"""
from typing import Any, Dict, List, Optional

import bleach
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from models.schema import FormField


class BaseDBModel(BaseModel):
    """Base model that strips HTML tags from every top-level string input"""

    @field_validator('*', mode='before')
    @classmethod
    def sanitize_strings(cls, v, info):
        """Sanitize string inputs to prevent XSS attacks"""
        if isinstance(v, str) and info.field_name:
            return bleach.clean(v.strip(), tags=set(), strip=True)
        return v


def _check_fields(fields: Any) -> None:
    """Every stored field must be an object with an id the payload can be keyed by"""
    if not isinstance(fields, list):
        raise ValueError("Each step requires a fields list")
    for item in fields:
        if not isinstance(item, dict):
            raise ValueError("Fields must be objects")
        try:
            FormField.model_validate(item)
        except ValidationError:
            raise ValueError(f"Invalid field definition: {item.get('id')!r}") from None


class FormModel(BaseDBModel):
    """Create/update payload for a form"""
    # Allow population by both snake_case and camelCase aliases
    model_config = ConfigDict(populate_by_name=True)

    title: str
    description: Optional[str] = None
    is_multistep: bool = Field(default=False, alias="isMultistep")
    is_active: bool = Field(default=True, alias="isActive")
    fields: Optional[List[Dict[str, Any]]] = None
    steps: Optional[List[Dict[str, Any]]] = None
    settings: Dict[str, Any] = Field(default_factory=dict)
    styling: Dict[str, Any] = Field(default_factory=dict)
    thank_you_page: Dict[str, Any] = Field(default_factory=dict, alias="thankYouPage")
    error_page: Optional[Dict[str, Any]] = Field(default=None, alias="errorPage")
    embedding: Optional[Dict[str, Any]] = None

    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        """Titles are required and capped to the column size"""
        if not v:
            raise ValueError('Title is required')
        return v[:255]

    @field_validator('description')
    @classmethod
    def empty_description_is_null(cls, v):
        return v or None

    @model_validator(mode='after')
    def check_schema_shape(self):
        """A form carries fields XOR steps, chosen by is_multistep"""
        if self.is_multistep:
            if self.steps is None:
                raise ValueError('Multi-step forms require a steps list')
            for step in self.steps:
                _check_fields(step.get("fields"))
            self.fields = None
        else:
            if self.fields is None:
                raise ValueError('Single-step forms require a fields list')
            self.steps = None
            _check_fields(self.fields)
        return self


class EmbeddingUpdateModel(BaseModel):
    """PATCH body for embedding settings"""
    embedding: Dict[str, Any]


class SubmitEntryModel(BaseModel):
    """Body of the public submission endpoint"""
    data: Dict[str, Any]
    # Anything that is not an object is ignored by the endpoint
    metadata: Optional[Any] = None
