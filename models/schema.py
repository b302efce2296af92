"""
Form schema shapes: fields, steps and the per-form settings blobs.

Forms are stored with loosely-typed JSON columns. This module is the single
boundary where those blobs become typed objects; everything downstream works
on a flat, ordered list of FormField.

Parsing is lenient: a field only drops out when it has no usable ``id``.
Wrong-typed attributes are coerced (labels to text, ``required`` by
truthiness) or treated as absent (non-list ``options``, non-object
``styling``), so a stored field is never silently excluded from validation.
"""
import logging
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger("forms.schema")

SINGLE_CHOICE_TYPES = ("select", "radio")
MULTI_CHOICE_TYPES = ("multiselect", "multi-dropdown")
DECORATIVE_TYPES = ("title", "separator")


def _text_or_none(v: Any) -> Optional[str]:
    if v is None or isinstance(v, str):
        return v
    if isinstance(v, (dict, list)):
        return None
    return str(v)


class FieldStyling(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    background_color: Optional[str] = Field(default=None, alias="backgroundColor")
    text_color: Optional[str] = Field(default=None, alias="textColor")
    border_color: Optional[str] = Field(default=None, alias="borderColor")
    font_size: Optional[str] = Field(default=None, alias="fontSize")
    padding: Optional[str] = None

    @field_validator('*', mode='before')
    @classmethod
    def coerce_text(cls, v):
        return _text_or_none(v)


class FormField(BaseModel):
    """One input of a form. Unknown types are kept and simply not type-checked."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str
    type: str = "text"
    label: Optional[str] = None
    placeholder: Optional[str] = None
    required: bool = False
    options: Optional[List[Any]] = None
    width: Optional[str] = None
    styling: Optional[FieldStyling] = None

    @field_validator('id', mode='before')
    @classmethod
    def coerce_id(cls, v):
        # Numeric ids are still addressable; anything else has no payload key
        if isinstance(v, (int, float)) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator('type', mode='before')
    @classmethod
    def coerce_type(cls, v):
        return _text_or_none(v) or "text"

    @field_validator('label', 'placeholder', 'width', mode='before')
    @classmethod
    def coerce_text(cls, v):
        return _text_or_none(v)

    @field_validator('required', mode='before')
    @classmethod
    def coerce_required(cls, v):
        return bool(v)

    @field_validator('options', mode='before')
    @classmethod
    def list_options_only(cls, v):
        return v if isinstance(v, list) else None

    @field_validator('styling', mode='before')
    @classmethod
    def object_styling_only(cls, v):
        return v if isinstance(v, dict) else None

    @property
    def display_label(self) -> str:
        return self.label if self.label is not None else self.id

    @property
    def is_decorative(self) -> bool:
        return self.type in DECORATIVE_TYPES


class FormStep(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    fields: List[FormField] = Field(default_factory=list)

    @field_validator('id', 'title', 'description', mode='before')
    @classmethod
    def coerce_text(cls, v):
        return _text_or_none(v)


class FormSettings(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    allow_multiple_submissions: bool = Field(default=False, alias="allowMultipleSubmissions")
    show_progress_bar: bool = Field(default=True, alias="showProgressBar")
    step_ui: Optional[Literal["numbers", "letters", "percentage", "bar"]] = Field(default=None, alias="stepUI")
    submit_button_text: Optional[str] = Field(default=None, alias="submitButtonText")


class EmbeddingSettings(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    allowed_origins: List[str] = Field(default_factory=list, alias="allowedOrigins")
    require_origin: bool = Field(default=False, alias="requireOrigin")
    width: Optional[str] = None
    height: Optional[str] = None


class SingleStepSchema(BaseModel):
    kind: Literal["single"] = "single"
    fields: List[FormField] = Field(default_factory=list)

    def flat_fields(self) -> List[FormField]:
        return list(self.fields)

    def dump(self) -> List[Dict[str, Any]]:
        return [f.model_dump(by_alias=True, exclude_none=True) for f in self.fields]


class MultiStepSchema(BaseModel):
    kind: Literal["multi"] = "multi"
    steps: List[FormStep] = Field(default_factory=list)

    def flat_fields(self) -> List[FormField]:
        return [field for step in self.steps for field in step.fields]

    def dump(self) -> List[Dict[str, Any]]:
        return [s.model_dump(by_alias=True, exclude_none=True) for s in self.steps]


FormSchema = Union[SingleStepSchema, MultiStepSchema]


def _parse_fields(raw: Any) -> List[FormField]:
    fields: List[FormField] = []
    for item in raw or []:
        if not isinstance(item, dict):
            continue
        try:
            fields.append(FormField.model_validate(item))
        except ValidationError as e:
            logger.warning("schema: skipping malformed field %r: %s", item.get("id"), e.errors()[:1])
    return fields


def parse_schema(raw: Any, is_multistep: bool) -> Optional[FormSchema]:
    """Turn a stored fields/steps blob into a typed schema; None when absent."""
    if raw is None or not isinstance(raw, list):
        return None
    if not is_multistep:
        return SingleStepSchema(fields=_parse_fields(raw))

    steps: List[FormStep] = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        steps.append(
            FormStep(
                id=item.get("id"),
                title=item.get("title"),
                description=item.get("description"),
                fields=_parse_fields(item.get("fields")),
            )
        )
    return MultiStepSchema(steps=steps)


def flatten(schema: Union[FormSchema, List[FormField], List[FormStep]]) -> List[FormField]:
    """Normalize any accepted schema shape into the ordered list of fields."""
    if isinstance(schema, (SingleStepSchema, MultiStepSchema)):
        return schema.flat_fields()
    flat: List[FormField] = []
    for item in schema or []:
        if isinstance(item, FormStep):
            flat.extend(item.fields)
        elif isinstance(item, FormField):
            flat.append(item)
    return flat


def parse_settings(raw: Any) -> FormSettings:
    if not isinstance(raw, dict):
        return FormSettings()
    try:
        return FormSettings.model_validate(raw)
    except ValidationError:
        logger.warning("schema: invalid settings blob, using defaults")
        return FormSettings(allowMultipleSubmissions=bool(raw.get("allowMultipleSubmissions")))


def parse_embedding(raw: Any) -> EmbeddingSettings:
    if not isinstance(raw, dict):
        return EmbeddingSettings()
    try:
        return EmbeddingSettings.model_validate(raw)
    except ValidationError:
        logger.warning("schema: invalid embedding blob, treating as unrestricted")
        return EmbeddingSettings()
