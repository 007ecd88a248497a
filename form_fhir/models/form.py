"""Pydantic models for form definitions and submissions.

These are the internal, UI-oriented shapes produced by the form builder and
the submission flow. Field trees are a discriminated union on ``type``.
"""

from collections.abc import Iterator
from datetime import datetime
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

FormStatus = Literal["draft", "published", "archived"]
VisibilityType = Literal["Internal", "External", "Internal_External"]


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class FieldOption(_CamelModel):
    """Selectable option of a choice field."""

    label: str
    value: str


class _BaseField(_CamelModel):
    id: str
    label: str = ""
    placeholder: str | None = None
    required: bool = False
    order: int | None = None
    group: str | None = None
    meta: dict[str, Any] | None = None


class InputField(_BaseField):
    type: Literal["input"] = "input"


class TextareaField(_BaseField):
    type: Literal["textarea"] = "textarea"


class NumberField(_BaseField):
    type: Literal["number"] = "number"


class BooleanField(_BaseField):
    type: Literal["boolean"] = "boolean"


class DateField(_BaseField):
    type: Literal["date"] = "date"


class SignatureField(_BaseField):
    type: Literal["signature"] = "signature"


class ChoiceField(_BaseField):
    """Dropdown, radio or checkbox field."""

    type: Literal["dropdown", "radio", "checkbox"]
    options: list[FieldOption] = Field(default_factory=list)
    multiple: bool = False

    def get_option(self, value: str) -> FieldOption | None:
        """Get the option whose declared value matches."""
        for option in self.options:
            if option.value == value:
                return option
        return None


class ServiceGroupField(_BaseField):
    type: Literal["service-group"] = "service-group"
    services: list[str] | None = None


class GroupField(_BaseField):
    """Container for nested fields."""

    type: Literal["group"] = "group"
    fields: list["FormField"] = Field(default_factory=list)


FormField = Annotated[
    Union[
        InputField,
        TextareaField,
        NumberField,
        BooleanField,
        DateField,
        SignatureField,
        ChoiceField,
        ServiceGroupField,
        GroupField,
    ],
    Field(discriminator="type"),
]

GroupField.model_rebuild()

FIELD_CLASSES: dict[str, type[_BaseField]] = {
    "input": InputField,
    "textarea": TextareaField,
    "number": NumberField,
    "boolean": BooleanField,
    "date": DateField,
    "signature": SignatureField,
    "dropdown": ChoiceField,
    "radio": ChoiceField,
    "checkbox": ChoiceField,
    "service-group": ServiceGroupField,
    "group": GroupField,
}


def is_multi_valued(field: _BaseField) -> bool:
    """Whether answers to this field are always a list."""
    return field.type == "checkbox" or getattr(field, "multiple", False)


def flatten_fields(schema: list[FormField]) -> Iterator[FormField]:
    """Yield every field in the tree depth-first, groups before their children."""
    for field in schema:
        yield field
        if isinstance(field, GroupField):
            yield from flatten_fields(field.fields)


def has_signature_field(schema: list[FormField]) -> bool:
    """Whether any field in the tree collects a signature."""
    return any(field.type == "signature" for field in flatten_fields(schema))


class Form(_CamelModel):
    """A form definition owned by an organisation."""

    id: str | None = None
    org_id: str = ""
    business_type: str | None = None
    name: str = ""
    category: str = ""
    description: str | None = None
    visibility_type: VisibilityType = "Internal"
    service_id: list[str] | None = None
    species_filter: list[str] | None = None
    status: FormStatus = "draft"
    schema_: list[FormField] = Field(alias="schema", default_factory=list)
    created_by: str = ""
    updated_by: str = ""
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("service_id", mode="before")
    @classmethod
    def _wrap_single_service(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [value]
        return value

    def get_field(self, field_id: str) -> FormField | None:
        """Get a field by its ID, searching nested groups."""
        for field in flatten_fields(self.schema_):
            if field.id == field_id:
                return field
        return None


class SigningInfo(_CamelModel):
    """E-signature workflow state attached to a submission."""

    required: bool = False
    provider: str | None = None
    status: str | None = None
    document_id: str | None = None
    pdf_url: str | None = None


class FormSubmission(_CamelModel):
    """A filled-in form. ``answers`` maps field id to a kind-dependent value."""

    id: str | None = None
    form_id: str
    form_version: int = 1
    appointment_id: str | None = None
    companion_id: str | None = None
    parent_id: str | None = None
    submitted_by: str | None = None
    answers: dict[str, Any] = Field(default_factory=dict)
    submitted_at: datetime | None = None
    signing: SigningInfo | None = None
