"""FHIR R4 resource mirrors for Questionnaire and QuestionnaireResponse.

Only the elements this package reads or writes are modelled; unknown
elements on input are ignored. Serialise with :func:`to_fhir_json` so that
absent elements are omitted rather than emitted as ``null``.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class FhirModel(BaseModel):
    """Base for FHIR elements: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Coding(FhirModel):
    system: str | None = None
    code: str | None = None
    display: str | None = None


class Attachment(FhirModel):
    content_type: str | None = None
    data: str | None = None
    url: str | None = None


class Identifier(FhirModel):
    system: str | None = None
    value: str | None = None


class Meta(FhirModel):
    last_updated: str | None = None


class Extension(FhirModel):
    """A URL-namespaced value. Exactly one ``value_*`` is expected to be set."""

    url: str
    value_string: str | None = None
    value_integer: int | None = None
    value_boolean: bool | None = None
    value_code: str | None = None
    value_date_time: str | None = None


class AnswerOption(FhirModel):
    value_coding: Coding | None = None
    value_string: str | None = None


class Answer(FhirModel):
    """One entry of ``QuestionnaireResponse.item.answer``."""

    value_boolean: bool | None = None
    value_decimal: int | float | None = None
    value_integer: int | None = None
    value_date: str | None = None
    value_date_time: str | None = None
    value_string: str | None = None
    value_coding: Coding | None = None
    value_attachment: Attachment | None = None
    item: list["QuestionnaireResponseItem"] | None = None


class QuestionnaireItem(FhirModel):
    link_id: str
    text: str | None = None
    type: str = "string"
    required: bool | None = None
    repeats: bool | None = None
    extension: list[Extension] | None = None
    answer_option: list[AnswerOption] | None = None
    item: list["QuestionnaireItem"] | None = None


class Questionnaire(FhirModel):
    resource_type: Literal["Questionnaire"] = "Questionnaire"
    id: str | None = None
    meta: Meta | None = None
    status: str = "draft"
    title: str | None = None
    description: str | None = None
    identifier: list[Identifier] | None = None
    code: list[Coding] | None = None
    extension: list[Extension] | None = None
    item: list[QuestionnaireItem] | None = None


class QuestionnaireResponseItem(FhirModel):
    link_id: str
    text: str | None = None
    answer: list[Answer] | None = None
    item: list["QuestionnaireResponseItem"] | None = None


class QuestionnaireResponse(FhirModel):
    resource_type: Literal["QuestionnaireResponse"] = "QuestionnaireResponse"
    id: str | None = None
    questionnaire: str | None = None
    status: str = "completed"
    authored: str | None = None
    extension: list[Extension] | None = None
    item: list[QuestionnaireResponseItem] | None = None


Answer.model_rebuild()
QuestionnaireItem.model_rebuild()
QuestionnaireResponseItem.model_rebuild()


def to_fhir_json(resource: FhirModel) -> dict[str, Any]:
    """Dump a resource to a JSON-compatible FHIR dict."""
    return resource.model_dump(mode="json", by_alias=True, exclude_none=True)
