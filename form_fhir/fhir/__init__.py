"""FHIR Questionnaire / QuestionnaireResponse transcoding."""

from form_fhir.fhir.answers import AnswerCodec
from form_fhir.fhir.errors import ResourceTypeError, ResourceValidationError
from form_fhir.fhir.questionnaire import FormCodec
from form_fhir.fhir.response import (
    SubmissionCodec,
    parse_questionnaire_reference,
    questionnaire_reference,
)
from form_fhir.fhir.types import from_item, to_item_type

__all__ = [
    "AnswerCodec",
    "FormCodec",
    "SubmissionCodec",
    "ResourceTypeError",
    "ResourceValidationError",
    "from_item",
    "to_item_type",
    "parse_questionnaire_reference",
    "questionnaire_reference",
]
