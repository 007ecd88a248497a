"""Internal form models and their FHIR resource mirrors."""

from form_fhir.models.fhir import (
    Answer,
    AnswerOption,
    Attachment,
    Coding,
    Extension,
    Identifier,
    Meta,
    Questionnaire,
    QuestionnaireItem,
    QuestionnaireResponse,
    QuestionnaireResponseItem,
    to_fhir_json,
)
from form_fhir.models.form import (
    BooleanField,
    ChoiceField,
    DateField,
    FieldOption,
    Form,
    FormField,
    FormSubmission,
    GroupField,
    InputField,
    NumberField,
    ServiceGroupField,
    SignatureField,
    SigningInfo,
    TextareaField,
    flatten_fields,
    has_signature_field,
    is_multi_valued,
)

__all__ = [
    # Internal model
    "Form",
    "FormField",
    "FormSubmission",
    "FieldOption",
    "SigningInfo",
    "InputField",
    "TextareaField",
    "NumberField",
    "BooleanField",
    "DateField",
    "SignatureField",
    "ChoiceField",
    "ServiceGroupField",
    "GroupField",
    "flatten_fields",
    "has_signature_field",
    "is_multi_valued",
    # FHIR
    "Answer",
    "AnswerOption",
    "Attachment",
    "Coding",
    "Extension",
    "Identifier",
    "Meta",
    "Questionnaire",
    "QuestionnaireItem",
    "QuestionnaireResponse",
    "QuestionnaireResponseItem",
    "to_fhir_json",
]
