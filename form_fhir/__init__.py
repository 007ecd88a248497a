"""form-fhir: transcoding between dynamic forms and FHIR Questionnaires."""

__version__ = "0.1.0"

from form_fhir.fhir import (
    AnswerCodec,
    FormCodec,
    ResourceTypeError,
    ResourceValidationError,
    SubmissionCodec,
)
from form_fhir.models import Form, FormField, FormSubmission, to_fhir_json

__all__ = [
    "__version__",
    "AnswerCodec",
    "FormCodec",
    "SubmissionCodec",
    "ResourceTypeError",
    "ResourceValidationError",
    "Form",
    "FormField",
    "FormSubmission",
    "to_fhir_json",
]
