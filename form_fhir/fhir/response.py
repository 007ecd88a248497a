"""Transcoding between FormSubmissions and FHIR QuestionnaireResponse resources.

When the form's field tree is known the response mirrors the Questionnaire's
item tree, sharing ``linkId``s, so it can be checked against the original
definition. Without it, answers are written as one flat level keyed by the
raw answer keys and decoded without type information.

Submission provenance (form version, appointment, companion, parent,
submitter, signing state) travels in document-level extensions only.
"""

from typing import Any

from form_fhir.fhir.answers import AnswerCodec
from form_fhir.fhir.constants import QUESTIONNAIRE_RESPONSE_STATUS
from form_fhir.fhir.errors import ResourceTypeError
from form_fhir.fhir.extensions import (
    build_response_extensions,
    format_datetime,
    parse_datetime,
    read_response_extensions,
)
from form_fhir.models.fhir import QuestionnaireResponse, QuestionnaireResponseItem
from form_fhir.models.form import FormField, FormSubmission, GroupField, flatten_fields

DEFAULT_FORM_VERSION = 1


def questionnaire_reference(form_id: str, version: int) -> str:
    """Build the canonical reference to a form version."""
    return f"Questionnaire/{form_id}|{version}"


def parse_questionnaire_reference(reference: str | None) -> tuple[str, int | None]:
    """Split a canonical reference into form id and optional version.

    ``"Questionnaire/abc|3"`` gives ``("abc", 3)``. An absent reference gives
    an empty form id. A version suffix that is not an integer is ignored.
    """
    if not reference:
        return "", None

    path, _, version_text = reference.partition("|")
    form_id = path.rsplit("/", 1)[-1]

    version = None
    if version_text:
        try:
            version = int(version_text)
        except ValueError:
            version = None
    return form_id, version


class SubmissionCodec:
    """Converts a FormSubmission to a QuestionnaireResponse and back."""

    def __init__(self, answer_codec: AnswerCodec | None = None) -> None:
        self.answer_codec = answer_codec or AnswerCodec()

    def to_resource(
        self,
        submission: FormSubmission,
        schema: list[FormField] | None = None,
    ) -> QuestionnaireResponse:
        """Build a QuestionnaireResponse from a submission.

        Args:
            submission: The submission to encode.
            schema: The field tree of the submitted form version. When
                omitted, answers are written flat without type information.

        Returns:
            The equivalent QuestionnaireResponse resource.
        """
        if schema is not None:
            items = self._build_items(schema, submission.answers)
        else:
            items = self._build_flat_items(submission.answers)

        return QuestionnaireResponse(
            id=submission.id,
            questionnaire=questionnaire_reference(submission.form_id, submission.form_version),
            status=QUESTIONNAIRE_RESPONSE_STATUS,
            authored=format_datetime(submission.submitted_at),
            extension=build_response_extensions(submission),
            item=items or None,
        )

    def from_resource(
        self,
        resource: dict[str, Any] | QuestionnaireResponse,
        schema: list[FormField] | None = None,
    ) -> FormSubmission:
        """Build a submission from a QuestionnaireResponse.

        Args:
            resource: A QuestionnaireResponse as a FHIR JSON dict or model.
            schema: The field tree used to type answers. Items whose linkId
                is not in the tree are decoded without type information.

        Returns:
            The decoded FormSubmission with a flat answer map.

        Raises:
            ResourceTypeError: If the resource is not a QuestionnaireResponse.
        """
        response = self._coerce(resource)
        attrs = read_response_extensions(response.extension)

        form_id, reference_version = parse_questionnaire_reference(response.questionnaire)
        form_version = attrs.pop("form_version")
        if form_version is None:
            form_version = reference_version if reference_version is not None else DEFAULT_FORM_VERSION

        lookup = {field.id: field for field in flatten_fields(schema or [])}
        answers: dict[str, Any] = {}
        self._collect_answers(response.item or [], lookup, answers)

        return FormSubmission(
            id=response.id,
            form_id=form_id,
            form_version=form_version,
            answers=answers,
            submitted_at=parse_datetime(response.authored),
            **attrs,
        )

    def _coerce(self, resource: dict[str, Any] | QuestionnaireResponse) -> QuestionnaireResponse:
        if isinstance(resource, QuestionnaireResponse):
            return resource
        resource_type = resource.get("resourceType") if isinstance(resource, dict) else None
        if resource_type != "QuestionnaireResponse":
            raise ResourceTypeError("QuestionnaireResponse", resource_type)
        return QuestionnaireResponse.model_validate(resource)

    def _build_items(
        self,
        fields: list[FormField],
        answers: dict[str, Any],
    ) -> list[QuestionnaireResponseItem]:
        """Build response items parallel to the field tree, skipping unanswered fields."""
        items: list[QuestionnaireResponseItem] = []

        for field in fields:
            if isinstance(field, GroupField):
                children = self._build_items(field.fields, answers)
                if children:
                    items.append(
                        QuestionnaireResponseItem(link_id=field.id, text=field.label, item=children)
                    )
                continue

            if field.id not in answers:
                continue
            encoded = self.answer_codec.encode(field, answers[field.id])
            if encoded:
                items.append(
                    QuestionnaireResponseItem(link_id=field.id, text=field.label, answer=encoded)
                )

        return items

    def _build_flat_items(self, answers: dict[str, Any]) -> list[QuestionnaireResponseItem]:
        items: list[QuestionnaireResponseItem] = []
        for key, value in answers.items():
            encoded = self.answer_codec.encode_untyped(value)
            if encoded:
                items.append(QuestionnaireResponseItem(link_id=key, answer=encoded))
        return items

    def _collect_answers(
        self,
        items: list[QuestionnaireResponseItem],
        lookup: dict[str, FormField],
        answers: dict[str, Any],
    ) -> None:
        """Walk the response tree depth-first into a flat answer map."""
        for item in items:
            if item.answer:
                field = lookup.get(item.link_id)
                if field is not None:
                    value = self.answer_codec.decode(item.answer, field)
                else:
                    value = self.answer_codec.decode_untyped(item.answer)
                if value is not None:
                    answers[item.link_id] = value

                for answer in item.answer:
                    if answer.item:
                        self._collect_answers(answer.item, lookup, answers)

            if item.item:
                self._collect_answers(item.item, lookup, answers)
