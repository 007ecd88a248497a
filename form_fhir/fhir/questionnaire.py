"""Transcoding between Form definitions and FHIR Questionnaire resources."""

from typing import Any

from form_fhir.fhir.constants import (
    CATEGORY_CODE_SYSTEM,
    OPTION_CODE_SYSTEM,
    ORGANISATION_IDENTIFIER_SYSTEM,
    STATUS_FROM_FHIR,
    STATUS_TO_FHIR,
)
from form_fhir.fhir.errors import ResourceTypeError
from form_fhir.fhir.extensions import (
    build_field_extensions,
    build_form_extensions,
    format_datetime,
    parse_datetime,
    read_field_extensions,
    read_form_extensions,
)
from form_fhir.fhir.types import from_item, to_item_type
from form_fhir.models.fhir import (
    AnswerOption,
    Coding,
    Identifier,
    Meta,
    Questionnaire,
    QuestionnaireItem,
)
from form_fhir.models.form import (
    FIELD_CLASSES,
    ChoiceField,
    FieldOption,
    Form,
    FormField,
    GroupField,
    is_multi_valued,
)


class FormCodec:
    """Converts a Form to a Questionnaire and back.

    Self-produced Questionnaires round-trip field ids, kinds, required flags
    and all extension-carried metadata. Foreign Questionnaires decode with
    defaults wherever this package's extensions are missing.
    """

    def to_resource(self, form: Form) -> Questionnaire:
        """Build a Questionnaire from a Form.

        Args:
            form: The form definition.

        Returns:
            The equivalent Questionnaire resource.
        """
        identifier = None
        if form.org_id:
            identifier = [Identifier(system=ORGANISATION_IDENTIFIER_SYSTEM, value=form.org_id)]

        code = None
        if form.category:
            code = [Coding(system=CATEGORY_CODE_SYSTEM, code=form.category, display=form.category)]

        meta = None
        if form.updated_at is not None:
            meta = Meta(last_updated=format_datetime(form.updated_at))

        return Questionnaire(
            id=form.id,
            meta=meta,
            status=STATUS_TO_FHIR[form.status],
            title=form.name or None,
            description=form.description,
            identifier=identifier,
            code=code,
            extension=build_form_extensions(form),
            item=[self._field_to_item(field) for field in form.schema_] or None,
        )

    def from_resource(self, resource: dict[str, Any] | Questionnaire) -> Form:
        """Build a Form from a Questionnaire.

        Args:
            resource: A Questionnaire as a FHIR JSON dict or model.

        Returns:
            The decoded Form.

        Raises:
            ResourceTypeError: If the resource is not a Questionnaire.
        """
        questionnaire = self._coerce(resource)
        attrs = read_form_extensions(questionnaire.extension)

        return Form(
            id=questionnaire.id,
            org_id=self._org_id(questionnaire),
            name=questionnaire.title or "",
            category=self._category(questionnaire),
            description=questionnaire.description,
            status=STATUS_FROM_FHIR.get(questionnaire.status, "draft"),
            schema=[self._item_to_field(item) for item in questionnaire.item or []],
            updated_at=parse_datetime(questionnaire.meta.last_updated if questionnaire.meta else None),
            **attrs,
        )

    def _coerce(self, resource: dict[str, Any] | Questionnaire) -> Questionnaire:
        if isinstance(resource, Questionnaire):
            return resource
        resource_type = resource.get("resourceType") if isinstance(resource, dict) else None
        if resource_type != "Questionnaire":
            raise ResourceTypeError("Questionnaire", resource_type)
        return Questionnaire.model_validate(resource)

    def _field_to_item(self, field: FormField) -> QuestionnaireItem:
        answer_option = None
        if isinstance(field, ChoiceField):
            answer_option = [
                AnswerOption(
                    value_coding=Coding(
                        system=OPTION_CODE_SYSTEM, code=option.value, display=option.label
                    )
                )
                for option in field.options
            ] or None

        children = None
        if isinstance(field, GroupField):
            children = [self._field_to_item(child) for child in field.fields] or None

        return QuestionnaireItem(
            link_id=field.id,
            text=field.label,
            type=to_item_type(field),
            required=field.required,
            repeats=True if is_multi_valued(field) else None,
            extension=build_field_extensions(field),
            answer_option=answer_option,
            item=children,
        )

    def _item_to_field(self, item: QuestionnaireItem) -> FormField:
        kind = from_item(item)
        data: dict[str, Any] = {
            "id": item.link_id,
            "type": kind,
            "label": item.text or "",
            "required": bool(item.required),
            **read_field_extensions(item.extension, kind),
        }

        if kind in ("dropdown", "radio", "checkbox"):
            data["options"] = [
                option for option in map(self._read_option, item.answer_option or []) if option
            ]
            if kind != "checkbox":
                data["multiple"] = bool(item.repeats)
        elif kind == "group":
            data["fields"] = [self._item_to_field(child) for child in item.item or []]

        return FIELD_CLASSES[kind].model_validate(data)

    def _read_option(self, option: AnswerOption) -> FieldOption | None:
        coding = option.value_coding
        if coding is not None and coding.code is not None:
            return FieldOption(label=coding.display or coding.code, value=coding.code)
        if option.value_string is not None:
            return FieldOption(label=option.value_string, value=option.value_string)
        return None

    def _org_id(self, questionnaire: Questionnaire) -> str:
        identifiers = questionnaire.identifier or []
        for identifier in identifiers:
            if identifier.system == ORGANISATION_IDENTIFIER_SYSTEM and identifier.value:
                return identifier.value
        for identifier in identifiers:
            if identifier.value:
                return identifier.value
        return ""

    def _category(self, questionnaire: Questionnaire) -> str:
        for coding in questionnaire.code or []:
            if coding.code:
                return coding.code
        return ""
