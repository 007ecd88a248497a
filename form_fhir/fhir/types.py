"""Mapping between form field kinds and FHIR item types.

The forward direction is a total table. The reverse direction trusts the
field-type extension written by this package; without it the kind is
inferred from the FHIR type and ``repeats`` flag. Inference never yields
``radio``: a foreign single-select choice is always read back as a dropdown.
"""

import logging

from form_fhir.fhir.constants import EXT_FIELD_TYPE
from form_fhir.models.fhir import QuestionnaireItem
from form_fhir.models.form import FIELD_CLASSES, FormField

logger = logging.getLogger(__name__)

FIELD_TO_ITEM_TYPE: dict[str, str] = {
    "input": "string",
    "textarea": "text",
    "number": "decimal",
    "dropdown": "choice",
    "radio": "choice",
    "checkbox": "choice",
    "boolean": "boolean",
    "date": "date",
    "signature": "attachment",
    "group": "group",
    "service-group": "string",
}

# Used only when the field-type extension is missing.
ITEM_TYPE_TO_FIELD: dict[str, str] = {
    "string": "input",
    "url": "input",
    "text": "textarea",
    "decimal": "number",
    "integer": "number",
    "quantity": "number",
    "boolean": "boolean",
    "date": "date",
    "dateTime": "date",
    "time": "date",
    "attachment": "signature",
    "group": "group",
}


def to_item_type(field: FormField) -> str:
    """Return the FHIR item type for a field."""
    return FIELD_TO_ITEM_TYPE[field.type]


def from_item(item: QuestionnaireItem) -> str:
    """Return the field kind for a Questionnaire item."""
    for ext in item.extension or []:
        if ext.url != EXT_FIELD_TYPE:
            continue
        tag = ext.value_code or ext.value_string
        if tag in FIELD_CLASSES:
            return tag
        logger.debug("Ignoring unknown field-type tag %r on item %s", tag, item.link_id)
        break

    if item.type in ("choice", "open-choice"):
        return "checkbox" if item.repeats else "dropdown"
    return ITEM_TYPE_TO_FIELD.get(item.type, "input")
