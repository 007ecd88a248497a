"""Encoding of auxiliary metadata as namespaced FHIR extensions.

Each concern is written under its own URL (see ``constants``) and only
when it has a value. Readers never raise on bad data: a value that cannot
be decoded is treated as absent.
"""

import json
import logging
from datetime import datetime
from typing import Any

from form_fhir.fhir.constants import (
    EXT_APPOINTMENT_ID,
    EXT_BUSINESS_TYPE,
    EXT_COMPANION_ID,
    EXT_CREATED_AT,
    EXT_CREATED_BY,
    EXT_FIELD_TYPE,
    EXT_FORM_VERSION,
    EXT_GROUP,
    EXT_META,
    EXT_MULTIPLE,
    EXT_ORDER,
    EXT_PARENT_ID,
    EXT_PLACEHOLDER,
    EXT_SERVICE_ID,
    EXT_SIGNING,
    EXT_SPECIES_FILTER,
    EXT_SUBMITTED_BY,
    EXT_UPDATED_BY,
    EXT_VISIBILITY,
)
from form_fhir.models.fhir import Extension
from form_fhir.models.form import Form, FormField, FormSubmission, SigningInfo

logger = logging.getLogger(__name__)

VISIBILITY_TYPES = ("Internal", "External", "Internal_External")

# Key under which service-group fields carry their services in the meta blob.
SERVICES_META_KEY = "services"


# ── Generic helpers ────────────────────────────────────────────────


def find_extensions(extensions: list[Extension] | None, url: str) -> list[Extension]:
    """Return all extensions with the given URL, in document order."""
    return [ext for ext in extensions or [] if ext.url == url]


def extension_value(ext: Extension) -> Any:
    """Return whichever ``value[x]`` is set on an extension."""
    for value in (
        ext.value_string,
        ext.value_integer,
        ext.value_boolean,
        ext.value_code,
        ext.value_date_time,
    ):
        if value is not None:
            return value
    return None


def get_extension_value(extensions: list[Extension] | None, url: str) -> Any:
    """Return the value of the first extension with ``url``, or None."""
    for ext in find_extensions(extensions, url):
        return extension_value(ext)
    return None


def get_extension_values(extensions: list[Extension] | None, url: str) -> list[Any]:
    """Return the values of every extension with ``url``, skipping empty ones."""
    values = [extension_value(ext) for ext in find_extensions(extensions, url)]
    return [value for value in values if value is not None]


def _string(extensions: list[Extension] | None, url: str) -> str | None:
    value = get_extension_value(extensions, url)
    return value if isinstance(value, str) else None


def format_datetime(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def parse_datetime(value: str | None) -> datetime | None:
    """Parse an ISO 8601 timestamp, returning None when it is unparsable."""
    if not value:
        return None
    text = value[:-1] + "+00:00" if value.endswith("Z") else value
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        logger.debug("Dropping unparsable timestamp %r", value)
        return None


def encode_json(url: str, value: dict[str, Any] | None) -> Extension | None:
    """Serialise a JSON object into a single string-valued extension."""
    if not value:
        return None
    return Extension(url=url, value_string=json.dumps(value, ensure_ascii=False, default=str))


def decode_json(raw: Any) -> dict[str, Any] | None:
    """Parse a JSON object string. Malformed or non-object input yields None."""
    if not isinstance(raw, str):
        return None
    try:
        parsed = json.loads(raw)
    except ValueError:
        logger.debug("Dropping malformed JSON extension value")
        return None
    if not isinstance(parsed, dict):
        logger.debug("Dropping non-object JSON extension value")
        return None
    return parsed


# ── Field extensions ───────────────────────────────────────────────


def build_field_extensions(field: FormField) -> list[Extension]:
    """Build the extensions for one Questionnaire item."""
    extensions = [Extension(url=EXT_FIELD_TYPE, value_code=field.type)]

    if field.placeholder:
        extensions.append(Extension(url=EXT_PLACEHOLDER, value_string=field.placeholder))
    if field.order is not None:
        extensions.append(Extension(url=EXT_ORDER, value_integer=field.order))
    if field.group:
        extensions.append(Extension(url=EXT_GROUP, value_string=field.group))
    # Checkboxes always carry repeats; their multiple flag travels here.
    if field.type == "checkbox" and field.multiple:
        extensions.append(Extension(url=EXT_MULTIPLE, value_boolean=True))

    meta = dict(field.meta or {})
    if field.type == "service-group" and field.services:
        meta[SERVICES_META_KEY] = list(field.services)
    meta_ext = encode_json(EXT_META, meta)
    if meta_ext is not None:
        extensions.append(meta_ext)

    return extensions


def read_field_extensions(extensions: list[Extension] | None, kind: str) -> dict[str, Any]:
    """Read field attributes back from item extensions.

    Returns keyword arguments for the field model. For service-group fields
    the ``services`` entry is lifted out of the meta blob.
    """
    order = get_extension_value(extensions, EXT_ORDER)
    meta = decode_json(get_extension_value(extensions, EXT_META))

    attrs: dict[str, Any] = {
        "placeholder": _string(extensions, EXT_PLACEHOLDER),
        "order": order if isinstance(order, int) and not isinstance(order, bool) else None,
        "group": _string(extensions, EXT_GROUP),
    }

    if kind == "checkbox":
        attrs["multiple"] = get_extension_value(extensions, EXT_MULTIPLE) is True

    if kind == "service-group" and meta is not None:
        services = meta.pop(SERVICES_META_KEY, None)
        if isinstance(services, list):
            attrs["services"] = [str(s) for s in services]

    attrs["meta"] = meta or None
    return attrs


# ── Form extensions ────────────────────────────────────────────────


def build_form_extensions(form: Form) -> list[Extension]:
    """Build the document-level extensions of a Questionnaire."""
    extensions = [Extension(url=EXT_VISIBILITY, value_code=form.visibility_type)]

    for service_id in form.service_id or []:
        extensions.append(Extension(url=EXT_SERVICE_ID, value_string=service_id))
    for species in form.species_filter or []:
        extensions.append(Extension(url=EXT_SPECIES_FILTER, value_string=species))

    if form.business_type:
        extensions.append(Extension(url=EXT_BUSINESS_TYPE, value_code=form.business_type))
    if form.created_by:
        extensions.append(Extension(url=EXT_CREATED_BY, value_string=form.created_by))
    if form.updated_by:
        extensions.append(Extension(url=EXT_UPDATED_BY, value_string=form.updated_by))
    if form.created_at is not None:
        extensions.append(
            Extension(url=EXT_CREATED_AT, value_date_time=format_datetime(form.created_at))
        )

    return extensions


def read_form_extensions(extensions: list[Extension] | None) -> dict[str, Any]:
    """Read Form attributes back from Questionnaire extensions."""
    visibility = get_extension_value(extensions, EXT_VISIBILITY)
    service_ids = [str(v) for v in get_extension_values(extensions, EXT_SERVICE_ID)]
    species = [str(v) for v in get_extension_values(extensions, EXT_SPECIES_FILTER)]

    return {
        "visibility_type": visibility if visibility in VISIBILITY_TYPES else "Internal",
        "service_id": service_ids or None,
        "species_filter": species or None,
        "business_type": _string(extensions, EXT_BUSINESS_TYPE),
        "created_by": _string(extensions, EXT_CREATED_BY) or "",
        "updated_by": _string(extensions, EXT_UPDATED_BY) or "",
        "created_at": parse_datetime(_string(extensions, EXT_CREATED_AT)),
    }


# ── Response extensions ────────────────────────────────────────────

_RESPONSE_ID_EXTENSIONS = (
    ("appointment_id", EXT_APPOINTMENT_ID),
    ("companion_id", EXT_COMPANION_ID),
    ("parent_id", EXT_PARENT_ID),
    ("submitted_by", EXT_SUBMITTED_BY),
)


def build_response_extensions(submission: FormSubmission) -> list[Extension]:
    """Build the provenance extensions of a QuestionnaireResponse."""
    extensions = [Extension(url=EXT_FORM_VERSION, value_integer=submission.form_version)]

    for attr, url in _RESPONSE_ID_EXTENSIONS:
        value = getattr(submission, attr)
        if value:
            extensions.append(Extension(url=url, value_string=value))

    if submission.signing is not None:
        extensions.append(
            Extension(
                url=EXT_SIGNING,
                value_string=submission.signing.model_dump_json(by_alias=True, exclude_none=True),
            )
        )

    return extensions


def read_response_extensions(extensions: list[Extension] | None) -> dict[str, Any]:
    """Read FormSubmission provenance back from QuestionnaireResponse extensions.

    ``form_version`` is None when the extension is absent so that callers can
    fall back to the canonical reference.
    """
    version = get_extension_value(extensions, EXT_FORM_VERSION)
    attrs: dict[str, Any] = {
        "form_version": version if isinstance(version, int) and not isinstance(version, bool) else None,
    }
    for attr, url in _RESPONSE_ID_EXTENSIONS:
        attrs[attr] = _string(extensions, url)

    signing = decode_json(get_extension_value(extensions, EXT_SIGNING))
    attrs["signing"] = _read_signing(signing)
    return attrs


def _read_signing(data: dict[str, Any] | None) -> SigningInfo | None:
    if data is None:
        return None
    try:
        return SigningInfo.model_validate(data)
    except ValueError:
        logger.debug("Dropping invalid signing extension")
        return None
