"""Structural validation of FHIR resources against bundled JSON Schemas.

Checks shape only: required elements, value types and the item tree. No
terminology or business-rule validation is performed.
"""

import json
from functools import lru_cache
from pathlib import Path
from typing import Any

import jsonschema

from form_fhir.fhir.errors import ResourceTypeError, ResourceValidationError

SCHEMA_DIR = Path(__file__).parent.parent / "schemas"

SCHEMA_FILES: dict[str, str] = {
    "Questionnaire": "questionnaire.schema.json",
    "QuestionnaireResponse": "questionnaire_response.schema.json",
}


@lru_cache(maxsize=None)
def load_schema(resource_type: str) -> dict[str, Any]:
    """Load the JSON Schema for a resource type.

    Raises:
        ResourceTypeError: If no schema is bundled for the resource type.
    """
    filename = SCHEMA_FILES.get(resource_type)
    if filename is None:
        raise ResourceTypeError(" or ".join(SCHEMA_FILES), resource_type)
    with open(SCHEMA_DIR / filename) as f:
        return json.load(f)


def validate_resource(resource: dict[str, Any]) -> None:
    """Validate a FHIR resource dict against the schema for its resourceType.

    Args:
        resource: A Questionnaire or QuestionnaireResponse as FHIR JSON.

    Raises:
        ResourceTypeError: If the resourceType is missing or unsupported.
        ResourceValidationError: If the resource does not match its schema.
    """
    if not isinstance(resource, dict):
        raise ResourceValidationError(f"Expected a JSON object, got {type(resource).__name__}")
    resource_type = resource.get("resourceType")
    if not isinstance(resource_type, str):
        raise ResourceTypeError(" or ".join(SCHEMA_FILES), resource_type)
    schema = load_schema(resource_type)
    try:
        jsonschema.validate(resource, schema)
    except jsonschema.ValidationError as e:
        path = "/".join(str(part) for part in e.absolute_path) or "<root>"
        raise ResourceValidationError(
            f"{resource_type} validation failed at {path}: {e.message}"
        ) from e


def is_valid_resource(resource: dict[str, Any]) -> bool:
    """Return True if the resource passes validation."""
    try:
        validate_resource(resource)
    except (ResourceTypeError, ResourceValidationError):
        return False
    return True
