"""Structural validation of FHIR resources."""

from form_fhir.validation.schema import is_valid_resource, load_schema, validate_resource

__all__ = [
    "is_valid_resource",
    "load_schema",
    "validate_resource",
]
