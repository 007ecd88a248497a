"""Exceptions raised at the FHIR boundary."""


class ResourceTypeError(Exception):
    """Raised when a resource of the wrong kind is passed to a decoder."""

    def __init__(self, expected: str, actual: object) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"Expected resourceType {expected!r}, got {actual!r}")


class ResourceValidationError(Exception):
    """Raised when a FHIR resource fails structural schema validation."""

    pass
