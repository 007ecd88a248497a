"""Pytest configuration and shared fixtures."""

from datetime import date
from pathlib import Path

import pytest

from form_fhir.fhir import AnswerCodec, FormCodec, SubmissionCodec
from form_fhir.models import Form, FormSubmission


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the config home at an empty temporary directory."""
    home = tmp_path / "form-fhir-home"
    monkeypatch.setenv("FORM_FHIR_HOME", str(home))
    return home


@pytest.fixture
def answer_codec() -> AnswerCodec:
    return AnswerCodec()


@pytest.fixture
def form_codec() -> FormCodec:
    return FormCodec()


@pytest.fixture
def submission_codec() -> SubmissionCodec:
    return SubmissionCodec()


@pytest.fixture
def intake_form_data() -> dict:
    """An intake form using every field kind, including a nested group."""
    return {
        "id": "form-1",
        "orgId": "org-1",
        "businessType": "HOSPITAL",
        "name": "New patient intake",
        "category": "Consent",
        "description": "Collected before the first appointment",
        "visibilityType": "External",
        "serviceId": ["svc-1", "svc-2"],
        "speciesFilter": ["dog", "cat"],
        "status": "published",
        "schema": [
            {
                "id": "name",
                "type": "input",
                "label": "Name",
                "placeholder": "Full name",
                "required": True,
                "order": 1,
            },
            {"id": "notes", "type": "textarea", "label": "Notes", "order": 2},
            {
                "id": "weight",
                "type": "number",
                "label": "Weight",
                "order": 3,
                "meta": {"unit": "kg", "min": 0},
            },
            {"id": "insured", "type": "boolean", "label": "Insured"},
            {"id": "visit_date", "type": "date", "label": "Visit date"},
            {"id": "signature", "type": "signature", "label": "Signature", "required": True},
            {
                "id": "colour",
                "type": "dropdown",
                "label": "Coat colour",
                "options": [
                    {"label": "Red", "value": "red"},
                    {"label": "Blue", "value": "blue"},
                ],
            },
            {
                "id": "size",
                "type": "radio",
                "label": "Size",
                "options": [
                    {"label": "Small", "value": "small"},
                    {"label": "Large", "value": "large"},
                ],
            },
            {
                "id": "symptoms",
                "type": "checkbox",
                "label": "Symptoms",
                "options": [
                    {"label": "Cough", "value": "cough"},
                    {"label": "Fever", "value": "fever"},
                ],
            },
            {
                "id": "history",
                "type": "group",
                "label": "History",
                "group": "clinical",
                "fields": [
                    {"id": "allergies", "type": "input", "label": "Allergies"},
                    {
                        "id": "medications",
                        "type": "dropdown",
                        "label": "Medications",
                        "multiple": True,
                        "options": [
                            {"label": "Antibiotic", "value": "abx"},
                            {"label": "Steroid", "value": "ster"},
                        ],
                    },
                ],
            },
            {
                "id": "services",
                "type": "service-group",
                "label": "Services",
                "services": ["svc-1", "svc-2"],
            },
        ],
        "createdBy": "user-1",
        "updatedBy": "user-2",
        "createdAt": "2025-01-10T09:00:00+00:00",
        "updatedAt": "2025-01-12T10:00:00+00:00",
    }


@pytest.fixture
def intake_form(intake_form_data: dict) -> Form:
    return Form.model_validate(intake_form_data)


@pytest.fixture
def intake_answers() -> dict:
    """Answers to every non-group field of the intake form."""
    return {
        "name": "Jane Doe",
        "notes": "First visit",
        "weight": 12.5,
        "insured": True,
        "visit_date": date(2025, 1, 15),
        "signature": "AAAA",
        "colour": "red",
        "size": "small",
        "symptoms": ["cough", "fever"],
        "allergies": "pollen",
        "medications": ["abx"],
        "services": "svc-1",
    }


@pytest.fixture
def intake_submission(intake_answers: dict) -> FormSubmission:
    return FormSubmission(
        id="sub-1",
        form_id="form-1",
        form_version=3,
        appointment_id="appt-1",
        companion_id="comp-1",
        parent_id="parent-1",
        submitted_by="user-9",
        answers=intake_answers,
        submitted_at="2025-01-15T10:30:00+00:00",
    )
