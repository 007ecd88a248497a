"""Tests for Form <-> Questionnaire transcoding."""

import pytest

from form_fhir.fhir import FormCodec, ResourceTypeError
from form_fhir.fhir.constants import (
    CATEGORY_CODE_SYSTEM,
    EXT_FIELD_TYPE,
    OPTION_CODE_SYSTEM,
    ORGANISATION_IDENTIFIER_SYSTEM,
)
from form_fhir.models import (
    ChoiceField,
    Form,
    GroupField,
    Questionnaire,
    ServiceGroupField,
    flatten_fields,
    to_fhir_json,
)


@pytest.fixture
def foreign_questionnaire() -> dict:
    """A Questionnaire authored elsewhere, without private extensions."""
    return {
        "resourceType": "Questionnaire",
        "id": "ext-1",
        "status": "unknown",
        "title": "PHQ-2",
        "identifier": [{"system": "urn:other", "value": "clinic-9"}],
        "item": [
            {
                "linkId": "1",
                "text": "Little interest?",
                "type": "choice",
                "required": True,
                "answerOption": [
                    {"valueCoding": {"code": "0", "display": "Not at all"}},
                    {"valueCoding": {"code": "1", "display": "Several days"}},
                ],
            },
            {
                "linkId": "2",
                "type": "open-choice",
                "repeats": True,
                "answerOption": [{"valueString": "other"}],
            },
            {"linkId": "3", "text": "Age", "type": "integer"},
            {"linkId": "4", "text": "Read this first", "type": "display"},
            {
                "linkId": "5",
                "type": "group",
                "item": [{"linkId": "5.1", "type": "boolean"}],
            },
        ],
    }


class TestToResource:
    """Tests for FormCodec.to_resource."""

    def test_document_level_elements(self, form_codec: FormCodec, intake_form: Form) -> None:
        resource = to_fhir_json(form_codec.to_resource(intake_form))

        assert resource["resourceType"] == "Questionnaire"
        assert resource["id"] == "form-1"
        assert resource["status"] == "active"
        assert resource["title"] == "New patient intake"
        assert resource["identifier"] == [
            {"system": ORGANISATION_IDENTIFIER_SYSTEM, "value": "org-1"}
        ]
        assert resource["code"] == [
            {"system": CATEGORY_CODE_SYSTEM, "code": "Consent", "display": "Consent"}
        ]
        assert resource["meta"]["lastUpdated"].startswith("2025-01-12T10:00:00")

    def test_item_types(self, form_codec: FormCodec, intake_form: Form) -> None:
        resource = form_codec.to_resource(intake_form)
        types = {item.link_id: item.type for item in resource.item}
        assert types == {
            "name": "string",
            "notes": "text",
            "weight": "decimal",
            "insured": "boolean",
            "visit_date": "date",
            "signature": "attachment",
            "colour": "choice",
            "size": "choice",
            "symptoms": "choice",
            "history": "group",
            "services": "string",
        }

    def test_group_recurses(self, form_codec: FormCodec, intake_form: Form) -> None:
        resource = form_codec.to_resource(intake_form)
        history = next(item for item in resource.item if item.link_id == "history")
        assert [child.link_id for child in history.item] == ["allergies", "medications"]
        assert history.item[1].repeats is True

    def test_choice_options_and_repeats(self, form_codec: FormCodec, intake_form: Form) -> None:
        resource = to_fhir_json(form_codec.to_resource(intake_form))
        items = {item["linkId"]: item for item in resource["item"]}

        assert items["symptoms"]["repeats"] is True
        assert "repeats" not in items["colour"]
        assert items["colour"]["answerOption"][1] == {
            "valueCoding": {"system": OPTION_CODE_SYSTEM, "code": "blue", "display": "Blue"}
        }

    def test_items_carry_type_tag(self, form_codec: FormCodec, intake_form: Form) -> None:
        resource = form_codec.to_resource(intake_form)
        size = next(item for item in resource.item if item.link_id == "size")
        tags = [ext.value_code for ext in size.extension if ext.url == EXT_FIELD_TYPE]
        assert tags == ["radio"]

    def test_minimal_form_is_minimal(self, form_codec: FormCodec) -> None:
        """Test that empty concerns are omitted rather than emitted empty."""
        resource = to_fhir_json(form_codec.to_resource(Form(name="Empty")))
        assert set(resource) == {"resourceType", "status", "title", "extension"}
        assert resource["status"] == "draft"

    @pytest.mark.parametrize(
        "status,expected",
        [("draft", "draft"), ("published", "active"), ("archived", "retired")],
    )
    def test_status_mapping(self, form_codec: FormCodec, status: str, expected: str) -> None:
        assert form_codec.to_resource(Form(status=status)).status == expected


class TestFromResource:
    """Tests for FormCodec.from_resource."""

    def test_round_trip_is_exact(self, form_codec: FormCodec, intake_form: Form) -> None:
        """Test that a self-produced Questionnaire decodes to the same Form."""
        resource = to_fhir_json(form_codec.to_resource(intake_form))
        assert form_codec.from_resource(resource) == intake_form

    def test_round_trip_preserves_tree_shape(self, form_codec: FormCodec, intake_form: Form) -> None:
        decoded = form_codec.from_resource(form_codec.to_resource(intake_form))

        original = list(flatten_fields(intake_form.schema_))
        restored = list(flatten_fields(decoded.schema_))
        assert len(restored) == len(original)
        assert [f.id for f in restored] == [f.id for f in original]
        assert [f.type for f in restored] == [f.type for f in original]
        assert [f.required for f in restored] == [f.required for f in original]

    def test_service_group_services_restored(self, form_codec: FormCodec, intake_form: Form) -> None:
        decoded = form_codec.from_resource(form_codec.to_resource(intake_form))
        services = decoded.get_field("services")
        assert isinstance(services, ServiceGroupField)
        assert services.services == ["svc-1", "svc-2"]
        assert services.meta is None

    @pytest.mark.parametrize("multiple", [True, False])
    def test_checkbox_multiple_flag_restored(self, form_codec: FormCodec, multiple: bool) -> None:
        form = Form(schema=[ChoiceField(id="c", type="checkbox", multiple=multiple)])
        resource = to_fhir_json(form_codec.to_resource(form))

        assert resource["item"][0]["repeats"] is True
        assert form_codec.from_resource(resource).schema_[0].multiple is multiple

    def test_published_round_trips_through_active(self, form_codec: FormCodec) -> None:
        resource = to_fhir_json(form_codec.to_resource(Form(status="published")))
        assert resource["status"] == "active"
        assert form_codec.from_resource(resource).status == "published"

    def test_foreign_questionnaire(self, form_codec: FormCodec, foreign_questionnaire: dict) -> None:
        """Test graceful decoding without private extensions."""
        form = form_codec.from_resource(foreign_questionnaire)

        assert form.status == "draft"
        assert form.name == "PHQ-2"
        assert form.org_id == "clinic-9"
        assert form.category == ""
        assert form.visibility_type == "Internal"
        assert [f.type for f in form.schema_] == ["dropdown", "checkbox", "number", "input", "group"]

        first = form.schema_[0]
        assert isinstance(first, ChoiceField)
        assert first.required is True
        assert [(o.label, o.value) for o in first.options] == [
            ("Not at all", "0"),
            ("Several days", "1"),
        ]
        assert form.schema_[1].options[0].value == "other"

        group = form.schema_[4]
        assert isinstance(group, GroupField)
        assert group.fields[0].type == "boolean"
        assert group.fields[0].label == ""

    def test_model_input_accepted(self, form_codec: FormCodec, intake_form: Form) -> None:
        resource = form_codec.to_resource(intake_form)
        assert isinstance(resource, Questionnaire)
        assert form_codec.from_resource(resource).id == "form-1"

    @pytest.mark.parametrize(
        "resource",
        [
            {"resourceType": "QuestionnaireResponse", "status": "completed"},
            {"resourceType": "Patient"},
            {"status": "active"},
        ],
    )
    def test_wrong_resource_type_raises(self, form_codec: FormCodec, resource: dict) -> None:
        with pytest.raises(ResourceTypeError):
            form_codec.from_resource(resource)
