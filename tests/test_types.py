"""Tests for field kind / item type mapping."""

import pytest

from form_fhir.fhir.constants import EXT_FIELD_TYPE
from form_fhir.fhir.types import FIELD_TO_ITEM_TYPE, from_item, to_item_type
from form_fhir.models import ChoiceField, Extension, QuestionnaireItem, ServiceGroupField
from form_fhir.models.form import FIELD_CLASSES


def _tagged(item_type: str, tag: str, repeats: bool | None = None) -> QuestionnaireItem:
    return QuestionnaireItem(
        link_id="q",
        type=item_type,
        repeats=repeats,
        extension=[Extension(url=EXT_FIELD_TYPE, value_code=tag)],
    )


class TestToItemType:
    """Tests for the forward table."""

    def test_table_covers_every_kind(self) -> None:
        """Test that every field kind has an item type."""
        assert set(FIELD_TO_ITEM_TYPE) == set(FIELD_CLASSES)

    @pytest.mark.parametrize(
        "kind,expected",
        [
            ("dropdown", "choice"),
            ("radio", "choice"),
            ("checkbox", "choice"),
        ],
    )
    def test_choice_kinds(self, kind: str, expected: str) -> None:
        assert to_item_type(ChoiceField(id="c", type=kind)) == expected

    def test_service_group_is_string(self) -> None:
        assert to_item_type(ServiceGroupField(id="s")) == "string"


class TestFromItem:
    """Tests for the reverse mapping."""

    @pytest.mark.parametrize("kind", sorted(FIELD_CLASSES))
    def test_type_tag_is_authoritative(self, kind: str) -> None:
        """Test that the type tag wins over the FHIR type."""
        assert from_item(_tagged(FIELD_TO_ITEM_TYPE[kind], kind)) == kind

    def test_radio_survives_with_tag(self) -> None:
        assert from_item(_tagged("choice", "radio")) == "radio"

    def test_unknown_tag_falls_back_to_inference(self) -> None:
        assert from_item(_tagged("text", "slider")) == "textarea"

    def test_untagged_choice_with_repeats_is_checkbox(self) -> None:
        item = QuestionnaireItem(link_id="q", type="choice", repeats=True)
        assert from_item(item) == "checkbox"

    def test_untagged_single_choice_is_dropdown(self) -> None:
        """Test that a foreign single choice is never guessed to be a radio."""
        item = QuestionnaireItem(link_id="q", type="choice")
        assert from_item(item) == "dropdown"

    @pytest.mark.parametrize(
        "item_type,expected",
        [
            ("string", "input"),
            ("text", "textarea"),
            ("decimal", "number"),
            ("integer", "number"),
            ("boolean", "boolean"),
            ("date", "date"),
            ("dateTime", "date"),
            ("attachment", "signature"),
            ("group", "group"),
            ("open-choice", "dropdown"),
            ("display", "input"),
            ("reference", "input"),
        ],
    )
    def test_untagged_inference(self, item_type: str, expected: str) -> None:
        assert from_item(QuestionnaireItem(link_id="q", type=item_type)) == expected
