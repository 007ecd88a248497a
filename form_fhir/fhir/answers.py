"""Codec between one field's submitted value and FHIR answer entries.

Encoding is per field kind. A list value produces one answer per element,
in order. Values that cannot be represented (an unparsable date) are dropped
and values of the wrong shape (non-numeric text for a number field) are
downgraded to a string answer; neither case raises.

Decoding is the inverse, with one asymmetry existing consumers rely on:
checkbox fields and fields flagged ``multiple`` always decode to a list,
even from a single answer, while every other field decodes to a scalar.
"""

import json
import logging
import math
import re
from datetime import date, datetime, timezone
from typing import Any

from form_fhir.fhir.constants import DEFAULT_SIGNATURE_CONTENT_TYPE, OPTION_CODE_SYSTEM
from form_fhir.fhir.extensions import parse_datetime
from form_fhir.models.fhir import Answer, Attachment, Coding
from form_fhir.models.form import ChoiceField, FormField, is_multi_valued

logger = logging.getLogger(__name__)

CHOICE_KINDS = ("dropdown", "radio", "checkbox")

_DATA_URI_PREFIX = re.compile(r"^data:([^;,]*)[^,]*;base64,")


class AnswerCodec:
    """Encodes and decodes answers according to the field they belong to."""

    def encode(self, field: FormField, value: Any) -> list[Answer]:
        """Encode a submitted value into zero or more answers.

        Args:
            field: The field the value was submitted for.
            value: The submitted value, or a list of values.

        Returns:
            One answer per value that could be encoded.
        """
        answers: list[Answer] = []
        for item in self._as_list(value):
            answer = self._encode_one(field, item)
            if answer is not None:
                answers.append(answer)
        return answers

    def decode(self, answers: list[Answer] | None, field: FormField) -> Any:
        """Decode answers back into a submitted value.

        Args:
            answers: The answer entries of one response item.
            field: The field the item belongs to.

        Returns:
            A list for multi-valued fields, otherwise the first decoded
            value. None when no entry decodes.
        """
        values = [
            value
            for value in (self._decode_one(answer, field) for answer in answers or [])
            if value is not None
        ]
        if not values:
            return None
        if is_multi_valued(field):
            return values
        return values[0]

    def encode_untyped(self, value: Any) -> list[Answer]:
        """Encode a value with no field definition, choosing the type from the value."""
        answers: list[Answer] = []
        for item in self._as_list(value):
            answers.append(self._encode_untyped_one(item))
        return answers

    def decode_untyped(self, answers: list[Answer] | None) -> Any:
        """Decode answers with no field definition.

        A single decoded value is returned as a scalar, several as a list.
        """
        values = [
            value
            for value in (self._decode_untyped_one(answer) for answer in answers or [])
            if value is not None
        ]
        if not values:
            return None
        if len(values) == 1:
            return values[0]
        return values

    # ── encoding ───────────────────────────────────────────────────

    def _as_list(self, value: Any) -> list[Any]:
        if value is None:
            return []
        if isinstance(value, (list, tuple)):
            return [item for item in value if item is not None]
        return [value]

    def _encode_one(self, field: FormField, value: Any) -> Answer | None:
        kind = field.type

        if kind == "boolean":
            return Answer(value_boolean=self._to_bool(value))

        if kind == "date":
            day = self._to_date(value)
            if day is None:
                logger.debug("Dropping unparsable date for field %s", field.id)
                return None
            return Answer(value_date=day.isoformat())

        if kind == "number":
            number = self._to_number(value)
            if number is None:
                return Answer(value_string=self._to_string(value))
            return Answer(value_decimal=number)

        if kind in CHOICE_KINDS:
            return Answer(value_coding=self._to_coding(field, value))

        if kind == "signature":
            return Answer(value_attachment=self._to_attachment(value))

        return Answer(value_string=self._to_string(value))

    def _encode_untyped_one(self, value: Any) -> Answer:
        if isinstance(value, bool):
            return Answer(value_boolean=value)
        if isinstance(value, int) or (isinstance(value, float) and math.isfinite(value)):
            return Answer(value_decimal=value)
        if isinstance(value, datetime):
            return Answer(value_date_time=value.isoformat())
        if isinstance(value, date):
            return Answer(value_date=value.isoformat())
        return Answer(value_string=self._to_string(value))

    def _to_string(self, value: Any) -> str:
        if isinstance(value, str):
            return value
        return json.dumps(value, ensure_ascii=False, default=str)

    def _to_bool(self, value: Any) -> bool:
        if isinstance(value, str):
            return value.strip().lower() == "true"
        return bool(value)

    def _to_number(self, value: Any) -> int | float | None:
        if isinstance(value, bool):
            return None
        if isinstance(value, int):
            return value
        if isinstance(value, float):
            return value if math.isfinite(value) else None
        if not isinstance(value, str):
            return None

        text = value.strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            number = float(text)
        except ValueError:
            return None
        return number if math.isfinite(number) else None

    def _to_date(self, value: Any) -> date | None:
        if isinstance(value, datetime):
            return self._utc_day(value)
        if isinstance(value, date):
            return value
        if not isinstance(value, str):
            return None

        text = value.strip()
        try:
            return date.fromisoformat(text)
        except ValueError:
            pass
        parsed = parse_datetime(text)
        return self._utc_day(parsed) if parsed is not None else None

    def _utc_day(self, value: datetime) -> date:
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()

    def _to_coding(self, field: FormField, value: Any) -> Coding:
        code = value if isinstance(value, str) else self._to_string(value)
        option = field.get_option(code) if isinstance(field, ChoiceField) else None
        return Coding(
            system=OPTION_CODE_SYSTEM,
            code=code,
            display=option.label if option is not None else None,
        )

    def _to_attachment(self, value: Any) -> Attachment:
        data = self._to_string(value)
        content_type = DEFAULT_SIGNATURE_CONTENT_TYPE
        match = _DATA_URI_PREFIX.match(data)
        if match:
            content_type = match.group(1) or DEFAULT_SIGNATURE_CONTENT_TYPE
            data = data[match.end():]
        return Attachment(content_type=content_type, data=data)

    # ── decoding ───────────────────────────────────────────────────

    def _decode_one(self, answer: Answer, field: FormField) -> Any:
        kind = field.type

        if kind == "boolean":
            return answer.value_boolean

        if kind == "date":
            return self._decode_date(answer)

        if kind == "number":
            for value in (answer.value_decimal, answer.value_integer, answer.value_string):
                if value is not None:
                    return value
            return None

        if kind in CHOICE_KINDS:
            # Codes missing from the field's options are kept as-is.
            if answer.value_coding is not None and answer.value_coding.code is not None:
                return answer.value_coding.code
            return answer.value_string

        if kind == "signature":
            attachment = answer.value_attachment
            if attachment is None:
                return None
            return attachment.data if attachment.data is not None else attachment.url

        if answer.value_string is not None:
            return answer.value_string
        return self._decode_untyped_one(answer)

    def _decode_date(self, answer: Answer) -> date | None:
        if answer.value_date is not None:
            try:
                return date.fromisoformat(answer.value_date)
            except ValueError:
                logger.debug("Dropping unparsable valueDate %r", answer.value_date)
                return None
        if answer.value_date_time is not None:
            parsed = parse_datetime(answer.value_date_time)
            return self._utc_day(parsed) if parsed is not None else None
        return None

    def _decode_untyped_one(self, answer: Answer) -> Any:
        if answer.value_boolean is not None:
            return answer.value_boolean
        if answer.value_decimal is not None:
            return answer.value_decimal
        if answer.value_integer is not None:
            return answer.value_integer
        if answer.value_date is not None:
            return self._decode_date(answer)
        if answer.value_date_time is not None:
            return answer.value_date_time
        if answer.value_string is not None:
            return answer.value_string
        if answer.value_coding is not None:
            return answer.value_coding.code
        if answer.value_attachment is not None:
            return answer.value_attachment.data or answer.value_attachment.url
        return None
