from datetime import date, datetime
import re
from pydantic import BaseModel, model_validator
from typing import Any, Union, get_args, get_origin

INVISIBLE_CHARS_PATTERN = re.compile(
    r'[\u200b-\u200f\u202a-\u202e\u2066-\u2069\ufeff]')


def deep_clean(value: Any):
    """Recursively strip strings, drop invisible chars and turn blanks into None."""

    if isinstance(value, BaseModel):
        return type(value)(**deep_clean(value.model_dump()))

    if isinstance(value, dict):
        return {k: deep_clean(v) for k, v in value.items()}

    if isinstance(value, list):
        return [deep_clean(v) for v in value]

    if isinstance(value, str):
        cleaned = INVISIBLE_CHARS_PATTERN.sub("", value).strip()
        return None if cleaned == "" else cleaned

    return value


def _date_kind(annotation) -> type | None:
    if annotation in (date, datetime):
        return annotation
    if get_origin(annotation) is Union:
        for arg in get_args(annotation):
            if arg in (date, datetime):
                return arg
    return None


def safe_parse_date(value: Any, kind: type = date):
    """Convert ISO strings to date/datetime, leave anything unparseable for pydantic to reject."""
    if value is None or isinstance(value, (date, datetime)):
        return value
    if not isinstance(value, str):
        return value

    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return value
    return parsed.date() if kind is date else parsed


class EmptyStringModel(BaseModel):
    model_config = {
        "populate_by_name": True,
        "from_attributes": True,
    }

    # STEP 1: Pre-clean input
    @model_validator(mode="before")
    @classmethod
    def clean_input(cls, values):
        if isinstance(values, dict):
            return deep_clean(values)
        return values

    # STEP 2: Normalise date strings ("2025-01-01T00:00:00" for a date field)
    @model_validator(mode="before")
    @classmethod
    def fix_dates(cls, values):
        if not isinstance(values, dict):
            return values

        values = dict(values)
        for field_name, field in cls.model_fields.items():
            kind = _date_kind(field.annotation)
            if kind and field_name in values:
                values[field_name] = safe_parse_date(values[field_name], kind)

        return values
