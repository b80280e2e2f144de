# app/schemas/base.py
from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from app.utils.datetime_utils import as_utc

# SQLite returns naive timestamps; everything leaving the API is UTC with a "Z" suffix
UTCDateTime = Annotated[datetime, AfterValidator(as_utc)]


def clean_string_list(values: list[str] | None) -> list[str]:
    """Trim every entry and reject blank ones (used for patient array fields)."""
    if values is None:
        return []
    cleaned = []
    for value in values:
        if not isinstance(value, str):
            # left for the list[str] type check to reject
            cleaned.append(value)
            continue
        stripped = value.strip()
        if not stripped:
            raise ValueError("List entries must be non-empty strings")
        cleaned.append(stripped)
    return cleaned


class CamelModel(BaseModel):
    """
    Base schema for the public API: snake_case in Python, camelCase on the wire.
    Either spelling is accepted on input.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )
