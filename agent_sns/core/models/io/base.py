"""
Shared configuration for API schemas.

Request and response bodies use camelCase keys on the wire and snake_case
attributes in Python.
"""

from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

_LONE_SURROGATE = re.compile(r"[\ud800-\udfff]")


class ApiModel(BaseModel):
    """Base for response schemas built from entities or dicts."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class RequestBody(ApiModel):
    """Base for request bodies.

    Text fields accept any JSON scalar: ``null`` becomes an empty string,
    other values are converted with ``str`` and stripped. Unpaired UTF-16
    surrogates, which JSON escapes can carry but UTF-8 cannot store, become
    U+FFFD. Routes decide which empty fields are errors.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


def coerce_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return _LONE_SURROGATE.sub("\ufffd", str(value)).strip()
