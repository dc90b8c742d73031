"""Boolean schema."""

from __future__ import annotations

from typing import Any

from .context import ValidationContext
from .exceptions import LocalizedError
from .schema import Assertion, Schema

TRUE_STRINGS = frozenset({"true", "1"})
FALSE_STRINGS = frozenset({"false", "0"})


def check_boolean(value: Any, ctx: ValidationContext) -> Any:
    if isinstance(value, bool):
        return None
    if ctx.cast and isinstance(value, str):
        text = value.strip().lower()
        if text in TRUE_STRINGS:
            return True
        if text in FALSE_STRINGS:
            return False
    raise LocalizedError("Must be a boolean.")


class BooleanSchema(Schema):
    def __init__(self) -> None:
        super().__init__({"type": "boolean"}, (Assertion.create("type", check_boolean),))


def boolean_schema() -> BooleanSchema:
    return BooleanSchema()
