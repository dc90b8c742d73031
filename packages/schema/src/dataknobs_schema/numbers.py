"""Number schema."""

from __future__ import annotations

import math
from typing import Any, Union

from .context import ValidationContext
from .exceptions import LocalizedError
from .schema import Assertion, Schema

Number = Union[int, float]


def is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def parse_number(text: str) -> Number | None:
    text = text.strip()
    try:
        return int(text)
    except ValueError:
        pass
    try:
        number = float(text)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def check_number(value: Any, ctx: ValidationContext) -> Any:
    if is_number(value):
        return None
    if ctx.cast and isinstance(value, str):
        number = parse_number(value)
        if number is not None:
            return number
    raise LocalizedError("Must be a number.")


class NumberSchema(Schema):
    """Schema for finite ``int`` and ``float`` values (never ``bool``)."""

    def __init__(self) -> None:
        super().__init__({"type": "number"}, (Assertion.create("type", check_number),))

    def min(self, minimum: Number) -> NumberSchema:
        def check_min(value: Number, ctx: ValidationContext) -> None:
            if value < minimum:
                raise LocalizedError("Must be greater than {min}.", min=minimum)

        return self.assert_("min", check_min, min=minimum)

    def max(self, maximum: Number) -> NumberSchema:
        def check_max(value: Number, ctx: ValidationContext) -> None:
            if value > maximum:
                raise LocalizedError("Must be less than {max}.", max=maximum)

        return self.assert_("max", check_max, max=maximum)

    def integer(self) -> NumberSchema:
        def check_integer(value: Number, ctx: ValidationContext) -> None:
            if isinstance(value, float) and not value.is_integer():
                raise LocalizedError("Must be an integer.")

        return self.assert_("integer", check_integer, integer=True)

    def positive(self) -> NumberSchema:
        def check_positive(value: Number, ctx: ValidationContext) -> None:
            if value < 0:
                raise LocalizedError("Must be positive.")

        return self.assert_("min", check_positive, min=0)

    def negative(self) -> NumberSchema:
        def check_negative(value: Number, ctx: ValidationContext) -> None:
            if value > 0:
                raise LocalizedError("Must be negative.")

        return self.assert_("max", check_negative, max=0)

    def multiple(self, multiple: Number) -> NumberSchema:
        def check_multiple(value: Number, ctx: ValidationContext) -> None:
            if value % multiple != 0:
                raise LocalizedError("Must be a multiple of {multiple}.", multiple=multiple)

        return self.assert_("multiple", check_multiple, multiple=multiple)


def number_schema() -> NumberSchema:
    return NumberSchema()
