"""Array schema."""

from __future__ import annotations

from typing import Any, List, Sequence

from .alternatives import allow_schema
from .context import ValidationContext
from .errors import ArrayError, ElementError, ErrorNode, ValidationError
from .exceptions import LocalizedError, SchemaDefinitionError
from .schema import Assertion, AssertionFunction, Schema, SchemaKind, is_schema


def check_array(value: Any, ctx: ValidationContext) -> Any:
    if isinstance(value, str) and ctx.cast:
        return value.split(",")
    if isinstance(value, list):
        return None
    if isinstance(value, tuple):
        return list(value)
    raise LocalizedError("Must be an array.")


def plural(count: int) -> str:
    return "" if count == 1 else "s"


async def validate_elements(
    schema: Schema, elements: Sequence[Any], ctx: ValidationContext
) -> List[Any]:
    """Validate every element, raising an array error holding each failing index."""
    result = []
    errors: List[ErrorNode] = []
    for index, element in enumerate(elements):
        try:
            result.append(await schema.run(element, ctx.for_index(index)))
        except ValidationError as error:
            errors.append(ElementError(index, message=error.message, details=error.details))
    if errors:
        raise ArrayError(details=errors)
    return result


def elements_assertion(schemas: Sequence[Schema]) -> AssertionFunction:
    if not schemas:
        return lambda value, ctx: None
    if len(schemas) == 1:
        element_schema = schemas[0]
    else:
        element_schema = allow_schema(*schemas)

    async def check_elements(value: List[Any], ctx: ValidationContext) -> List[Any]:
        return await validate_elements(element_schema, value, ctx)

    return check_elements


class ArraySchema(Schema):
    """Schema for lists; elements match one of the element schemas."""

    kind = SchemaKind.ARRAY

    def __init__(self, *schemas: Schema):
        if len(schemas) == 1 and isinstance(schemas[0], (list, tuple)):
            schemas = tuple(schemas[0])
        for schema in schemas:
            if not is_schema(schema):
                raise SchemaDefinitionError("Array elements must be schemas.")
        super().__init__(
            {"type": "array", "schemas": tuple(schemas)},
            (
                Assertion.create("type", check_array),
                Assertion.create("elements", elements_assertion(schemas)),
            ),
        )

    @property
    def schemas(self) -> tuple:
        return self.meta["schemas"]

    def length(self, length: int) -> ArraySchema:
        def check_length(value: List[Any], ctx: ValidationContext) -> None:
            if len(value) != length:
                raise LocalizedError(
                    "Must contain exactly {length} element{s}.", length=length, s=plural(length)
                )

        return self.assert_("length", check_length, min=length, max=length)

    def min(self, length: int) -> ArraySchema:
        def check_min(value: List[Any], ctx: ValidationContext) -> None:
            if len(value) < length:
                raise LocalizedError(
                    "Must contain at least {length} element{s}.", length=length, s=plural(length)
                )

        return self.assert_("min", check_min, min=length)

    def max(self, length: int) -> ArraySchema:
        def check_max(value: List[Any], ctx: ValidationContext) -> None:
            if len(value) > length:
                raise LocalizedError(
                    "Cannot contain more than {length} element{s}.", length=length, s=plural(length)
                )

        return self.assert_("max", check_max, max=length)

    def latlng(self) -> ArraySchema:
        """A ``[lat, lng]`` pair of numbers."""

        def check_latlng(value: List[Any], ctx: ValidationContext) -> None:
            if len(value) != 2:
                raise LocalizedError("Must be an array of length 2.")
            lat, lng = value
            if not is_coordinate(lat, 90):
                raise LocalizedError("Invalid latitude.")
            if not is_coordinate(lng, 180):
                raise LocalizedError("Invalid longitude.")

        return self.assert_("latlng", check_latlng, format="latlng")


def is_coordinate(value: Any, limit: float) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return -limit <= value <= limit


def array_schema(*schemas: Schema) -> ArraySchema:
    return ArraySchema(*schemas)
