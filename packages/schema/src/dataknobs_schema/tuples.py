"""Tuple schema: a fixed-length list with one schema per position."""

from __future__ import annotations

from typing import Any, List, Sequence

from .arrays import check_array
from .context import MISSING, ValidationContext
from .errors import ArrayError, ElementError, ErrorNode, ValidationError
from .exceptions import LocalizedError, SchemaDefinitionError
from .schema import Assertion, AssertionFunction, Schema, SchemaKind, is_schema


def arity_matches(value: List[Any], count: int, loose: bool) -> bool:
    if loose and not value:
        return True
    return len(value) == count


def length_assertion(positions: Sequence[Schema], loose: bool) -> AssertionFunction:
    def check_length(value: List[Any], ctx: ValidationContext) -> None:
        if not arity_matches(value, len(positions), loose):
            raise LocalizedError("Tuple must be exactly {length} elements.", length=len(positions))

    return check_length


def positions_assertion(positions: Sequence[Schema], loose: bool) -> AssertionFunction:
    async def check_positions(value: List[Any], ctx: ValidationContext) -> Any:
        # Arity failures are reported by the length check alone
        if not value or not arity_matches(value, len(positions), loose):
            return None
        result = []
        errors: List[ErrorNode] = []
        for index, schema in enumerate(positions):
            element = value[index]
            if element is MISSING:
                element = None
            try:
                result.append(await schema.run(element, ctx.for_index(index)))
            except ValidationError as error:
                errors.append(ElementError(index, message=error.message, details=error.details))
        if errors:
            raise ArrayError(details=errors)
        return result

    return check_positions


class TupleSchema(Schema):
    kind = SchemaKind.TUPLE

    def __init__(self, *schemas: Schema):
        if len(schemas) == 1 and isinstance(schemas[0], (list, tuple)):
            schemas = tuple(schemas[0])
        for schema in schemas:
            if not is_schema(schema):
                raise SchemaDefinitionError("Tuple positions must be schemas.")
        positions = tuple(schemas)
        super().__init__(
            {"type": "array", "schemas": positions},
            (
                Assertion.create("type", check_array),
                Assertion.create("length", length_assertion(positions, False)),
                Assertion.create("elements", positions_assertion(positions, False)),
            ),
        )

    @property
    def schemas(self) -> tuple:
        return self.meta["schemas"]

    def type_label(self) -> str:
        return "tuple"

    def loose(self) -> TupleSchema:
        """Accept an empty list as "no tuple supplied"."""
        positions = self.schemas
        return (
            self.without("length", "elements", loose=True)
            .assert_("length", length_assertion(positions, True))
            .assert_("elements", positions_assertion(positions, True))
        )


def tuple_schema(*schemas: Schema) -> TupleSchema:
    return TupleSchema(*schemas)
