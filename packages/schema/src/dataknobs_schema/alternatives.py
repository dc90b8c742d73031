"""Allow and reject sets: "value must be one of N literals or schemas".

``allow`` passes when the value strictly equals a literal member or
validates against the first schema member that accepts it. When nothing
matches, the failure reported depends on what the schema members said:

- no schema complained beyond a type mismatch: a generic
  ``Must be one of [...]`` message listing every member,
- exactly one schema raised a specific error: that error, unchanged,
- several did: an ``allowed`` error holding each of them.

``reject`` fails only when the value strictly equals a literal member.
"""

from __future__ import annotations

import json
from typing import Any, List, Sequence, Tuple

from .context import ValidationContext
from .errors import AllowedError, ErrorNode, InvalidTypeError, ValidationError
from .exceptions import LocalizedError
from .schema import AlternativeSchema, AssertionFunction, Schema, is_schema

NUMBER_TYPES = (int, float)


def flatten_set(values: Sequence[Any]) -> Tuple[Any, ...]:
    """Accept ``allow("a", "b")`` as well as ``allow(["a", "b"])``."""
    if len(values) == 1 and isinstance(values[0], (list, tuple)):
        return tuple(values[0])
    return tuple(values)


def strict_equals(member: Any, value: Any) -> bool:
    """Value equality for primitives, identity for everything else.

    Booleans never equal numbers and strings never equal numbers.
    """
    if member is value:
        return True
    if isinstance(member, bool) or isinstance(value, bool):
        return isinstance(member, bool) and isinstance(value, bool) and member == value
    if isinstance(member, str) and isinstance(value, str):
        return member == value
    if isinstance(member, NUMBER_TYPES) and isinstance(value, NUMBER_TYPES):
        return member == value
    return False


def describe_set(values: Sequence[Any]) -> str:
    labels = []
    for member in values:
        if is_schema(member):
            labels.append(member.type_label())
        else:
            labels.append(json.dumps(member, ensure_ascii=False, default=str))
    return ", ".join(labels)


def is_type_mismatch(error: ErrorNode) -> bool:
    return isinstance(error, InvalidTypeError)


async def resolve_allowed(values: Sequence[Any], value: Any, ctx: ValidationContext) -> Any:
    """Return the value produced by the first accepting member, or raise."""
    if value == "" and isinstance(value, str):
        if ctx.type_name == "string" and not ctx.required and ctx.allow_empty:
            return None

    captured: List[ErrorNode] = []
    member_ctx = ctx.without_options("cast")
    for member in values:
        if is_schema(member):
            try:
                return await member.run(value, member_ctx)
            except ValidationError as error:
                if error.details:
                    captured.append(error.details[0])
        elif strict_equals(member, value):
            return None

    specific = [error for error in captured if not is_type_mismatch(error)]
    if len(specific) == 1:
        raise specific[0]
    if specific:
        raise AllowedError(details=specific)
    raise LocalizedError("Must be one of [{types}].", types=describe_set(values))


def check_rejected(values: Sequence[Any], value: Any) -> None:
    for member in values:
        if not is_schema(member) and strict_equals(member, value):
            raise LocalizedError("Must not be one of [{types}].", types=describe_set(values))


def allowed_assertion(values: Sequence[Any], allow: bool) -> AssertionFunction:
    if allow:

        async def check_allowed(value: Any, ctx: ValidationContext) -> Any:
            return await resolve_allowed(values, value, ctx)

        return check_allowed

    def check_not_rejected(value: Any, ctx: ValidationContext) -> None:
        check_rejected(values, value)

    return check_not_rejected


def allow_schema(*values: Any) -> Schema:
    """Schema accepting only the given literals or schemas."""
    return AlternativeSchema().allow(*values)


def reject_schema(*values: Any) -> Schema:
    """Schema accepting anything except the given literals."""
    return AlternativeSchema().reject(*values)
