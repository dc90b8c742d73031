"""Core schema node and assertion pipeline.

A :class:`Schema` is an immutable pair of an ordered assertion tuple and a
read-only metadata mapping. Every chain method returns a new schema; the
original is never touched, so a base schema can be branched freely::

    base = string().trim()
    name = base.required()
    nickname = base.nullable()

Assertions are kept sorted in two bands. The initial band runs in the fixed
order ``default``, ``required``, ``type``, ``transform``, ``empty`` and halts
the node on failure. Every other assertion follows in insertion order and
does not halt, so independent failures are all reported.

An assertion function receives ``(value, ctx)`` (``missing`` assertions get
only ``ctx``) and may be a plain or coroutine function. A return value other
than ``None`` replaces the working value for the following assertions.
"""

from __future__ import annotations

import asyncio
import copy
import inspect
import logging
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Mapping, Tuple, Union

from .context import MISSING, ValidationContext
from .errors import (
    AssertionFailedError,
    ErrorNode,
    FormatError,
    InvalidTypeError,
    ValidationError,
)
from .exceptions import LocalizedError, SchemaDefinitionError

logger = logging.getLogger(__name__)

AssertionFunction = Callable[..., Union[Any, Awaitable[Any]]]

INITIAL_BAND = ("default", "required", "type", "transform", "empty")
REQUIRED_TO_RUN = frozenset({"default", "required", "missing"})


class SchemaKind(Enum):
    """Structural variant of a schema."""

    TYPE = "type"
    OBJECT = "object"
    ARRAY = "array"
    TUPLE = "tuple"
    ALTERNATIVE = "alternative"


@dataclass(frozen=True)
class Assertion:
    """One step of a schema pipeline.

    Attributes:
        kind: Assertion kind, also used as the kind of generic failures
        fn: Function run against the value
        halt: Stop the pipeline of this node when the assertion fails
        required_to_run: Run even when the value is absent
        label: Extra name carried with the assertion (the format name, or allow/reject)
    """

    kind: str
    fn: AssertionFunction
    halt: bool = False
    required_to_run: bool = False
    label: str | None = None

    @classmethod
    def create(cls, kind: str, fn: AssertionFunction, label: str | None = None) -> Assertion:
        return cls(
            kind=kind,
            fn=fn,
            halt=kind in INITIAL_BAND,
            required_to_run=kind in REQUIRED_TO_RUN,
            label=label,
        )

    @property
    def band(self) -> int:
        if self.kind in INITIAL_BAND:
            return INITIAL_BAND.index(self.kind)
        return len(INITIAL_BAND)


class CollectedErrors(Exception):
    """Several independent failures raised by a single assertion."""

    def __init__(self, errors: List[ErrorNode]):
        super().__init__(f"{len(errors)} errors")
        self.errors = errors


def is_schema(value: Any) -> bool:
    return isinstance(value, Schema)


def assert_present(value: Any, ctx: ValidationContext) -> None:
    if value is MISSING or value is None:
        raise LocalizedError("Value is required.")


class Schema:
    """Immutable, chainable validation rule set."""

    kind = SchemaKind.TYPE

    def __init__(
        self,
        meta: Mapping[str, Any] | None = None,
        assertions: Iterable[Assertion] = (),
    ):
        self.meta: Mapping[str, Any] = MappingProxyType(dict(meta or {}))
        self.assertions: Tuple[Assertion, ...] = tuple(assertions)

    def __repr__(self) -> str:
        kinds = ", ".join(a.kind for a in self.assertions)
        return f"{type(self).__name__}({kinds})"

    def __str__(self) -> str:
        return self.type_label()

    def type_label(self) -> str:
        return self.meta.get("type") or "any"

    # Construction helpers

    def clone(self, **meta: Any) -> Schema:
        """Shallow copy with merged metadata and the same assertions."""
        schema = copy.copy(self)
        schema.meta = MappingProxyType({**self.meta, **meta})
        return schema

    def assert_(
        self, kind: str, fn: AssertionFunction, label: str | None = None, **meta: Any
    ) -> Schema:
        """Return a copy with an added assertion, kept in band order."""
        schema = self.clone(**meta)
        assertions = [*self.assertions, Assertion.create(kind, fn, label)]
        schema.assertions = tuple(sorted(assertions, key=lambda a: a.band))
        return schema

    def without(self, *kinds: str, **meta: Any) -> Schema:
        schema = self.clone(**meta)
        schema.assertions = tuple(a for a in self.assertions if a.kind not in kinds)
        return schema

    def extend(self, meta: Mapping[str, Any], assertions: Iterable[Assertion]) -> Schema:
        schema = self.clone(**meta)
        merged = [*self.assertions, *assertions]
        schema.assertions = tuple(sorted(merged, key=lambda a: a.band))
        return schema

    # Chain API

    def required(self) -> Schema:
        return self.without("required").assert_("required", assert_present, required=True)

    def optional(self) -> Schema:
        return self.without("required", required=False)

    def nullable(self) -> Schema:
        return self.clone(nullable=True)

    def default(self, value: Any) -> Schema:
        """Fill absent values with ``value``, or its result when callable."""

        def fill_default(current: Any, ctx: ValidationContext) -> Any:
            if current is MISSING:
                if callable(value):
                    return value()
                return copy.deepcopy(value)
            return None

        return self.without("default").assert_("default", fill_default, default=value)

    def custom(self, *args: Any) -> Schema:
        """Add a custom assertion: ``custom(fn)`` or ``custom(kind, fn)``."""
        if len(args) == 2:
            kind, fn = args
        elif len(args) == 1:
            kind, fn = "custom", args[0]
        else:
            kind, fn = "custom", None
        if not callable(fn):
            raise SchemaDefinitionError("Assertion function required.")
        return self.assert_(kind, fn)

    def missing(self, fn: AssertionFunction) -> Schema:
        """Run ``fn(ctx)`` only when the value is absent."""
        if not callable(fn):
            raise SchemaDefinitionError("Assertion function required.")
        return self.assert_("missing", fn)

    def transform(self, fn: AssertionFunction) -> Schema:
        if not callable(fn):
            raise SchemaDefinitionError("Transform function required.")
        return self.assert_("transform", fn)

    def strip(self, predicate: Callable[[Any, ValidationContext], bool]) -> Schema:
        """Drop this field from an object result when ``predicate(value, ctx)`` is true."""
        return self.clone(strip=predicate)

    def allow(self, *values: Any) -> Schema:
        from .alternatives import allowed_assertion, flatten_set

        values = flatten_set(values)
        return self.assert_("enum", allowed_assertion(values, allow=True), label="allow", enum=values)

    def reject(self, *values: Any) -> Schema:
        from .alternatives import allowed_assertion, flatten_set

        values = flatten_set(values)
        return self.assert_("enum", allowed_assertion(values, allow=False), label="reject", reject=values)

    def without_allow(self) -> Schema:
        """Drop allow sets, keeping reject sets."""
        schema = self.clone(enum=None)
        schema.assertions = tuple(
            a for a in self.assertions if not (a.kind == "enum" and a.label == "allow")
        )
        return schema

    def message(self, message: str) -> Schema:
        return self.clone(message=message)

    def tag(self, **tags: Any) -> Schema:
        return self.clone(tags={**self.meta.get("tags", {}), **tags})

    def description(self, description: str) -> Schema:
        return self.tag(description=description)

    def options(self, **options: Any) -> Schema:
        """Burn validation options into the schema; they override caller options."""
        return self.clone(options={**self.meta.get("options", {}), **options})

    def cast(self) -> Schema:
        return self.options(cast=True)

    def format(
        self,
        name: str,
        check: Callable[[Any], bool],
        template: str,
        **values: Any,
    ) -> Schema:
        """Add a named format check raising ``template`` when ``check`` fails."""

        def check_format(value: Any, ctx: ValidationContext) -> None:
            if not check(value):
                raise LocalizedError(template, **values)

        return self.assert_("format", check_format, label=name, format=name)

    def append(self, schema: Schema) -> Schema:
        """Merge another schema's metadata and assertions into this one."""
        if not is_schema(schema):
            raise SchemaDefinitionError("Can only append a schema.")
        return self.extend(schema.meta, schema.assertions)

    def get(self, path: Union[str, List[str]]) -> Schema | None:
        raise SchemaDefinitionError(f'"get" not implemented by {type(self).__name__}.')

    # Execution

    def can_skip(self, value: Any, assertion: Assertion, ctx: ValidationContext) -> bool:
        if value is MISSING:
            return not assertion.required_to_run
        if value is None:
            return ctx.nullable
        return assertion.kind == "missing"

    async def run_assertion(self, assertion: Assertion, value: Any, ctx: ValidationContext) -> Any:
        if assertion.kind == "missing":
            result = assertion.fn(ctx)
        else:
            result = assertion.fn(value, ctx)
        if inspect.isawaitable(result):
            result = await result
        return result

    def classify(self, assertion: Assertion, error: Exception) -> List[ErrorNode]:
        """Fold an exception raised by an assertion into error tree nodes."""
        if isinstance(error, CollectedErrors):
            return list(error.errors)
        if isinstance(error, ErrorNode):
            return [error]

        if isinstance(error, LocalizedError):
            message, template, values = error.message, error.template, error.values
        else:
            logger.debug(
                f"Assertion '{assertion.kind}' raised {type(error).__name__}: {error}"
            )
            message, template, values = str(error), None, None

        if assertion.kind == "type":
            return [InvalidTypeError(self.meta.get("type"), message, template, values)]
        if assertion.kind == "format":
            name = assertion.label or self.meta.get("format")
            return [FormatError(name, message, template, values)]
        return [AssertionFailedError(assertion.kind, message, template, values)]

    async def run(self, value: Any, ctx: ValidationContext) -> Any:
        """Run the pipeline against ``value`` within a parent context."""
        ctx = ctx.enter(self.meta, value)
        details: List[ErrorNode] = []

        for assertion in self.assertions:
            if self.can_skip(value, assertion, ctx):
                continue
            try:
                result = await self.run_assertion(assertion, value, ctx)
            except SchemaDefinitionError:
                raise
            except Exception as error:
                details.extend(self.classify(assertion, error))
                if assertion.halt:
                    break
            else:
                if result is not None:
                    value = result

        if details:
            message = self.meta.get("message")
            if message is None and not ctx.path:
                message = ctx.message
            raise ValidationError(message, details)
        return value

    async def validate(self, value: Any = MISSING, **options: Any) -> Any:
        """Validate ``value`` and return it, transformed.

        Args:
            value: Input value; omit to validate an absent value
            **options: ``cast``, ``strip_unknown``, ``strip_empty``,
                ``preserve_keys``, ``expand_dot_syntax``, ``allow_empty``,
                ``message`` and any extra keys for custom assertions

        Returns:
            The transformed value (``None`` when absent)

        Raises:
            ValidationError: Root of the error tree when validation fails
        """
        ctx = ValidationContext.create(value, **options)
        result = await self.run(value, ctx)
        if result is MISSING:
            return None
        return result

    def validate_sync(self, value: Any = MISSING, **options: Any) -> Any:
        """Run :meth:`validate` to completion outside an event loop."""
        return asyncio.run(self.validate(value, **options))

    # Projection

    def to_json_schema(self, extra: Mapping[str, Any] | None = None) -> Dict[str, Any]:
        from .json_schema import to_json_schema

        return to_json_schema(self, extra)

    def to_openapi(self, extra: Mapping[str, Any] | None = None) -> Dict[str, Any]:
        return self.to_json_schema(extra)

    def to_openai(self) -> Schema:
        from .json_schema import to_openai

        return to_openai(self)

    def inspect(self) -> str:
        from .json_schema import inspect_schema

        return inspect_schema(self)


class AlternativeSchema(Schema):
    """Untyped schema whose core is an allow or reject set."""

    kind = SchemaKind.ALTERNATIVE


class LazySchema(Schema):
    """Deferred schema reference, resolved when validation runs.

    Used for recursive schemas::

        node = object({"name": string(), "children": array(lazy(lambda: node))})
    """

    def __init__(self, thunk: Callable[[], Schema]):
        if not callable(thunk):
            raise SchemaDefinitionError("Lazy schema requires a function.")
        super().__init__()
        self.thunk = thunk

    def resolve(self) -> Schema:
        schema = self.thunk()
        if not is_schema(schema):
            raise SchemaDefinitionError("Lazy schema function must return a schema.")
        if self.meta or self.assertions:
            schema = schema.extend(self.meta, self.assertions)
        return schema

    @property
    def kind(self) -> SchemaKind:  # type: ignore[override]
        return self.resolve().kind

    def type_label(self) -> str:
        return self.resolve().type_label()

    def get(self, path: Union[str, List[str]]) -> Schema | None:
        return self.resolve().get(path)

    async def run(self, value: Any, ctx: ValidationContext) -> Any:
        return await self.resolve().run(value, ctx)


def any_schema() -> Schema:
    """Schema accepting any value."""
    return Schema()


def custom_schema(*args: Any) -> Schema:
    return Schema().custom(*args)


def default_schema(value: Any) -> Schema:
    return Schema().default(value)


def lazy_schema(thunk: Callable[[], Schema]) -> Schema:
    return LazySchema(thunk)
