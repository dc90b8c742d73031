"""Object schema.

An object schema validates a mapping against a map of field schemas. Every
declared field is validated, in declaration order, even when earlier fields
fail. Keys that are not declared fail with an ``Unknown field`` error unless
``strip_unknown`` (or ``strip_empty`` for empty strings) drops them. An open
``object()`` with no field map accepts any mapping as is.

Flat keys such as ``"profile.name"`` are expanded into nested mappings when
``expand_dot_syntax`` is on. With ``preserve_keys`` as well, the result keeps
the flat keys and errors are reported under them.
"""

from __future__ import annotations

import re
from types import MappingProxyType
from typing import Any, Callable, Dict, List, Mapping, Sequence, Set, Tuple, Union

from .arrays import ArraySchema
from .context import MISSING, ValidationContext
from .errors import ErrorNode, FieldError, ValidationError
from .exceptions import LocalizedError, SchemaDefinitionError
from .localization import localize
from .schema import (
    Assertion,
    AssertionFunction,
    CollectedErrors,
    LazySchema,
    Schema,
    SchemaKind,
    is_schema,
)
from .tuples import TupleSchema

FieldPath = Union[str, Sequence[str]]

INDEX_PATTERN = re.compile(r"^[0-9]+$")

# Assertions created by the constructor rather than by chain calls
STRUCTURAL_KINDS = frozenset({"type", "fields"})

UNKNOWN_FIELD = 'Unknown field "{key}".'


def split_path(path: FieldPath) -> List[str]:
    if isinstance(path, str):
        return path.split(".")
    return [str(segment) for segment in path]


def check_object(value: Any, ctx: ValidationContext) -> None:
    if not isinstance(value, Mapping):
        raise LocalizedError("Must be an object.")


def unknown_field_error(key: str) -> FieldError:
    values = {"key": key}
    return FieldError(
        key,
        message=localize(UNKNOWN_FIELD, values),
        template=UNKNOWN_FIELD,
        values=values,
    )


# Flat key handling


def child_schema(schema: Schema, segment: str) -> Schema | None:
    """Schema reached by one path segment, or None when it does not resolve."""
    if isinstance(schema, LazySchema):
        schema = schema.resolve()
    if isinstance(schema, ObjectSchema):
        if schema.fields is None:
            return None
        return schema.fields.get(segment)
    if not INDEX_PATTERN.match(segment):
        return None
    if isinstance(schema, TupleSchema):
        index = int(segment)
        return schema.schemas[index] if index < len(schema.schemas) else None
    if isinstance(schema, ArraySchema):
        if len(schema.schemas) == 1:
            return schema.schemas[0]
        return Schema()
    return None


def resolve_path(fields: Mapping[str, Schema], segments: Sequence[str]) -> Schema | None:
    schema = fields.get(segments[0])
    for segment in segments[1:]:
        if schema is None:
            return None
        schema = child_schema(schema, segment)
    return schema


def copy_container(value: Any, index_next: bool) -> Any:
    if isinstance(value, list):
        return list(value)
    if isinstance(value, Mapping):
        return dict(value)
    return [] if index_next else {}


def assign(container: Any, segment: str, value: Any) -> None:
    if isinstance(container, list):
        index = int(segment)
        while len(container) <= index:
            container.append(None)
        container[index] = value
    else:
        container[segment] = value


def lookup(container: Any, segment: str) -> Any:
    if isinstance(container, list):
        index = int(segment)
        return container[index] if index < len(container) else MISSING
    if isinstance(container, Mapping):
        return container.get(segment, MISSING)
    return MISSING


def set_path(target: Dict[str, Any], segments: Sequence[str], value: Any) -> None:
    """Assign ``value`` at a nested path, copying containers on the way down."""
    node: Any = target
    for segment, next_segment in zip(segments, segments[1:]):
        child = copy_container(lookup(node, segment), bool(INDEX_PATTERN.match(next_segment)))
        assign(node, segment, child)
        node = child
    assign(node, segments[-1], value)


def get_path(source: Any, segments: Sequence[str]) -> Any:
    node = source
    for segment in segments:
        node = lookup(node, segment)
        if node is MISSING:
            break
    return node


def expand_flat_keys(
    obj: Mapping[str, Any], fields: Mapping[str, Schema]
) -> Tuple[Dict[str, Any], Dict[str, List[str]], Set[str]]:
    """Expand resolvable dotted keys into nested containers.

    Returns:
        The expanded mapping, the flat keys that were expanded mapped to their
        path segments, and the top-level keys created by the expansion
    """
    expanded: Dict[str, Any] = {}
    flat_paths: Dict[str, List[str]] = {}
    for key, item in obj.items():
        if isinstance(key, str) and "." in key and key not in fields:
            segments = key.split(".")
            if resolve_path(fields, segments) is not None:
                flat_paths[key] = segments
                continue
        expanded[key] = item

    created: Set[str] = set()
    for key, segments in flat_paths.items():
        if segments[0] not in expanded:
            created.add(segments[0])
        set_path(expanded, segments, obj[key])
    return expanded, flat_paths, created


def detach_error(nodes: List[ErrorNode], segments: Sequence[str]) -> ErrorNode | None:
    """Remove and return the error at a field/element path, pruning emptied parents."""
    key, rest = segments[0], segments[1:]
    for position, node in enumerate(nodes):
        if node.kind == "array" and node.details:
            found = detach_error(node.details, segments)
        elif matches_segment(node, key):
            if not rest:
                del nodes[position]
                return node
            found = detach_error(node.details, rest) if node.details else None
        else:
            continue
        if found is not None:
            if not node.details:
                del nodes[position]
            return found
    return None


def matches_segment(node: ErrorNode, segment: str) -> bool:
    if isinstance(node, FieldError):
        return node.field == segment
    return node.kind == "element" and str(getattr(node, "index", None)) == segment


def collapse_flat_errors(errors: List[ErrorNode], flat_paths: Mapping[str, List[str]]) -> List[ErrorNode]:
    """Report errors for expanded flat keys under the flat key itself."""
    for key, segments in flat_paths.items():
        found = detach_error(errors, segments)
        if found is not None:
            errors.append(FieldError(key, message=found.message, details=found.details))
    return errors


def flatten_result(
    result: Dict[str, Any], flat_paths: Mapping[str, List[str]], created: Set[str]
) -> Dict[str, Any]:
    flattened = dict(result)
    for key, segments in flat_paths.items():
        value = get_path(result, segments)
        if value is not MISSING:
            flattened[key] = value
    for key in created:
        flattened.pop(key, None)
    return flattened


# Field processing


def fields_assertion(fields: Mapping[str, Schema] | None) -> AssertionFunction:
    async def check_fields(value: Mapping[str, Any], ctx: ValidationContext) -> Any:
        if fields is None:
            return None

        obj: Dict[str, Any] = dict(value)
        flat_paths: Dict[str, List[str]] = {}
        created: Set[str] = set()
        if ctx.expand_dot_syntax:
            obj, flat_paths, created = expand_flat_keys(obj, fields)

        errors: List[ErrorNode] = []
        for key, item in obj.items():
            if key in fields or ctx.strip_unknown:
                continue
            if ctx.strip_empty and item == "":
                continue
            errors.append(unknown_field_error(key))

        working = dict(obj)
        result: Dict[str, Any] = {}
        for key, schema in fields.items():
            item = obj.get(key, MISSING)
            if ctx.strip_empty and isinstance(item, str) and item == "":
                item = MISSING
            field_ctx = ctx.for_field(key, working, value)
            strip = schema.meta.get("strip")
            if strip is not None and strip(item, field_ctx):
                continue
            try:
                validated = await schema.run(item, field_ctx)
            except ValidationError as error:
                errors.append(FieldError(key, message=error.message, details=error.details))
                continue
            if validated is not MISSING:
                result[key] = validated
                working[key] = validated

        if flat_paths and ctx.preserve_keys:
            errors = collapse_flat_errors(errors, flat_paths)
        if errors:
            raise CollectedErrors(errors)
        if flat_paths and ctx.preserve_keys:
            return flatten_result(result, flat_paths, created)
        return result

    return check_fields


def normalize_fields(fields: Mapping[str, Any] | None, convert: bool = False) -> Mapping[str, Schema] | None:
    if fields is None:
        return None
    if is_schema(fields) or not isinstance(fields, Mapping):
        raise SchemaDefinitionError("Object fields must be a mapping of schemas.")
    normalized: Dict[str, Schema] = {}
    for key, schema in fields.items():
        if convert and isinstance(schema, Mapping) and not is_schema(schema):
            schema = ObjectSchema(normalize_fields(schema, convert=True))
        if not is_schema(schema):
            raise SchemaDefinitionError(f'Key "{key}" must be a schema')
        normalized[key] = schema
    return MappingProxyType(normalized)


def transform_schema(schema: Schema, fn: Callable[[Schema], Schema]) -> Schema:
    """Apply ``fn`` to a schema after applying it inside nested object and allow members."""
    if isinstance(schema, ObjectSchema):
        schema = schema.transform_fields(fn)
    members = schema.meta.get("enum")
    if members and any(is_schema(member) for member in members):
        transformed = [transform_schema(m, fn) if is_schema(m) else m for m in members]
        schema = schema.without_allow().allow(*transformed)
    return fn(schema)


class ObjectSchema(Schema):
    """Schema for mappings with a declared field map."""

    kind = SchemaKind.OBJECT

    def __init__(self, fields: Mapping[str, Any] | None = None):
        fields = normalize_fields(fields)
        super().__init__(
            {"type": "object", "fields": fields},
            (
                Assertion.create("type", check_object),
                Assertion.create("fields", fields_assertion(fields)),
            ),
        )

    @property
    def fields(self) -> Mapping[str, Schema] | None:
        return self.meta["fields"]

    def with_fields(self, fields: Mapping[str, Schema] | None) -> ObjectSchema:
        """New object schema over ``fields`` keeping this schema's metadata and chain."""
        schema = type(self)(fields)
        meta = {k: v for k, v in self.meta.items() if k != "fields"}
        extra = [a for a in self.assertions if a.kind not in STRUCTURAL_KINDS]
        return schema.extend(meta, extra)

    def selectable_fields(self) -> Mapping[str, Schema]:
        if self.fields is None:
            raise SchemaDefinitionError("Cannot select field on an open object schema.")
        return self.fields

    # Options

    def strip_unknown(self) -> ObjectSchema:
        return self.options(strip_unknown=True)

    def strip_empty(self) -> ObjectSchema:
        return self.options(strip_empty=True)

    def expand_flat_keys(self) -> ObjectSchema:
        return self.options(expand_dot_syntax=True)

    def allow_flat_keys(self) -> ObjectSchema:
        return self.options(expand_dot_syntax=True, preserve_keys=True)

    # Schema algebra

    def pick(self, *names: Any) -> ObjectSchema:
        names = flatten_names(names)
        fields = self.selectable_fields()
        return self.with_fields({k: v for k, v in fields.items() if k in names})

    def omit(self, *names: Any) -> ObjectSchema:
        names = flatten_names(names)
        fields = self.selectable_fields()
        return self.with_fields({k: v for k, v in fields.items() if k not in names})

    def append(self, other: Union[Schema, Mapping[str, Any]]) -> Schema:
        """Merge another object schema (or a mapping of fields) into this one.

        Nested object fields are merged field by field. Metadata and options
        of ``other`` win. Its assertions are carried over except defaults.
        """
        if not is_schema(other) and isinstance(other, Mapping):
            other = ObjectSchema(normalize_fields(other, convert=True))
        if isinstance(other, LazySchema):
            other = other.resolve()
        if not isinstance(other, ObjectSchema):
            return super().append(other)

        schema = self.with_fields(merge_fields(self.fields, other.fields))
        meta = {k: v for k, v in other.meta.items() if k not in ("fields", "default")}
        meta["options"] = {**self.meta.get("options", {}), **other.meta.get("options", {})}
        carried = [
            a for a in other.assertions if a.kind not in STRUCTURAL_KINDS and a.kind != "default"
        ]
        return schema.extend(meta, carried)

    def require(self, *paths: Any) -> ObjectSchema:
        """Mark fields required; nested fields may be given as dotted paths."""
        schema = self
        for path in flatten_names(paths):
            schema = schema.require_path(split_path(path), path)
        return schema

    def require_path(self, segments: Sequence[str], path: FieldPath) -> ObjectSchema:
        fields = self.selectable_fields()
        field = fields.get(segments[0])
        if field is None:
            raise SchemaDefinitionError(f'Cannot find field "{join_path(path)}".')
        if len(segments) > 1:
            if not isinstance(field, ObjectSchema):
                raise SchemaDefinitionError(f'Cannot find field "{join_path(path)}".')
            field = field.require_path(segments[1:], path)
        else:
            field = field.required()
        return self.with_fields({**fields, segments[0]: field})

    def require_all(self) -> ObjectSchema:
        fields = self.selectable_fields()
        return self.with_fields({k: v.required() for k, v in fields.items()})

    def require_all_within(self) -> ObjectSchema:
        """Mark every field required, descending into nested objects and allow sets."""
        return self.transform_fields(lambda schema: schema.required())

    def transform_fields(self, fn: Callable[[Schema], Schema]) -> ObjectSchema:
        """Deeply replace each field schema with ``fn(schema)``."""
        if self.fields is None:
            return self
        return self.with_fields({k: transform_schema(v, fn) for k, v in self.fields.items()})

    # Selection

    def get(self, path: FieldPath) -> Schema | None:
        segments = split_path(path)
        field = self.selectable_fields().get(segments[0])
        if field is None or len(segments) == 1:
            return field
        return field.get(segments[1:])

    def unwind(self, path: FieldPath) -> Schema:
        """Return the element schema of an array field."""
        field = self.get(path)
        if isinstance(field, LazySchema):
            field = field.resolve()
        if not isinstance(field, ArraySchema):
            raise SchemaDefinitionError(f'Field "{join_path(path)}" is not an array schema.')
        if len(field.schemas) != 1:
            raise SchemaDefinitionError(f'Field "{join_path(path)}" does not have an inner schema.')
        return field.schemas[0]

    def export(self) -> Dict[str, Schema]:
        return dict(self.fields or {})


def flatten_names(names: Sequence[Any]) -> List[Any]:
    flattened: List[Any] = []
    for name in names:
        if isinstance(name, (list, tuple, set, frozenset)):
            flattened.extend(name)
        else:
            flattened.append(name)
    return flattened


def join_path(path: FieldPath) -> str:
    return path if isinstance(path, str) else ".".join(str(p) for p in path)


def merge_fields(
    base: Mapping[str, Schema] | None, incoming: Mapping[str, Schema] | None
) -> Mapping[str, Schema] | None:
    if base is None and incoming is None:
        return None
    merged = dict(base or {})
    for key, schema in (incoming or {}).items():
        current = merged.get(key)
        if isinstance(current, ObjectSchema) and isinstance(schema, ObjectSchema):
            merged[key] = current.append(schema)
        else:
            merged[key] = schema
    return merged


def object_schema(fields: Mapping[str, Any] | None = None) -> ObjectSchema:
    return ObjectSchema(fields)
