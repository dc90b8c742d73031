"""Projection of schemas to JSON Schema / OpenAPI documents.

The projection reads only schema metadata; it never runs assertions.
:func:`to_openai` derives a schema suited to OpenAI structured outputs:
every object field is required, optional fields become nullable (except
objects and arrays), unsupported formats and all tags are dropped, and
tuples are described with ``items``.
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Dict, FrozenSet, List, Mapping, Sequence

from .arrays import ArraySchema
from .objects import ObjectSchema
from .schema import LazySchema, Schema, is_schema
from .tuples import TupleSchema

ANY_TYPES = ["object", "array", "string", "number", "boolean", "null"]

OPENAI_ALLOWED_FORMATS = frozenset({
    "date-time",
    "duration",
    "hostname",
    "date",
    "time",
    "email",
    "ipv4",
    "ipv6",
    "uuid",
})

# Schema metadata key -> JSON Schema keyword, per type
BOUND_KEYWORDS = {
    "number": {"min": "minimum", "max": "maximum", "multiple": "multipleOf"},
    "string": {"min": "minLength", "max": "maxLength"},
    "array": {"min": "minItems", "max": "maxItems"},
}


def to_json_schema(schema: Schema, extra: Mapping[str, Any] | None = None) -> Dict[str, Any]:
    """Describe ``schema`` as a JSON Schema object.

    Args:
        schema: Schema to describe
        extra: Keys merged into the top-level result. A callable ``tag``
            entry is called with each (nested) schema's metadata and its
            result merged into that schema's description.
    """
    return project(schema, dict(extra or {}), openai=False, resolving=frozenset())


def inspect_schema(schema: Schema) -> str:
    return json.dumps(to_json_schema(schema), indent=2, ensure_ascii=False, default=str)


def project(
    schema: Schema,
    extra: Mapping[str, Any],
    openai: bool,
    resolving: FrozenSet[int],
) -> Dict[str, Any]:
    if isinstance(schema, LazySchema):
        # A schema already being described up the stack is left open
        key = id(schema.thunk)
        if key in resolving:
            return {}
        return project(schema.resolve(), extra, openai, resolving | {key})

    meta = schema.meta
    openai = openai or bool(meta.get("openai"))
    tag = extra.get("tag")
    child_extra = {"tag": tag} if callable(tag) else {}

    data: Dict[str, Any] = {}
    json_type = get_json_type(schema)
    if json_type:
        data["type"] = json_type

    format_name = meta.get("format")
    if format_name and (not openai or format_name in OPENAI_ALLOWED_FORMATS):
        data["format"] = format_name

    if not openai:
        data.update(meta.get("tags", {}))
    if meta.get("description"):
        data["description"] = meta["description"]

    members = meta.get("enum")
    if not json_type and not members:
        data["type"] = list(ANY_TYPES)

    data.update(project_default(schema))

    if meta.get("nullable"):
        if openai and isinstance(data.get("type"), str):
            data["type"] = [data["type"], "null"]
        else:
            data["nullable"] = True

    if members:
        data.update(project_enum(members, child_extra, openai, resolving))

    for key, keyword in BOUND_KEYWORDS.get(meta.get("type") or "", {}).items():
        if meta.get(key) is not None:
            data[keyword] = meta[key]

    if isinstance(schema, ObjectSchema):
        data.update(project_object(schema, child_extra, openai, resolving))
    elif isinstance(schema, TupleSchema):
        data.update(project_tuple(schema, child_extra, openai, resolving))
    elif isinstance(schema, ArraySchema):
        data.update(project_array(schema, child_extra, openai, resolving))

    data.update(expand_extra(extra, meta))
    return data


def get_json_type(schema: Schema) -> str | None:
    schema_type = schema.meta.get("type")
    if schema_type == "date":
        if "timestamp" in (schema.meta.get("format") or ""):
            return "number"
        return "string"
    return schema_type


def project_default(schema: Schema) -> Dict[str, Any]:
    if "default" not in schema.meta:
        return {}
    value = schema.meta["default"]
    if schema.meta.get("type") == "date":
        if value == "now":
            return {"default": "now"}
        if callable(value):
            return {"default": "custom"}
    if callable(value) or value is None:
        return {}
    if isinstance(value, datetime):
        value = value.isoformat()
    return {"default": value}


def literal_type(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    return "object"


def project_enum(
    members: Sequence[Any], extra: Mapping[str, Any], openai: bool, resolving: FrozenSet[int]
) -> Dict[str, Any]:
    literal_types = {literal_type(m) for m in members if not is_schema(m)}
    if len(literal_types) == 1 and not any(is_schema(m) for m in members):
        return {"type": literal_types.pop(), "enum": list(members)}

    any_of: List[Dict[str, Any]] = []
    for member in members:
        if is_schema(member):
            any_of.append(project(member, extra, openai, resolving))
            continue
        member_type = literal_type(member)
        entry = next((e for e in any_of if e.get("type") == member_type), None)
        if entry is None:
            entry = {"type": member_type}
            if member_type != "null":
                entry["enum"] = []
            any_of.append(entry)
        if "enum" in entry:
            entry["enum"].append(member)
    return {"anyOf": any_of}


def project_object(
    schema: ObjectSchema, extra: Mapping[str, Any], openai: bool, resolving: FrozenSet[int]
) -> Dict[str, Any]:
    fields = schema.fields
    if fields is None:
        return {}
    options = schema.meta.get("options", {})
    return {
        "properties": {
            key: project(field, extra, openai, resolving) for key, field in fields.items()
        },
        "required": [key for key, field in fields.items() if field.meta.get("required")],
        "additionalProperties": bool(options.get("strip_unknown")),
    }


def project_array(
    schema: ArraySchema, extra: Mapping[str, Any], openai: bool, resolving: FrozenSet[int]
) -> Dict[str, Any]:
    items = [project(s, extra, openai, resolving) for s in schema.schemas]
    if not items:
        return {}
    if len(items) == 1:
        return {"items": items[0]}
    return {"anyOf": items}


def project_tuple(
    schema: TupleSchema, extra: Mapping[str, Any], openai: bool, resolving: FrozenSet[int]
) -> Dict[str, Any]:
    items = [project(s, extra, openai, resolving) for s in schema.schemas]
    if not openai:
        return {"prefixItems": items}
    if not items:
        return {}
    if all(item == items[0] for item in items):
        return {"items": items[0]}
    return {"items": {"anyOf": items}}


def expand_extra(extra: Mapping[str, Any], meta: Mapping[str, Any]) -> Dict[str, Any]:
    rest = {k: v for k, v in extra.items() if k != "tag"}
    tag = extra.get("tag")
    if callable(tag):
        rest.update(tag(dict(meta)) or {})
    return rest


def openai_field(schema: Schema) -> Schema:
    json_type = get_json_type(schema)
    if json_type == "object":
        schema = schema.required()
    elif json_type == "array":
        schema = schema.required()
    elif not schema.meta.get("required"):
        schema = schema.required().nullable()

    format_name = schema.meta.get("format")
    if format_name and format_name not in OPENAI_ALLOWED_FORMATS:
        schema = schema.clone(format=None)
    return schema.clone(tags={}, openai=True)


def to_openai(schema: Schema) -> Schema:
    """Derive a schema whose fields are all required, for OpenAI structured outputs."""
    if isinstance(schema, LazySchema):
        schema = schema.resolve()
    if isinstance(schema, ObjectSchema):
        schema = schema.transform_fields(openai_field)
    return schema.clone(tags={}, openai=True)
