"""Build schemas from declarative configuration."""

import logging
import re
from pathlib import Path
from typing import Any, Callable, Dict, Union

from .arrays import ArraySchema
from .booleans import BooleanSchema
from .dates import DateSchema
from .exceptions import SchemaDefinitionError
from .formats import FORMATS
from .loaders import load_data_file
from .numbers import NumberSchema
from .objects import ObjectSchema
from .schema import Schema
from .strings import StringSchema
from .tuples import TupleSchema

logger = logging.getLogger(__name__)

# Configuration keys understood for every schema type
COMMON_KEYS = frozenset({
    "type", "required", "nullable", "default", "message", "description",
    "tags", "allow", "reject", "options", "cast",
})


class SchemaFactory:
    """Factory for creating schemas from configuration.

    Configuration Options:
        type (str): string, number, boolean, date, object, array, tuple or any
        required (bool): Whether the value is required (default: False)
        nullable (bool): Whether ``null`` is accepted
        default (any): Default value when absent
        message (str): Custom error message
        description (str): Description for the JSON Schema projection
        allow (list): Allowed literals (or nested schema configurations)
        reject (list): Rejected literals
        options (dict): Validation options burned into the schema

    Type Options:
        string: min, max, length, pattern, trim, lowercase, uppercase,
            format (email, url, uuid, ...), password (dict)
        number: min, max, integer, positive, negative, multiple
        date: min, max, before, after, past, future, iso, timestamp, unix
        object: fields (mapping), strip_unknown, strip_empty
        array: items (configuration or list), min, max, length
        tuple: positions (list), loose

    Example Configuration:
        type: object
        strip_unknown: true
        fields:
          username:
            type: string
            required: true
            min: 3
            pattern: "^[a-z0-9_]+$"
          age:
            type: number
            integer: true
            min: 13
          role:
            type: string
            allow: [admin, user]
            default: user
    """

    def __init__(self) -> None:
        self._builders: Dict[str, Callable[[Dict[str, Any]], Schema]] = {
            "string": self._build_string,
            "number": self._build_number,
            "boolean": lambda config: BooleanSchema(),
            "date": self._build_date,
            "object": self._build_object,
            "array": self._build_array,
            "tuple": self._build_tuple,
            "any": lambda config: Schema(),
        }

    def create(self, **config: Any) -> Schema:
        """Create a schema from configuration.

        Args:
            **config: Schema configuration

        Returns:
            Schema instance

        Raises:
            SchemaDefinitionError: If the type is unknown
        """
        schema_type = config.get("type", "any")
        logger.info(f"Creating schema: {config.get('name', schema_type)}")
        return self._build(dict(config))

    def _build(self, config: Dict[str, Any]) -> Schema:
        schema_type = str(config.get("type", "any")).lower()
        builder = self._builders.get(schema_type)
        if builder is None:
            raise SchemaDefinitionError(
                f"Unknown schema type '{schema_type}'", context={"config": config}
            )
        schema = builder(config)
        return self._apply_common(schema, config)

    def _apply_common(self, schema: Schema, config: Dict[str, Any]) -> Schema:
        if config.get("allow") is not None:
            schema = schema.allow(*[self._member(m) for m in config["allow"]])
        if config.get("reject") is not None:
            schema = schema.reject(*config["reject"])
        if "default" in config:
            schema = schema.default(config["default"])
        if config.get("required"):
            schema = schema.required()
        if config.get("nullable"):
            schema = schema.nullable()
        if config.get("message"):
            schema = schema.message(config["message"])
        if config.get("tags"):
            schema = schema.tag(**config["tags"])
        if config.get("description"):
            schema = schema.description(config["description"])
        if config.get("options"):
            schema = schema.options(**config["options"])
        if config.get("cast"):
            schema = schema.cast()
        return schema

    def _member(self, member: Any) -> Any:
        if isinstance(member, dict) and "type" in member:
            return self._build(member)
        return member

    def _warn_unknown(self, config: Dict[str, Any], known: frozenset) -> None:
        for key in config:
            if key not in known and key not in COMMON_KEYS and key != "name":
                logger.warning(f"Ignoring unknown schema option '{key}' for type '{config.get('type')}'")

    def _build_string(self, config: Dict[str, Any]) -> Schema:
        self._warn_unknown(
            config,
            frozenset({"min", "max", "length", "pattern", "trim", "lowercase", "uppercase",
                       "format", "region", "password"}),
        )
        schema: StringSchema = StringSchema()
        if config.get("trim"):
            schema = schema.trim()
        if config.get("lowercase"):
            schema = schema.lowercase()
        if config.get("uppercase"):
            schema = schema.uppercase()
        if config.get("length") is not None:
            schema = schema.length(config["length"])
        if config.get("min") is not None:
            schema = schema.min(config["min"])
        if config.get("max") is not None:
            schema = schema.max(config["max"])
        if config.get("pattern"):
            schema = schema.match(re.compile(config["pattern"]))
        format_name = config.get("format")
        if format_name == "phone":
            schema = schema.phone(config.get("region"))
        elif format_name:
            if format_name not in FORMATS:
                raise SchemaDefinitionError(f"Unknown string format '{format_name}'")
            schema = schema.named_format(format_name)
        if config.get("password") is not None:
            schema = schema.password(**(config["password"] or {}))
        return schema

    def _build_number(self, config: Dict[str, Any]) -> Schema:
        self._warn_unknown(
            config, frozenset({"min", "max", "integer", "positive", "negative", "multiple"})
        )
        schema: NumberSchema = NumberSchema()
        if config.get("integer"):
            schema = schema.integer()
        if config.get("positive"):
            schema = schema.positive()
        if config.get("negative"):
            schema = schema.negative()
        if config.get("min") is not None:
            schema = schema.min(config["min"])
        if config.get("max") is not None:
            schema = schema.max(config["max"])
        if config.get("multiple") is not None:
            schema = schema.multiple(config["multiple"])
        return schema

    def _build_date(self, config: Dict[str, Any]) -> Schema:
        self._warn_unknown(
            config,
            frozenset({"min", "max", "before", "after", "past", "future", "iso", "timestamp", "unix"}),
        )
        schema: DateSchema = DateSchema()
        for key in ("min", "max", "before", "after"):
            if config.get(key) is not None:
                schema = getattr(schema, key)(config[key])
        if config.get("past"):
            schema = schema.past()
        if config.get("future"):
            schema = schema.future()
        if config.get("iso"):
            iso = config["iso"]
            schema = schema.iso(iso if isinstance(iso, str) else "date-time")
        if config.get("timestamp"):
            schema = schema.timestamp()
        if config.get("unix"):
            schema = schema.unix()
        return schema

    def _build_object(self, config: Dict[str, Any]) -> Schema:
        self._warn_unknown(config, frozenset({"fields", "strip_unknown", "strip_empty"}))
        fields = config.get("fields")
        if fields is None:
            schema = ObjectSchema()
        else:
            schema = ObjectSchema({key: self._build(dict(field)) for key, field in fields.items()})
        if config.get("strip_unknown"):
            schema = schema.strip_unknown()
        if config.get("strip_empty"):
            schema = schema.strip_empty()
        return schema

    def _build_array(self, config: Dict[str, Any]) -> Schema:
        self._warn_unknown(config, frozenset({"items", "min", "max", "length"}))
        items = config.get("items")
        if items is None:
            items = []
        elif isinstance(items, dict):
            items = [items]
        schema: ArraySchema = ArraySchema(*[self._build(dict(item)) for item in items])
        if config.get("length") is not None:
            schema = schema.length(config["length"])
        if config.get("min") is not None:
            schema = schema.min(config["min"])
        if config.get("max") is not None:
            schema = schema.max(config["max"])
        return schema

    def _build_tuple(self, config: Dict[str, Any]) -> Schema:
        self._warn_unknown(config, frozenset({"positions", "loose"}))
        positions = [self._build(dict(p)) for p in config.get("positions", [])]
        schema: TupleSchema = TupleSchema(*positions)
        if config.get("loose"):
            schema = schema.loose()
        return schema


def create_schema(**config: Any) -> Schema:
    return SchemaFactory().create(**config)


def load_schema(path: Union[str, Path]) -> Schema:
    """Build a schema from a YAML or JSON configuration file."""
    config = load_data_file(path)
    if not isinstance(config, dict):
        raise SchemaDefinitionError(f"Schema configuration must be a mapping: {path}")
    logger.info(f"Loading schema configuration from {path}")
    return SchemaFactory().create(**config)

