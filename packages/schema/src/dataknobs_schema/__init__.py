"""Declarative, chainable validation schemas.

Build a schema by chaining rules onto a type and validate values against it::

    from dataknobs_schema import object, string, number

    schema = object({
        "name": string().required(),
        "age": number().integer().min(0),
    })
    result = await schema.validate({"name": "Ada", "age": 36})

Failures raise a single :class:`ValidationError` holding a tree of detail
errors that serializes to JSON with :meth:`ValidationError.to_dict`.
"""

from .alternatives import allow_schema as allow
from .alternatives import reject_schema as reject
from .arrays import ArraySchema
from .arrays import array_schema as array
from .booleans import BooleanSchema
from .booleans import boolean_schema as boolean
from .context import MISSING, ValidationContext
from .dates import DateSchema
from .dates import date_schema as date
from .errors import (
    AllowedError,
    ArrayError,
    AssertionFailedError,
    ElementError,
    ErrorNode,
    FieldError,
    FormatError,
    InvalidTypeError,
    ValidationError,
    is_schema_error,
)
from .exceptions import LocalizedError, SchemaDefinitionError, SchemaError
from .factory import SchemaFactory, create_schema, load_schema
from .json_schema import to_json_schema, to_openai
from .localization import get_localized_messages, load_localizer, localize, use_localizer
from .numbers import NumberSchema
from .numbers import number_schema as number
from .objects import ObjectSchema
from .objects import object_schema as object  # noqa: A001
from .schema import (
    AlternativeSchema,
    Assertion,
    LazySchema,
    Schema,
    SchemaKind,
    is_schema,
)
from .schema import any_schema as any  # noqa: A001
from .schema import custom_schema as custom
from .schema import default_schema as default
from .schema import lazy_schema as lazy
from .strings import StringSchema
from .strings import string_schema as string
from .tuples import TupleSchema
from .tuples import tuple_schema as tuple  # noqa: A001

__version__ = "0.1.0"

__all__ = [
    # Schema builders
    "string",
    "number",
    "boolean",
    "date",
    "object",
    "array",
    "tuple",
    "any",
    "custom",
    "allow",
    "reject",
    "default",
    "lazy",
    # Schema classes
    "Schema",
    "SchemaKind",
    "Assertion",
    "AlternativeSchema",
    "LazySchema",
    "StringSchema",
    "NumberSchema",
    "BooleanSchema",
    "DateSchema",
    "ObjectSchema",
    "ArraySchema",
    "TupleSchema",
    "is_schema",
    # Validation context
    "ValidationContext",
    "MISSING",
    # Errors
    "SchemaError",
    "SchemaDefinitionError",
    "LocalizedError",
    "ErrorNode",
    "ValidationError",
    "FieldError",
    "ElementError",
    "ArrayError",
    "AllowedError",
    "InvalidTypeError",
    "FormatError",
    "AssertionFailedError",
    "is_schema_error",
    # Localization
    "use_localizer",
    "localize",
    "get_localized_messages",
    "load_localizer",
    # Projection
    "to_json_schema",
    "to_openai",
    # Configuration
    "SchemaFactory",
    "create_schema",
    "load_schema",
]
