"""Validation error tree.

A failed ``validate`` call raises exactly one :class:`ValidationError`. Its
``details`` hold the individual failures, nested as deeply as the schema:

- ``ValidationError`` (kind ``validation``): root container
- ``FieldError`` (``field``): failure of one object key
- ``ElementError`` (``element``): failure of one array or tuple position
- ``ArrayError`` (``array``): aggregate of element errors
- ``AllowedError`` (``allowed``): aggregate of alternative branch errors
- ``InvalidTypeError`` (``type``): wrong value type, with ``expectedKind``
- ``FormatError`` (``format``): string format failure, with ``format``
- ``AssertionFailedError``: any other failure, kind is the assertion kind

A node with ``details`` is an aggregator; a node without is a leaf carrying a
message. Every node serializes with :meth:`ErrorNode.to_dict` and can be
rebuilt with :meth:`ErrorNode.from_dict`.
"""

from __future__ import annotations

import json
from typing import Any, Dict, List, Mapping, Type

from .exceptions import SchemaError
from .localization import localize


class ErrorNode(SchemaError):
    """Base class of every node in the validation error tree."""

    kind: str = "error"

    def __init__(
        self,
        message: str | None = None,
        details: List[ErrorNode] | None = None,
        template: str | None = None,
        values: Mapping[str, Any] | None = None,
    ):
        self.message = message
        self.template = template or message
        self.values = dict(values or {})
        self.error_details = list(details) if details is not None else None
        super().__init__(message or self.default_message(), context=self.values)
        # SchemaError aliases details to the context dict; the tree wins here
        self.details = self.error_details

    def default_message(self) -> str:
        return f"{self.kind} failed validation."

    def __str__(self) -> str:
        if self.message:
            return self.message
        return self.default_message()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ErrorNode):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __hash__(self) -> int:
        return hash(json.dumps(self.to_dict(), sort_keys=True, default=str))

    def extra_fields(self) -> Dict[str, Any]:
        """Kind-specific wire fields."""
        return {}

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"kind": self.kind}
        data.update(self.extra_fields())
        if self.message is not None:
            data["message"] = self.message
        if self.details is not None:
            data["details"] = [detail.to_dict() for detail in self.details]
        return data

    def to_json(self, **kwargs: Any) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, **kwargs)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ErrorNode:
        """Rebuild an error tree from its ``to_dict`` form."""
        kind = data.get("kind")
        details = data.get("details")
        children = [ErrorNode.from_dict(d) for d in details] if details is not None else None
        message = data.get("message")

        node_class = NODE_CLASSES.get(kind)
        if node_class is FieldError:
            return FieldError(data["field"], message=message, details=children)
        if node_class is ElementError:
            return ElementError(data["index"], message=message, details=children)
        if node_class is InvalidTypeError:
            return InvalidTypeError(data.get("expectedKind"), message=message)
        if node_class is FormatError:
            return FormatError(data.get("format"), message=message)
        if node_class is not None:
            return node_class(message=message, details=children)
        return AssertionFailedError(kind or "custom", message=message)

    def get_full_message(self, delimiter: str = " ", natural: bool = False) -> str:
        """Compose every leaf message into labeled sentences.

        Args:
            delimiter: String placed between sentences
            natural: Humanize field labels (``authCode`` -> ``Auth code``)
                instead of quoting the dotted path
        """
        from .messages import get_full_message

        return get_full_message(self, delimiter=delimiter, natural=natural)


class ValidationError(ErrorNode):
    """Root of a validation error tree."""

    kind = "validation"

    def default_message(self) -> str:
        return localize("Input failed validation.")


class FieldError(ErrorNode):
    """Failure of a single object field, or an unknown field when it has no details."""

    kind = "field"

    def __init__(
        self,
        field: str,
        message: str | None = None,
        details: List[ErrorNode] | None = None,
        template: str | None = None,
        values: Mapping[str, Any] | None = None,
    ):
        self.field = field
        super().__init__(message, details, template, values)

    def extra_fields(self) -> Dict[str, Any]:
        return {"field": self.field}


class ElementError(ErrorNode):
    """Failure of one array element or tuple position."""

    kind = "element"

    def __init__(
        self,
        index: int,
        message: str | None = None,
        details: List[ErrorNode] | None = None,
    ):
        self.index = index
        super().__init__(message, details)

    def extra_fields(self) -> Dict[str, Any]:
        return {"index": self.index}


class ArrayError(ErrorNode):
    kind = "array"


class AllowedError(ErrorNode):
    kind = "allowed"


class InvalidTypeError(ErrorNode):
    """Value is not of the expected type."""

    kind = "type"

    def __init__(
        self,
        expected: str | None,
        message: str | None = None,
        template: str | None = None,
        values: Mapping[str, Any] | None = None,
    ):
        self.expected = expected
        super().__init__(message, None, template, values)

    def extra_fields(self) -> Dict[str, Any]:
        return {"expectedKind": self.expected}


class FormatError(ErrorNode):
    """Value does not match a named string format."""

    kind = "format"

    def __init__(
        self,
        format: str | None,
        message: str | None = None,
        template: str | None = None,
        values: Mapping[str, Any] | None = None,
    ):
        self.format = format
        super().__init__(message, None, template, values)

    def extra_fields(self) -> Dict[str, Any]:
        return {"format": self.format}


class AssertionFailedError(ErrorNode):
    """Generic leaf failure; ``kind`` is the kind of the failing assertion."""

    def __init__(
        self,
        kind: str,
        message: str | None = None,
        template: str | None = None,
        values: Mapping[str, Any] | None = None,
    ):
        self.kind = kind
        super().__init__(message, None, template, values)


NODE_CLASSES: Dict[str | None, Type[ErrorNode]] = {
    "validation": ValidationError,
    "field": FieldError,
    "element": ElementError,
    "array": ArrayError,
    "allowed": AllowedError,
    "type": InvalidTypeError,
    "format": FormatError,
}


def is_schema_error(value: Any) -> bool:
    """Return True if ``value`` is the root of a validation error tree."""
    return isinstance(value, ValidationError)
