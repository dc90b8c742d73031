"""Exception hierarchy for dataknobs_schema.

All errors raised by this package extend :class:`SchemaError`, which follows
the shared dataknobs convention of a human-readable message plus an optional
context dictionary.

Two families exist:

- :class:`SchemaDefinitionError` is raised while a schema is being *built*
  (a programmer error). It never shows up inside a validation error tree.
- :class:`LocalizedError` is raised by assertion functions while a value is
  being *validated*. The pipeline catches it and folds it into the tree.

Example:
    ```python
    from dataknobs_schema import LocalizedError, number

    def check_even(value, ctx):
        if value % 2:
            raise LocalizedError("Must be even, got {value}.", value=value)

    schema = number().custom(check_even)
    ```
"""

from __future__ import annotations

from typing import Any, Dict

from .localization import localize


class SchemaError(Exception):
    """Base exception for all dataknobs_schema errors.

    Attributes:
        context: Dictionary containing contextual information about the error
        details: Alias for context
    """

    def __init__(
        self,
        message: str,
        context: Dict[str, Any] | None = None,
        details: Dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.context = details or context or {}
        self.details = self.context


class SchemaDefinitionError(SchemaError):
    """Raised when a schema is constructed incorrectly.

    Examples are a non-schema object field, a non-pattern argument to
    ``match`` or a dotted path that does not resolve to a field.
    """


class LocalizedError(SchemaError):
    """Assertion failure whose message is a translatable template.

    The template is looked up in the active message catalog and its
    ``{tokens}`` are substituted from ``values``. Both are retained so the
    message can be re-localized later with a ``{field}`` label.

    Args:
        template: Message template such as ``"Must be {length} characters or more."``
        **values: Substitution values for the template tokens
    """

    def __init__(self, template: str, **values: Any):
        self.template = template
        self.values = values
        self.message = localize(template, values)
        super().__init__(self.message, context=dict(values))
