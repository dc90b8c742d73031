"""Per-call validation context.

A :class:`ValidationContext` is created by ``Schema.validate`` and handed to
every assertion function. It is frozen; nested validation derives new
contexts with :meth:`ValidationContext.enter`, :meth:`for_field` and
:meth:`for_index`, so sibling validations never observe each other's state.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Any, Mapping, Tuple, Union


class _Missing:
    """Marker for an absent value, distinct from ``None`` (null)."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> _Missing:
        return self

    def __deepcopy__(self, memo: Any) -> _Missing:
        return self

    def __reduce__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()

PathKey = Union[str, int]


@dataclass(frozen=True)
class ValidationContext:
    """Read-only bundle of path, root and options for one schema node.

    Attributes:
        original: Value handed to this node before any assertion rewrote it
        root: Object under construction at the nearest enclosing object
        original_root: Pristine input given to the enclosing object
        path: Field keys and indices leading to this node
        options: Caller options merged with options burned into schemas
        type_name: Type tag of the current schema, if any
        required: Whether the current schema is required
        nullable: Whether the current schema accepts ``None``
        has_default: Whether the current schema supplies a default
    """

    original: Any = MISSING
    root: Any = MISSING
    original_root: Any = MISSING
    path: Tuple[PathKey, ...] = ()
    options: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    type_name: str | None = None
    required: bool = False
    nullable: bool = False
    has_default: bool = False

    @classmethod
    def create(cls, value: Any, **options: Any) -> ValidationContext:
        return cls(
            original=value,
            root=value,
            original_root=value,
            options=MappingProxyType(dict(options)),
        )

    def enter(self, meta: Mapping[str, Any], value: Any) -> ValidationContext:
        """Derive the context for a schema node about to run against ``value``.

        Options burned into the schema override inherited ones; node flags are
        taken from the schema alone.
        """
        options = self.options
        burned = meta.get("options")
        if burned:
            options = MappingProxyType({**options, **burned})
        return replace(
            self,
            original=value,
            options=options,
            type_name=meta.get("type"),
            required=bool(meta.get("required")),
            nullable=bool(meta.get("nullable")),
            has_default=meta.get("default", MISSING) is not MISSING,
        )

    def for_field(self, key: PathKey, root: Any, original_root: Any) -> ValidationContext:
        return replace(self, path=(*self.path, key), root=root, original_root=original_root)

    def for_index(self, index: int) -> ValidationContext:
        return replace(self, path=(*self.path, index))

    def with_options(self, **changes: Any) -> ValidationContext:
        return replace(self, options=MappingProxyType({**self.options, **changes}))

    def without_options(self, *names: str) -> ValidationContext:
        options = {k: v for k, v in self.options.items() if k not in names}
        return replace(self, options=MappingProxyType(options))

    def get(self, name: str, default: Any = None) -> Any:
        """Look up an option, including caller-defined extras."""
        return self.options.get(name, default)

    @property
    def cast(self) -> bool:
        return bool(self.options.get("cast"))

    @property
    def strip_unknown(self) -> bool:
        return bool(self.options.get("strip_unknown"))

    @property
    def strip_empty(self) -> bool:
        return bool(self.options.get("strip_empty"))

    @property
    def preserve_keys(self) -> bool:
        return bool(self.options.get("preserve_keys"))

    @property
    def expand_dot_syntax(self) -> bool:
        return bool(self.options.get("expand_dot_syntax"))

    @property
    def allow_empty(self) -> bool:
        return self.options.get("allow_empty", True) is not False

    @property
    def message(self) -> str | None:
        return self.options.get("message")
