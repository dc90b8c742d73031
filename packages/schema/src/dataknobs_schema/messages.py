"""Compose an error tree into labeled, localized sentences."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any, List, Sequence

from .localization import catalog, localize

if TYPE_CHECKING:
    from .errors import ErrorNode

UNLABELED_KINDS = frozenset({"field", "element", "array", "custom"})

ROOT_LABEL = "Value"


def get_full_message(error: ErrorNode, delimiter: str = " ", natural: bool = False) -> str:
    return delimiter.join(collect_messages(error, (), natural))


def collect_messages(error: ErrorNode, path: Sequence[Any], natural: bool) -> List[str]:
    if error.details is None:
        return [labeled_message(error, path, natural)]

    messages: List[str] = []
    for detail in error.details:
        child_path = path
        if detail.kind == "field":
            child_path = (*path, detail.field)
        elif detail.kind == "element":
            child_path = (*path, detail.index)
        messages.extend(collect_messages(detail, child_path, natural))
    return messages


def labeled_message(error: ErrorNode, path: Sequence[Any], natural: bool) -> str:
    message = error.message or ""
    if error.kind in UNLABELED_KINDS:
        return message

    template = error.template or message
    label = get_label(path, natural)
    values = {**error.values, "field": label}
    if "{field}" in template:
        return localize(template, values)

    # A translation of the labeled form wins over the localized leaf message
    labeled = label_template(template)
    if catalog.lookup(labeled) is not None:
        return localize(labeled, values)
    return f"{label} {message_base(message)}"


def label_template(template: str) -> str:
    if template == "Value is required.":
        return "{field} is required."
    return "{field} " + downcase(template)


def message_base(message: str) -> str:
    if message == "Value is required.":
        return "is required."
    return downcase(message)


def get_label(path: Sequence[Any], natural: bool) -> str:
    if not path:
        return ROOT_LABEL
    if natural:
        return naturalize(" ".join(str(key) for key in path))
    return '"' + ".".join(str(key) for key in path) + '"'


def naturalize(text: str) -> str:
    """Humanize a key: ``authCode`` -> ``Auth code``, ``my-token`` -> ``My token``."""
    first = text[:1].upper()
    rest = re.sub(r"[A-Z]+", lambda m: " " + m.group(0).lower(), text[1:])
    rest = re.sub(r"[-_]", " ", rest)
    return first + rest


def downcase(text: str) -> str:
    return text[:1].lower() + text[1:]
