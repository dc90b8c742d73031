"""Message catalog for translating validation messages.

Every message produced by this package is a template such as
``"Must be {length} characters or more."``. Before it reaches a caller the
template is passed through the active translator, which may be:

- a mapping of template to translation (a string, or a function called with
  the template's substitution values and returning a string),
- a function called with the template and returning a translation,
- nothing, in which case the template is used as is.

Every template requested is recorded so the full translatable surface can be
exported with :func:`get_localized_messages`.

The default catalog is a process-wide object. Configure it once at startup,
before validation runs concurrently; it is not locked.

Example:
    ```python
    from dataknobs_schema import use_localizer, string

    use_localizer({"Must be a string.": "文字列を入力してください。"})
    ```
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Union

from .loaders import load_data_file

logger = logging.getLogger(__name__)

Translator = Union[Mapping[str, Any], Callable[[str], Any], None]

TOKEN_PATTERN = re.compile(r"\{(.+?)\}")


def interpolate(message: str, values: Mapping[str, Any] | None) -> str:
    """Single-pass ``{name}`` substitution; unknown tokens are left in place."""
    if not values:
        return message

    def replace(match: re.Match) -> str:
        token = match.group(1)
        if token in values:
            return str(values[token])
        return match.group(0)

    return TOKEN_PATTERN.sub(replace, message)


class MessageCatalog:
    """Active translator plus the registry of requested templates."""

    def __init__(self, translator: Translator = None):
        self._translator: Translator = translator
        self._messages: Dict[str, Any] = {}

    def use(self, translator: Translator) -> None:
        """Install a translator and reset the requested-template registry."""
        self._translator = translator
        self._messages = {}
        if translator is None:
            logger.info("Message catalog reset to source templates")
        else:
            logger.info(f"Message catalog configured with {type(translator).__name__}")

    def lookup(self, template: str) -> Any:
        translator = self._translator
        if translator is None:
            return None
        if isinstance(translator, Mapping):
            return translator.get(template)
        return translator(template)

    def localize(self, template: str, values: Mapping[str, Any] | None = None) -> str:
        """Translate a template and fill in its tokens."""
        values = values or {}
        translated = self.lookup(template)
        self._messages[template] = translated if translated is not None else template
        if translated is None:
            translated = template
        if callable(translated):
            translated = translated(dict(values))
        return interpolate(str(translated), values)

    def messages(self) -> Dict[str, Any]:
        """Return every requested template mapped to its translation."""
        return dict(self._messages)


catalog = MessageCatalog()


def use_localizer(translator: Translator) -> None:
    """Configure the process-wide translator (a mapping, callable or None)."""
    catalog.use(translator)


def localize(template: str, values: Mapping[str, Any] | None = None) -> str:
    return catalog.localize(template, values)


def get_localized_messages() -> Dict[str, Any]:
    return catalog.messages()


def load_localizer(path: Union[str, Path]) -> Dict[str, Any]:
    """Load a template-to-translation mapping from a YAML or JSON file and use it.

    Args:
        path: File path ending in ``.yaml``, ``.yml`` or ``.json``

    Returns:
        The loaded mapping

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file does not hold a mapping
    """
    data = load_data_file(path)

    if not isinstance(data, dict):
        raise ValueError(f"Message catalog must be a mapping: {path}")

    logger.info(f"Loaded {len(data)} translated messages from {path}")
    use_localizer(data)
    return data
