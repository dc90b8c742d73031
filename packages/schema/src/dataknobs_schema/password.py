"""Password strength rules."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, List, Tuple

from .context import ValidationContext
from .exceptions import LocalizedError

DEFAULT_MIN_LENGTH = 12

LOWERCASE = re.compile(r"[a-z]")
UPPERCASE = re.compile(r"[A-Z]")
NUMBERS = re.compile(r"[0-9]")
SYMBOLS = re.compile(r"[!@#$%^&*]")


@dataclass(frozen=True)
class PasswordOptions:
    min_length: int = DEFAULT_MIN_LENGTH
    min_lowercase: int = 0
    min_uppercase: int = 0
    min_numbers: int = 0
    min_symbols: int = 0


# (option name, character class, template, description noun)
CHARACTER_RULES = (
    ("min_lowercase", LOWERCASE, "Must contain at least {length} lowercase character{s}.", "lowercase"),
    ("min_uppercase", UPPERCASE, "Must contain at least {length} uppercase character{s}.", "uppercase"),
    ("min_numbers", NUMBERS, "Must contain at least {length} number{s}.", "number"),
    ("min_symbols", SYMBOLS, "Must contain at least {length} symbol{s}.", "symbol"),
)


def plural(count: int) -> str:
    return "" if count == 1 else "s"


def password_checks(options: PasswordOptions) -> List[Callable[[Any, ValidationContext], None]]:
    """Build one independent check per configured rule."""

    def check_length(value: str, ctx: ValidationContext) -> None:
        if len(value) < options.min_length:
            raise LocalizedError(
                "Must be at least {length} character{s}.",
                length=options.min_length,
                s=plural(options.min_length),
            )

    checks = [check_length]
    for name, regex, template, _ in CHARACTER_RULES:
        minimum = getattr(options, name)
        if minimum:
            checks.append(count_check(regex, minimum, template))
    return checks


def count_check(regex: re.Pattern, minimum: int, template: str) -> Callable[[Any, ValidationContext], None]:
    def check_count(value: str, ctx: ValidationContext) -> None:
        if len(regex.findall(value)) < minimum:
            raise LocalizedError(template, length=minimum, s=plural(minimum))

    return check_count


def describe_password(options: PasswordOptions) -> str:
    """Human description, e.g. ``A password of at least 12 characters containing 2 numbers.``"""
    parts: List[Tuple[int, str]] = []
    for name, _, _, noun in CHARACTER_RULES:
        minimum = getattr(options, name)
        if minimum:
            if noun in ("number", "symbol"):
                noun = noun + plural(minimum)
            parts.append((minimum, noun))

    description = f"A password of at least {options.min_length} characters"
    if parts:
        phrases = [f"{count} {noun}" for count, noun in parts]
        if len(phrases) > 2:
            joined = ", ".join(phrases[:-1]) + ", and " + phrases[-1]
        else:
            joined = " and ".join(phrases)
        description += f" containing {joined}"
    return description + "."
