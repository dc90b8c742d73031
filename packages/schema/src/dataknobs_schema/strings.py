"""String schema."""

from __future__ import annotations

import re
from typing import Any

from .context import MISSING, ValidationContext
from .exceptions import LocalizedError, SchemaDefinitionError
from .formats import FORMATS, is_phone
from .password import PasswordOptions, describe_password, password_checks
from .schema import INITIAL_BAND, Assertion, Schema


def check_string(value: Any, ctx: ValidationContext) -> Any:
    if isinstance(value, str):
        return None
    if ctx.cast:
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, (int, float)):
            return str(value)
    raise LocalizedError("Must be a string.")


def check_not_empty(value: Any, ctx: ValidationContext) -> None:
    if value == "" and not ctx.allow_empty:
        raise LocalizedError("Value is required.")


def assert_present_string(value: Any, ctx: ValidationContext) -> None:
    if value is MISSING or value is None or value == "":
        raise LocalizedError("Value is required.")


class StringSchema(Schema):
    """Schema for ``str`` values.

    Empty strings pass every check past the initial band unless
    ``allow_empty=False`` is in effect, so optional formatted fields accept
    ``""``. ``required()`` rejects ``""``.
    """

    def __init__(self) -> None:
        super().__init__(
            {"type": "string"},
            (
                Assertion.create("type", check_string),
                Assertion.create("empty", check_not_empty),
            ),
        )

    def can_skip(self, value: Any, assertion: Assertion, ctx: ValidationContext) -> bool:
        if value == "" and ctx.allow_empty and assertion.kind not in INITIAL_BAND:
            return True
        return super().can_skip(value, assertion, ctx)

    def required(self) -> StringSchema:
        return self.without("required").assert_("required", assert_present_string, required=True)

    def allow_empty(self) -> StringSchema:
        return self.options(allow_empty=True)

    def length(self, length: int) -> StringSchema:
        def check_length(value: str, ctx: ValidationContext) -> None:
            if len(value) != length:
                raise LocalizedError("Must be exactly {length} characters.", length=length)

        return self.assert_("length", check_length, min=length, max=length)

    def min(self, length: int) -> StringSchema:
        def check_min(value: str, ctx: ValidationContext) -> None:
            if len(value) < length:
                raise LocalizedError("Must be {length} characters or more.", length=length)

        return self.assert_("min", check_min, min=length)

    def max(self, length: int) -> StringSchema:
        def check_max(value: str, ctx: ValidationContext) -> None:
            if len(value) > length:
                raise LocalizedError("Must be {length} characters or less.", length=length)

        return self.assert_("max", check_max, max=length)

    def match(self, pattern: re.Pattern | None = None) -> StringSchema:
        if not isinstance(pattern, re.Pattern):
            raise SchemaDefinitionError("Argument must be a regular expression")

        def check_match(value: str, ctx: ValidationContext) -> None:
            if not pattern.search(value):
                raise LocalizedError("Must match pattern {reg}.", reg=pattern.pattern)

        return self.assert_("regex", check_match, pattern=pattern.pattern)

    def trim(self) -> StringSchema:
        return self.assert_("transform", lambda value, ctx: value.strip())

    def lowercase(self, assert_: bool = False) -> StringSchema:
        if not assert_:
            return self.assert_("transform", lambda value, ctx: value.lower())

        def check_lowercase(value: str, ctx: ValidationContext) -> None:
            if value != value.lower():
                raise LocalizedError("Must be in lower case.")

        return self.assert_("lowercase", check_lowercase)

    def uppercase(self, assert_: bool = False) -> StringSchema:
        if not assert_:
            return self.assert_("transform", lambda value, ctx: value.upper())

        def check_uppercase(value: str, ctx: ValidationContext) -> None:
            if value != value.upper():
                raise LocalizedError("Must be in upper case.")

        return self.assert_("uppercase", check_uppercase)

    def named_format(self, name: str) -> StringSchema:
        check, template = FORMATS[name]
        return self.format(name, check, template)

    def email(self) -> StringSchema:
        return self.named_format("email")

    def phone(self, region: str | None = None) -> StringSchema:
        """E.164 phone number; ``region`` is an ISO country code or ``"NANP"``."""
        return self.format(
            "phone", lambda value: is_phone(value, region), "Must be a valid phone number."
        )

    def hex(self) -> StringSchema:
        return self.named_format("hex")

    def md5(self) -> StringSchema:
        return self.named_format("md5")

    def sha1(self) -> StringSchema:
        return self.named_format("sha1")

    def ascii(self) -> StringSchema:
        return self.named_format("ascii")

    def base64(self) -> StringSchema:
        return self.named_format("base64")

    def credit_card(self) -> StringSchema:
        return self.named_format("credit-card")

    def ip(self) -> StringSchema:
        return self.named_format("ip")

    def country(self) -> StringSchema:
        return self.named_format("country-code")

    def locale(self) -> StringSchema:
        return self.named_format("locale")

    def jwt(self) -> StringSchema:
        return self.named_format("jwt")

    def latlng(self) -> StringSchema:
        return self.named_format("latlng")

    def postal_code(self) -> StringSchema:
        return self.named_format("postal-code")

    def zipcode(self) -> StringSchema:
        return self.named_format("zipcode")

    def slug(self) -> StringSchema:
        return self.named_format("slug")

    def url(self) -> StringSchema:
        return self.named_format("url")

    def uuid(self) -> StringSchema:
        return self.named_format("uuid")

    def domain(self) -> StringSchema:
        return self.named_format("domain")

    def btc(self) -> StringSchema:
        return self.named_format("bitcoin-address")

    def eth(self) -> StringSchema:
        return self.named_format("ethereum-address")

    def swift(self) -> StringSchema:
        return self.named_format("swift-code")

    def mongo(self) -> StringSchema:
        return self.named_format("mongo-object-id")

    def calendar(self) -> StringSchema:
        return self.named_format("date")

    def password(self, **options: Any) -> StringSchema:
        """Password strength rules.

        Args:
            **options: ``min_length`` (default 12), ``min_lowercase``,
                ``min_uppercase``, ``min_numbers``, ``min_symbols``
        """
        rules = PasswordOptions(**options)
        schema = self.clone(password=rules, description=describe_password(rules))
        for check in password_checks(rules):
            schema = schema.assert_("password", check)
        return schema


def string_schema() -> StringSchema:
    return StringSchema()
