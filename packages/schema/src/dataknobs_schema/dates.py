"""Date schema.

Inputs are parsed into timezone-aware UTC ``datetime`` values. Accepted
inputs are ``datetime`` and ``date`` objects, ISO-8601 strings (year,
year-month, calendar date, or date-time with optional fraction and offset),
RFC 2822 strings and numbers of milliseconds since the epoch.
"""

from __future__ import annotations

import math
import re
from datetime import date, datetime, timedelta, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Union

from .context import MISSING, ValidationContext
from .exceptions import LocalizedError, SchemaDefinitionError
from .schema import Assertion, Schema

DateInput = Union[datetime, date, str, int, float]

ISO_DATETIME = re.compile(
    r"^(?P<year>\d{4})"
    r"(?:-(?P<month>\d{2})"
    r"(?:-(?P<day>\d{2})"
    r"(?:[T ](?P<hour>\d{2}):(?P<minute>\d{2})"
    r"(?::(?P<second>\d{2})(?:[.,](?P<fraction>\d+))?)?"
    r"(?P<offset>Z|[+-]\d{2}(?::?\d{2})?)?"
    r")?)?)?$",
    re.IGNORECASE,
)
ISO_CALENDAR_DATE = re.compile(r"^\d{4}-(0[1-9]|1[0-2])-(0[1-9]|[12]\d|3[01])$")

ISO_FORMATS = ("date", "date-time")


def parse_offset(offset: str | None) -> timezone:
    if not offset or offset.upper() == "Z":
        return timezone.utc
    sign = -1 if offset[0] == "-" else 1
    digits = offset[1:].replace(":", "")
    hours = int(digits[:2])
    minutes = int(digits[2:4] or 0)
    return timezone(sign * timedelta(hours=hours, minutes=minutes))


def parse_iso(text: str) -> datetime | None:
    match = ISO_DATETIME.match(text)
    if not match:
        return None
    parts = match.groupdict()
    fraction = (parts["fraction"] or "0")[:6].ljust(6, "0")
    try:
        parsed = datetime(
            int(parts["year"]),
            int(parts["month"] or 1),
            int(parts["day"] or 1),
            int(parts["hour"] or 0),
            int(parts["minute"] or 0),
            int(parts["second"] or 0),
            int(fraction),
            tzinfo=parse_offset(parts["offset"]),
        )
    except ValueError:
        return None
    return parsed.astimezone(timezone.utc)


def parse_date(value: Any) -> datetime | None:
    """Convert a supported input to an aware UTC datetime, or None."""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            return None
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str) and value.strip():
        text = value.strip()
        parsed = parse_iso(text)
        if parsed is not None:
            return parsed
        try:
            parsed = parsedate_to_datetime(text)
        except (TypeError, ValueError, IndexError):
            return None
        if parsed is None:
            return None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed.astimezone(timezone.utc)
    return None


def to_iso_string(value: datetime) -> str:
    """ISO-8601 with milliseconds and a ``Z`` suffix."""
    return value.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def coerce_bound(bound: DateInput) -> datetime:
    parsed = parse_date(bound)
    if parsed is None:
        raise SchemaDefinitionError(f"Invalid date bound {bound!r}.")
    return parsed


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def check_date(value: Any, ctx: ValidationContext) -> datetime:
    parsed = parse_date(value)
    if parsed is None:
        raise LocalizedError("Must be a valid date input.")
    return parsed


def defaulted(ctx: ValidationContext) -> bool:
    return ctx.has_default and ctx.original is MISSING


class DateSchema(Schema):
    """Schema producing timezone-aware UTC ``datetime`` values."""

    def __init__(self) -> None:
        super().__init__(
            {"type": "date", "format": "date-time"},
            (Assertion.create("type", check_date),),
        )

    def default(self, value: Any) -> DateSchema:
        """Default value; ``"now"`` fills in the current time."""
        if value == "now":
            return super().default(utcnow).clone(default="now")
        return super().default(value)

    def min(self, minimum: DateInput) -> DateSchema:
        bound = coerce_bound(minimum)

        def check_min(value: datetime, ctx: ValidationContext) -> None:
            if value < bound:
                raise LocalizedError("Must be after {date}.", date=to_iso_string(bound))

        return self.assert_("min", check_min, min=bound)

    def max(self, maximum: DateInput) -> DateSchema:
        bound = coerce_bound(maximum)

        def check_max(value: datetime, ctx: ValidationContext) -> None:
            if value > bound:
                raise LocalizedError("Must be before {date}.", date=to_iso_string(bound))

        return self.assert_("max", check_max, max=bound)

    def after(self, minimum: DateInput) -> DateSchema:
        """Strictly later than ``minimum``."""
        bound = coerce_bound(minimum)

        def check_after(value: datetime, ctx: ValidationContext) -> None:
            if value <= bound:
                raise LocalizedError("Must be after {date}.", date=to_iso_string(bound))

        return self.assert_("after", check_after, min=bound)

    def before(self, maximum: DateInput) -> DateSchema:
        """Strictly earlier than ``maximum``."""
        bound = coerce_bound(maximum)

        def check_before(value: datetime, ctx: ValidationContext) -> None:
            if value >= bound:
                raise LocalizedError("Must be before {date}.", date=to_iso_string(bound))

        return self.assert_("before", check_before, max=bound)

    def past(self) -> DateSchema:
        def check_past(value: datetime, ctx: ValidationContext) -> None:
            if value > utcnow():
                raise LocalizedError("Must be in the past.")

        return self.assert_("past", check_past)

    def future(self) -> DateSchema:
        def check_future(value: datetime, ctx: ValidationContext) -> None:
            if value < utcnow():
                raise LocalizedError("Must be in the future.")

        return self.assert_("future", check_future)

    def iso(self, format: str = "date-time") -> DateSchema:
        """Require the input to be an ISO-8601 string (``date`` or ``date-time``)."""
        if format not in ISO_FORMATS:
            raise SchemaDefinitionError(f"Invalid format {format!r}.")

        def check_iso(value: datetime, ctx: ValidationContext) -> None:
            original = ctx.original
            if not isinstance(original, str):
                if not defaulted(ctx):
                    raise LocalizedError("Must be a string.")
            elif format == "date" and not ISO_CALENDAR_DATE.match(original):
                raise LocalizedError("Must be an ISO-8601 calendar date.")
            elif format == "date-time" and not ISO_DATETIME.match(original.strip()):
                raise LocalizedError("Must be in ISO-8601 format.")

        return self.assert_("format", check_iso, label=format, format=format)

    def calendar(self) -> DateSchema:
        return self.iso("date")

    def timestamp(self) -> DateSchema:
        """Require the input to be a number of milliseconds."""

        def check_timestamp(value: datetime, ctx: ValidationContext) -> None:
            if not is_numeric(ctx.original) and not defaulted(ctx):
                raise LocalizedError("Must be a timestamp in milliseconds.")

        return self.assert_("format", check_timestamp, label="timestamp", format="timestamp")

    def unix(self) -> DateSchema:
        """Require the input to be a number of seconds."""

        def check_unix(value: datetime, ctx: ValidationContext) -> Any:
            original = ctx.original
            if is_numeric(original):
                return datetime.fromtimestamp(original, tz=timezone.utc)
            if not defaulted(ctx):
                raise LocalizedError("Must be a timestamp in seconds.")
            return None

        return self.assert_("format", check_unix, label="unix timestamp", format="unix timestamp")


def is_numeric(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def date_schema() -> DateSchema:
    return DateSchema()
