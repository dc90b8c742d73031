"""Tests for number, boolean and date schemas."""

from datetime import date as calendar_date
from datetime import datetime, timedelta, timezone

import pytest

from dataknobs_schema import (
    FormatError,
    InvalidTypeError,
    SchemaDefinitionError,
    ValidationError,
    boolean,
    date,
    number,
)


async def collect(schema, value, **options):
    with pytest.raises(ValidationError) as exc_info:
        await schema.validate(value, **options)
    return exc_info.value


class TestNumberSchema:
    """Number schema behavior."""

    @pytest.mark.asyncio
    async def test_accepts_numbers(self):
        assert await number().validate(3) == 3
        assert await number().validate(2.5) == 2.5

    @pytest.mark.asyncio
    @pytest.mark.parametrize("value", [True, "3", float("nan"), float("inf"), [1]])
    async def test_rejects_non_numbers(self, value):
        error = await collect(number(), value)
        assert isinstance(error.details[0], InvalidTypeError)
        assert error.details[0].message == "Must be a number."

    @pytest.mark.asyncio
    async def test_cast_strings(self):
        assert await number().validate("42", cast=True) == 42
        assert await number().validate(" 2.5 ", cast=True) == 2.5

        error = await collect(number(), "abc", cast=True)
        assert error.details[0].kind == "type"

    @pytest.mark.asyncio
    async def test_bounds(self):
        schema = number().min(1).max(10)
        assert await schema.validate(1) == 1
        assert await schema.validate(10) == 10

        error = await collect(schema, 0)
        assert error.details[0].to_dict() == {"kind": "min", "message": "Must be greater than 1."}
        error = await collect(schema, 11)
        assert error.details[0].message == "Must be less than 10."

    @pytest.mark.asyncio
    async def test_integer(self):
        assert await number().integer().validate(2.0) == 2.0
        error = await collect(number().integer(), 2.5)
        assert error.details[0].message == "Must be an integer."

    @pytest.mark.asyncio
    async def test_sign(self):
        assert await number().positive().validate(0) == 0
        error = await collect(number().positive(), -1)
        assert error.details[0].kind == "min"
        assert error.details[0].message == "Must be positive."

        error = await collect(number().negative(), 1)
        assert error.details[0].kind == "max"
        assert error.details[0].message == "Must be negative."

    @pytest.mark.asyncio
    async def test_multiple(self):
        assert await number().multiple(5).validate(15) == 15
        error = await collect(number().multiple(5), 7)
        assert error.details[0].message == "Must be a multiple of 5."


class TestBooleanSchema:
    """Boolean schema behavior."""

    @pytest.mark.asyncio
    async def test_accepts_booleans(self):
        assert await boolean().validate(True) is True
        assert await boolean().validate(False) is False

    @pytest.mark.asyncio
    async def test_rejects_numbers(self):
        error = await collect(boolean(), 1)
        assert error.details[0].to_dict() == {
            "kind": "type",
            "expectedKind": "boolean",
            "message": "Must be a boolean.",
        }

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "value,expected", [("true", True), ("1", True), ("FALSE", False), ("0", False)]
    )
    async def test_cast_strings(self, value, expected):
        assert await boolean().validate(value, cast=True) is expected

    @pytest.mark.asyncio
    async def test_cast_rejects_other_strings(self):
        error = await collect(boolean().cast(), "yes")
        assert error.details[0].kind == "type"


class TestDateSchema:
    """Date parsing and bounds."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "value",
        [
            "2024-01-02T03:04:05Z",
            "2024-01-02T04:04:05+01:00",
            "2024-01-02T03:04:05.000Z",
            "Tue, 02 Jan 2024 03:04:05 GMT",
            datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
            datetime(2024, 1, 2, 3, 4, 5),
            1704164645000,
        ],
    )
    async def test_parses_inputs(self, value):
        result = await date().validate(value)
        assert result == datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        assert result.tzinfo is not None

    @pytest.mark.asyncio
    async def test_calendar_inputs(self):
        expected = datetime(2024, 1, 2, tzinfo=timezone.utc)
        assert await date().validate("2024-01-02") == expected
        assert await date().validate(calendar_date(2024, 1, 2)) == expected

    @pytest.mark.asyncio
    @pytest.mark.parametrize("value", ["not a date", "2024-02-30", True, ""])
    async def test_rejects_invalid_inputs(self, value):
        error = await collect(date(), value)
        assert error.details[0].to_dict() == {
            "kind": "type",
            "expectedKind": "date",
            "message": "Must be a valid date input.",
        }

    @pytest.mark.asyncio
    async def test_min_and_max_are_inclusive(self):
        schema = date().min("2024-01-01").max("2024-12-31")
        assert await schema.validate("2024-01-01") == datetime(2024, 1, 1, tzinfo=timezone.utc)

        error = await collect(schema, "2023-12-31")
        assert error.details[0].message == "Must be after 2024-01-01T00:00:00.000Z."
        error = await collect(schema, "2025-01-01")
        assert error.details[0].message == "Must be before 2024-12-31T00:00:00.000Z."

    @pytest.mark.asyncio
    async def test_after_and_before_are_exclusive(self):
        error = await collect(date().after("2024-01-01"), "2024-01-01")
        assert error.details[0].kind == "after"
        error = await collect(date().before("2024-01-01"), "2024-01-01")
        assert error.details[0].kind == "before"

    def test_invalid_bound(self):
        with pytest.raises(SchemaDefinitionError):
            date().min("someday")

    @pytest.mark.asyncio
    async def test_past_and_future(self):
        past = datetime.now(timezone.utc) - timedelta(days=1)
        future = datetime.now(timezone.utc) + timedelta(days=1)

        assert await date().past().validate(past) == past
        assert await date().future().validate(future) == future

        error = await collect(date().past(), future)
        assert error.details[0].message == "Must be in the past."
        error = await collect(date().future(), past)
        assert error.details[0].message == "Must be in the future."

    @pytest.mark.asyncio
    async def test_default_now(self):
        before = datetime.now(timezone.utc)
        result = await date().default("now").validate()
        assert before <= result <= datetime.now(timezone.utc)

    @pytest.mark.asyncio
    async def test_iso_requires_string_input(self):
        schema = date().iso()
        assert await schema.validate("2024-01-02T03:04:05Z") is not None

        error = await collect(schema, 1704164645000)
        detail = error.details[0]
        assert isinstance(detail, FormatError)
        assert detail.format == "date-time"
        assert detail.message == "Must be a string."

    @pytest.mark.asyncio
    async def test_iso_accepts_default_now(self):
        assert await date().iso().default("now").validate() is not None

    @pytest.mark.asyncio
    async def test_calendar_format(self):
        error = await collect(date().calendar(), "2024-01-02T03:04:05Z")
        assert error.details[0].format == "date"
        assert error.details[0].message == "Must be an ISO-8601 calendar date."

    def test_iso_rejects_unknown_format(self):
        with pytest.raises(SchemaDefinitionError):
            date().iso("week")

    @pytest.mark.asyncio
    async def test_timestamp(self):
        result = await date().timestamp().validate(1000)
        assert result == datetime(1970, 1, 1, 0, 0, 1, tzinfo=timezone.utc)

        error = await collect(date().timestamp(), "2024-01-01")
        assert error.details[0].format == "timestamp"
        assert error.details[0].message == "Must be a timestamp in milliseconds."

    @pytest.mark.asyncio
    async def test_unix(self):
        result = await date().unix().validate(60)
        assert result == datetime(1970, 1, 1, 0, 1, tzinfo=timezone.utc)

        error = await collect(date().unix(), "2024-01-01")
        assert error.details[0].message == "Must be a timestamp in seconds."
