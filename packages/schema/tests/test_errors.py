"""Tests for the validation error tree."""

import copy
import json

import pytest

from dataknobs_schema import (
    MISSING,
    AssertionFailedError,
    ElementError,
    ErrorNode,
    FieldError,
    FormatError,
    InvalidTypeError,
    SchemaError,
    ValidationError,
    array,
    is_schema_error,
    number,
    object,
    string,
)


@pytest.fixture
def error_tree():
    return ValidationError(
        details=[
            FieldError("email", details=[FormatError("email", "Must be an email address.")]),
            FieldError(
                "scores",
                details=[
                    ElementError(
                        2,
                        details=[
                            InvalidTypeError("number", "Must be a number."),
                            AssertionFailedError("min", "Must be greater than 0."),
                        ],
                    )
                ],
            ),
            FieldError("extra", message='Unknown field "extra".'),
        ]
    )


class TestErrorTree:
    """Error node behavior."""

    def test_error_nodes_are_schema_errors(self, error_tree):
        assert isinstance(error_tree, SchemaError)
        assert isinstance(error_tree, Exception)
        assert is_schema_error(error_tree)
        assert not is_schema_error(error_tree.details[0])
        assert not is_schema_error(ValueError("x"))

    def test_leaf_and_aggregate(self, error_tree):
        email = error_tree.details[0]
        assert email.details[0].details is None
        assert email.message is None
        assert str(email.details[0]) == "Must be an email address."

    def test_to_dict(self, error_tree):
        assert error_tree.to_dict() == {
            "kind": "validation",
            "details": [
                {
                    "kind": "field",
                    "field": "email",
                    "details": [
                        {"kind": "format", "format": "email", "message": "Must be an email address."}
                    ],
                },
                {
                    "kind": "field",
                    "field": "scores",
                    "details": [
                        {
                            "kind": "element",
                            "index": 2,
                            "details": [
                                {"kind": "type", "expectedKind": "number", "message": "Must be a number."},
                                {"kind": "min", "message": "Must be greater than 0."},
                            ],
                        }
                    ],
                },
                {"kind": "field", "field": "extra", "message": 'Unknown field "extra".'},
            ],
        }

    def test_to_json(self):
        error = ValidationError("Entrée invalide")
        data = json.loads(error.to_json())
        assert data == {"kind": "validation", "message": "Entrée invalide"}
        assert "Entrée" in error.to_json()

    def test_from_dict_rebuilds_tree(self, error_tree):
        rebuilt = ErrorNode.from_dict(error_tree.to_dict())
        assert isinstance(rebuilt, ValidationError)
        assert rebuilt == error_tree
        assert isinstance(rebuilt.details[1].details[0], ElementError)
        assert rebuilt.details[1].details[0].details[1].kind == "min"

    def test_from_dict_unknown_kind(self):
        node = ErrorNode.from_dict({"kind": "palindrome", "message": "Must read both ways."})
        assert isinstance(node, AssertionFailedError)
        assert node.kind == "palindrome"

    def test_equality(self):
        assert FieldError("a", "x") == FieldError("a", "x")
        assert FieldError("a", "x") != FieldError("b", "x")

    def test_equal_nodes_hash_alike(self):
        assert hash(FieldError("a", "x")) == hash(FieldError("a", "x"))
        assert len({FieldError("a", "x"), FieldError("a", "x")}) == 1
        assert len({FieldError("a", "x"), FieldError("b", "x")}) == 2

    def test_type_error_wire_key(self):
        node = InvalidTypeError("number", "Must be a number.")
        assert node.to_dict() == {"kind": "type", "message": "Must be a number.", "expectedKind": "number"}
        assert ErrorNode.from_dict(node.to_dict()).expected == "number"

    def test_full_message(self, error_tree):
        assert error_tree.get_full_message(delimiter=" | ") == (
            '"email" must be an email address. | '
            '"scores.2" must be a number. | '
            '"scores.2" must be greater than 0. | '
            'Unknown field "extra".'
        )

    def test_default_messages(self):
        assert str(ValidationError()) == "Input failed validation."
        assert str(AssertionFailedError("min")) == "min failed validation."


class TestRaisedErrors:
    """Errors raised by validation."""

    @pytest.mark.asyncio
    async def test_single_error_is_raised(self):
        schema = object({"scores": array(number().min(0))})
        with pytest.raises(ValidationError) as exc_info:
            await schema.validate({"scores": [1, -1]})
        rebuilt = ErrorNode.from_dict(json.loads(exc_info.value.to_json()))
        assert rebuilt == exc_info.value

    @pytest.mark.asyncio
    async def test_custom_field_message(self):
        schema = object({"email": string().email().message("Bad email")})
        with pytest.raises(ValidationError) as exc_info:
            await schema.validate({"email": "nope"})
        field = exc_info.value.details[0]
        assert field.message == "Bad email"
        assert field.details[0].kind == "format"


class TestMissing:
    """The absent-value marker."""

    def test_missing_is_falsy_singleton(self):
        assert not MISSING
        assert MISSING is not None
        assert repr(MISSING) == "MISSING"
        assert copy.copy(MISSING) is MISSING
        assert copy.deepcopy({"a": MISSING})["a"] is MISSING
