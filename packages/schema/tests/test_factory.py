"""Tests for building schemas from configuration."""

import json
import logging

import pytest

from dataknobs_schema import (
    ArraySchema,
    ObjectSchema,
    SchemaDefinitionError,
    SchemaFactory,
    ValidationError,
    create_schema,
    load_schema,
)

USER_YAML = """
type: object
strip_unknown: true
fields:
  username:
    type: string
    required: true
    min: 3
    pattern: "^[a-z0-9_]+$"
  email:
    type: string
    format: email
  age:
    type: number
    integer: true
    min: 13
  role:
    type: string
    allow: [admin, user]
    default: user
  tags:
    type: array
    items:
      type: string
      trim: true
"""


class TestSchemaFactory:
    """SchemaFactory.create."""

    @pytest.fixture
    def factory(self):
        return SchemaFactory()

    @pytest.mark.asyncio
    async def test_string_options(self, factory):
        schema = factory.create(type="string", required=True, min=3, trim=True)
        assert await schema.validate("  abc ") == "abc"
        with pytest.raises(ValidationError):
            await schema.validate("ab")

    @pytest.mark.asyncio
    async def test_number_options(self, factory):
        schema = factory.create(type="number", integer=True, positive=True, max=10)
        assert await schema.validate(4) == 4
        with pytest.raises(ValidationError) as exc_info:
            await schema.validate(-1.5)
        assert [d.kind for d in exc_info.value.details] == ["integer", "min"]

    @pytest.mark.asyncio
    async def test_formats(self, factory):
        card = factory.create(type="string", format="credit-card")
        assert card.meta["format"] == "credit-card"

        phone = factory.create(type="string", format="phone", region="US")
        assert await phone.validate("+16502530000") == "+16502530000"

    def test_unknown_format(self, factory):
        with pytest.raises(SchemaDefinitionError):
            factory.create(type="string", format="palindrome")

    def test_unknown_type(self, factory):
        with pytest.raises(SchemaDefinitionError, match="Unknown schema type 'matrix'"):
            factory.create(type="matrix")

    def test_unknown_option_is_logged(self, factory, caplog):
        with caplog.at_level(logging.WARNING, logger="dataknobs_schema.factory"):
            factory.create(type="number", precision=2)
        assert "Ignoring unknown schema option 'precision'" in caplog.text

    @pytest.mark.asyncio
    async def test_nested_structures(self, factory):
        schema = factory.create(
            type="object",
            fields={
                "point": {"type": "tuple", "positions": [{"type": "number"}, {"type": "number"}]},
                "when": {"type": "date", "iso": "date"},
                "flags": {"type": "array", "items": [{"type": "boolean"}, {"type": "number"}]},
            },
        )
        result = await schema.validate({"point": [1, 2], "flags": [True, 3]})
        assert result == {"point": [1, 2], "flags": [True, 3]}
        assert schema.get("when").meta["format"] == "date"
        assert isinstance(schema.get("flags"), ArraySchema)

    @pytest.mark.asyncio
    async def test_common_options(self, factory):
        schema = factory.create(
            type="string",
            nullable=True,
            description="Display name",
            message="Bad name",
            reject=["root"],
        )
        assert await schema.validate(None) is None
        assert schema.to_json_schema()["description"] == "Display name"
        with pytest.raises(ValidationError) as exc_info:
            await schema.validate("root")
        assert exc_info.value.message == "Bad name"

    @pytest.mark.asyncio
    async def test_allow_schema_members(self, factory):
        schema = factory.create(type="any", allow=[{"type": "number"}, "none"])
        assert await schema.validate(3) == 3
        assert await schema.validate("none") == "none"
        with pytest.raises(ValidationError):
            await schema.validate("some")

    @pytest.mark.asyncio
    async def test_create_schema(self):
        schema = create_schema(type="boolean", cast=True)
        assert await schema.validate("true") is True


class TestLoadSchema:
    """Loading schema configuration files."""

    @pytest.mark.asyncio
    async def test_load_yaml(self, tmp_path):
        path = tmp_path / "user.yaml"
        path.write_text(USER_YAML, encoding="utf-8")
        schema = load_schema(path)
        assert isinstance(schema, ObjectSchema)

        result = await schema.validate(
            {"username": "ada_l", "age": 36, "tags": [" a "], "ignored": 1}
        )
        assert result == {"username": "ada_l", "age": 36, "role": "user", "tags": ["a"]}

    @pytest.mark.asyncio
    async def test_load_yaml_errors(self, tmp_path):
        path = tmp_path / "user.yml"
        path.write_text(USER_YAML, encoding="utf-8")
        schema = load_schema(path)

        with pytest.raises(ValidationError) as exc_info:
            await schema.validate({"username": "Ada", "email": "nope", "age": 12, "role": "root"})
        assert exc_info.value.get_full_message(delimiter="\n") == "\n".join([
            '"username" must match pattern ^[a-z0-9_]+$.',
            '"email" must be an email address.',
            '"age" must be greater than 13.',
            '"role" must be one of ["admin", "user"].',
        ])

    @pytest.mark.asyncio
    async def test_load_json(self, tmp_path):
        path = tmp_path / "point.json"
        path.write_text(
            json.dumps({"type": "array", "items": {"type": "number"}, "max": 2}),
            encoding="utf-8",
        )
        schema = load_schema(path)
        assert await schema.validate([1, 2]) == [1, 2]
        with pytest.raises(ValidationError):
            await schema.validate([1, 2, 3])

    def test_load_non_mapping(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("- string\n", encoding="utf-8")
        with pytest.raises(SchemaDefinitionError, match="must be a mapping"):
            load_schema(path)
