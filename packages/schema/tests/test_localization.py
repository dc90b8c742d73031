"""Tests for message localization."""

import json

import pytest
import yaml

from dataknobs_schema import (
    LocalizedError,
    ValidationError,
    get_localized_messages,
    load_localizer,
    localize,
    number,
    object,
    string,
    use_localizer,
)
from dataknobs_schema.localization import MessageCatalog, interpolate


async def collect(schema, value, **options):
    with pytest.raises(ValidationError) as exc_info:
        await schema.validate(value, **options)
    return exc_info.value


class TestInterpolate:
    """Template substitution."""

    def test_substitutes_known_tokens(self):
        assert interpolate("Must be {length} long.", {"length": 3}) == "Must be 3 long."

    def test_keeps_unknown_tokens(self):
        assert interpolate("{field} must be {length}.", {"length": 3}) == "{field} must be 3."

    def test_single_pass(self):
        assert interpolate("{a}", {"a": "{b}", "b": "x"}) == "{b}"


class TestMessageCatalog:
    """Translator configuration."""

    def test_mapping_translator(self):
        use_localizer({"Must be a string.": "Doit être une chaîne."})
        assert localize("Must be a string.") == "Doit être une chaîne."
        assert localize("Must be a number.") == "Must be a number."

    def test_callable_translation(self):
        use_localizer({
            "Must be {length} characters or more.": lambda values: f"Au moins {values['length']} caractères."
        })
        assert localize("Must be {length} characters or more.", {"length": 3}) == "Au moins 3 caractères."

    def test_function_translator(self):
        use_localizer(lambda template: template.upper())
        assert localize("Must be {length} long.", {"length": 2}) == "MUST BE 2 LONG."

    def test_registry_records_requested_templates(self):
        use_localizer({"Must be a string.": "Doit être une chaîne."})
        localize("Must be a string.")
        localize("Must be a number.")
        assert get_localized_messages() == {
            "Must be a string.": "Doit être une chaîne.",
            "Must be a number.": "Must be a number.",
        }

    def test_use_resets_registry(self):
        localize("Must be a string.")
        use_localizer(None)
        assert get_localized_messages() == {}

    def test_catalogs_are_independent(self):
        catalog = MessageCatalog({"Hello": "Bonjour"})
        assert catalog.localize("Hello") == "Bonjour"
        assert localize("Hello") == "Hello"


class TestLocalizedValidation:
    """Translated messages in validation errors."""

    @pytest.mark.asyncio
    async def test_translated_error_messages(self):
        use_localizer({"Must be a number.": "Doit être un nombre."})
        error = await collect(number(), "x")
        assert error.details[0].message == "Doit être un nombre."

    @pytest.mark.asyncio
    async def test_custom_assertion_messages(self):
        use_localizer({"Must be even.": "Doit être pair."})

        def check_even(value, ctx):
            if value % 2:
                raise LocalizedError("Must be even.")

        error = await collect(number().custom(check_even), 3)
        assert error.details[0].message == "Doit être pair."

    @pytest.mark.asyncio
    async def test_translated_full_message(self):
        use_localizer({
            "{field} must be a string.": "{field} doit être une chaîne.",
            "{field} is required.": "{field} est obligatoire.",
        })
        schema = object({"name": string().required(), "nick": string()})
        error = await collect(schema, {"nick": 1})
        assert error.get_full_message() == '"name" est obligatoire. "nick" doit être une chaîne.'

    @pytest.mark.asyncio
    async def test_plain_template_in_full_message(self):
        use_localizer({"Must be a string.": "Doit être une chaîne."})
        error = await collect(object({"name": string()}), {"name": 3})
        assert error.details[0].details[0].message == "Doit être une chaîne."
        assert error.get_full_message() == '"name" doit être une chaîne.'

    @pytest.mark.asyncio
    async def test_plain_required_template_in_full_message(self):
        use_localizer({"Value is required.": "Valeur requise."})
        error = await collect(object({"name": string().required()}), {})
        assert error.get_full_message() == '"name" valeur requise.'

    @pytest.mark.asyncio
    async def test_translated_root_message(self):
        use_localizer({"Input failed validation.": "Entrée invalide."})
        error = await collect(string(), 1)
        assert str(error) == "Entrée invalide."


class TestLoadLocalizer:
    """Loading message catalogs from files."""

    def test_load_yaml(self, tmp_path):
        path = tmp_path / "fr.yaml"
        path.write_text(
            yaml.safe_dump({"Must be a string.": "Doit être une chaîne."}, allow_unicode=True),
            encoding="utf-8",
        )
        data = load_localizer(path)
        assert data == {"Must be a string.": "Doit être une chaîne."}
        assert localize("Must be a string.") == "Doit être une chaîne."

    def test_load_json(self, tmp_path):
        path = tmp_path / "fr.json"
        path.write_text(json.dumps({"Must be a number.": "Doit être un nombre."}), encoding="utf-8")
        load_localizer(str(path))
        assert localize("Must be a number.") == "Doit être un nombre."

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_localizer(tmp_path / "missing.yaml")

    def test_unsupported_format(self, tmp_path):
        path = tmp_path / "fr.txt"
        path.write_text("x", encoding="utf-8")
        with pytest.raises(ValueError, match="Unsupported file format"):
            load_localizer(path)

    def test_not_a_mapping(self, tmp_path):
        path = tmp_path / "fr.yaml"
        path.write_text("- one\n- two\n", encoding="utf-8")
        with pytest.raises(ValueError, match="must be a mapping"):
            load_localizer(path)
