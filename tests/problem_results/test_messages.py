"""Tests for message templates and localized resolution."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING

import pytest

from problem_results.errors import CatalogLoadError, InvalidParameterError
from problem_results.messages import MESSAGE_TEMPLATES, MessageKey, template_for
from problem_results.translation import (
    CatalogTranslator,
    DefaultTranslator,
    ProblemMessages,
    Translator,
    format_template,
    load_catalogs,
    normalize_locale,
)

if TYPE_CHECKING:
    from pathlib import Path


class TestMessageTables:
    """Tests for the static message table."""

    def test_every_key_has_a_template(self) -> None:
        """Each MessageKey has one default template keyed by itself."""
        assert set(MESSAGE_TEMPLATES) == set(MessageKey)
        for key, template in MESSAGE_TEMPLATES.items():
            assert template.key is key
            assert template.default

    def test_table_is_read_only(self) -> None:
        """The table rejects mutation."""
        with pytest.raises(TypeError):
            MESSAGE_TEMPLATES[MessageKey.FORBIDDEN] = template_for(MessageKey.BAD_REQUEST)  # type: ignore[index]  # read-only mapping


class TestFallback:
    """Tests for default-template fallback."""

    def test_unsupported_locale_matches_default_formatter(
        self, bundled_translator: CatalogTranslator
    ) -> None:
        """An unknown locale yields exactly the formatted default."""
        template = template_for(MessageKey.RESOURCE_NOT_FOUND)
        resolved = bundled_translator.resolve(
            template.key.value, template.default, "tlh", "User", "id", "42"
        )
        assert resolved == format_template(template.default, "User", "id", "42")
        assert resolved == "Unfortunately, an 'User' with an 'id' of '42' was not found."

    def test_missing_key_falls_back(self) -> None:
        """A locale without the key yields the formatted default."""
        translator = CatalogTranslator({"de": {"FORBIDDEN_TITLE": "Zugriff verweigert!"}})
        assert translator.resolve("OTHER", "Hello {0}", "de", "Ada") == "Hello Ada"

    def test_default_translator_ignores_locale(self) -> None:
        """DefaultTranslator always renders the default."""
        assert DefaultTranslator().resolve("K", "{0}-{1}", "fr", "a", "b") == "a-b"

    def test_translators_satisfy_protocol(self, bundled_translator: CatalogTranslator) -> None:
        """Both translators satisfy the Translator protocol."""
        assert isinstance(DefaultTranslator(), Translator)
        assert isinstance(bundled_translator, Translator)


class TestCatalogTranslator:
    """Tests for catalog-backed resolution."""

    def test_region_falls_back_to_language(self) -> None:
        """de-AT resolves through the de catalog."""
        translator = CatalogTranslator({"de": {"FORBIDDEN_TITLE": "Zugriff verweigert!"}})
        assert translator.resolve("FORBIDDEN_TITLE", "Access forbidden!", "de_AT") == (
            "Zugriff verweigert!"
        )

    def test_exact_region_wins(self) -> None:
        """A regional catalog is preferred over its language."""
        translator = CatalogTranslator({"de": {"K": "de"}, "de-CH": {"K": "ch"}})
        assert translator.resolve("K", "en", "de-ch") == "ch"

    def test_translation_can_reorder_placeholders(self) -> None:
        """Translated templates may reorder positional placeholders."""
        translator = CatalogTranslator({"xx": {"RESOURCE_NOT_FOUND": "{2}/{1}/{0}"}})
        assert translator.resolve("RESOURCE_NOT_FOUND", "unused", "xx", "a", "b", "c") == "c/b/a"

    def test_unknown_placeholder_rejected(self) -> None:
        """A translation may not use placeholders its default lacks."""
        with pytest.raises(CatalogLoadError, match="absent from the default template"):
            CatalogTranslator({"de": {"FORBIDDEN": "Kein Zugriff auf {0}."}})

    def test_named_placeholder_rejected(self) -> None:
        """Only positional placeholders are accepted."""
        with pytest.raises(CatalogLoadError, match="not a valid template"):
            CatalogTranslator({"de": {"UNAUTHORIZED": "Kein Zugriff auf {resource}."}})

    def test_normalize_locale(self) -> None:
        """Locales are lower-cased with dashes."""
        assert normalize_locale(" pt_BR ") == "pt-br"

    def test_bundled_catalogs_cover_every_key(self, bundled_translator: CatalogTranslator) -> None:
        """Each bundled catalog translates all keys."""
        assert set(bundled_translator.locales) == {"de", "es", "fr"}
        for locale in bundled_translator.locales:
            for key, template in MESSAGE_TEMPLATES.items():
                params = ("x", "y", "z")
                translated = bundled_translator.resolve(key.value, template.default, locale, *params)
                assert translated != format_template(template.default, *params)


class TestLoadCatalogs:
    """Tests for loading catalogs from disk."""

    def test_loads_all_files(self, catalog_dir: Path) -> None:
        """Every <locale>.json file becomes a catalog."""
        translator = load_catalogs(catalog_dir)
        assert translator.locales == ("de", "nl")

    def test_locale_filter(self, catalog_dir: Path) -> None:
        """Files for unwanted locales are skipped."""
        translator = load_catalogs(catalog_dir, locales=["de"])
        assert translator.locales == ("de",)

    def test_missing_directory(self, tmp_path: Path) -> None:
        """A missing directory raises CatalogLoadError."""
        with pytest.raises(CatalogLoadError, match="directory not found"):
            load_catalogs(tmp_path / "missing")

    def test_malformed_json(self, tmp_path: Path) -> None:
        """Invalid JSON raises CatalogLoadError chained to the decoder error."""
        (tmp_path / "fr.json").write_text("{not json", encoding="utf-8")
        with pytest.raises(CatalogLoadError, match="Failed to read") as info:
            load_catalogs(tmp_path)
        assert isinstance(info.value.__cause__, json.JSONDecodeError)

    def test_non_object_catalog(self, tmp_path: Path) -> None:
        """A catalog must be a JSON object."""
        (tmp_path / "fr.json").write_text('["a"]', encoding="utf-8")
        with pytest.raises(CatalogLoadError, match="must contain a JSON object"):
            load_catalogs(tmp_path)


class TestProblemMessages:
    """Tests for parameter validation and per-kind resolution."""

    @pytest.fixture
    def messages(self) -> ProblemMessages:
        return ProblemMessages(DefaultTranslator())

    def test_resource_not_found_succeeds(self, messages: ProblemMessages) -> None:
        """Non-blank parameters resolve."""
        assert messages.resource_not_found("en", "User", "id", "42") == (
            "Unfortunately, an 'User' with an 'id' of '42' was not found."
        )

    @pytest.mark.parametrize(
        ("resource", "property_name", "property_value", "parameter"),
        [
            ("", "id", "42", "resource"),
            ("User", "  ", "42", "property_name"),
            ("User", "id", "\t", "property_value"),
        ],
    )
    def test_resource_not_found_rejects_blank(
        self,
        messages: ProblemMessages,
        resource: str,
        property_name: str,
        property_value: str,
        parameter: str,
    ) -> None:
        """A blank resource, property name or value raises InvalidParameterError."""
        with pytest.raises(InvalidParameterError, match="cannot be empty") as info:
            messages.resource_not_found("en", resource, property_name, property_value)
        assert info.value.parameter == parameter
        assert isinstance(info.value, ValueError)

    @pytest.mark.parametrize("count", [0, -1, True, 2.0])
    def test_validation_count_must_be_positive_int(
        self, messages: ProblemMessages, count: object
    ) -> None:
        """Zero, negative and non-integer counts raise InvalidParameterError."""
        with pytest.raises(InvalidParameterError, match="positive integer"):
            messages.validation_errors("en", count)  # type: ignore[arg-type]  # intentionally invalid

    def test_validation_count_positive(self, messages: ProblemMessages) -> None:
        """A positive count resolves."""
        assert messages.validation_errors("en", 3) == (
            "Unfortunately, '3' validation errors have occurred."
        )

    def test_bad_request_uppercases_method(self, messages: ProblemMessages) -> None:
        """The method is upper-cased in the detail."""
        assert messages.bad_request("en", "post", "/users") == (
            "Unfortunately, 'POST' '/users' request is invalid."
        )

    @pytest.mark.parametrize(
        "call",
        [
            lambda m: m.unauthorized("en", ""),
            lambda m: m.resource_create_failed("en", " "),
            lambda m: m.resource_update_failed("en", ""),
            lambda m: m.resource_patch_failed("en", ""),
            lambda m: m.resource_delete_failed("en", ""),
            lambda m: m.task_cancelled("en", ""),
            lambda m: m.resource_already_exists("en", "User", "", "x"),
            lambda m: m.bad_request("en", "", "/users"),
        ],
    )
    def test_required_strings_rejected_when_blank(
        self, messages: ProblemMessages, call: object
    ) -> None:
        """Every required string parameter is checked."""
        with pytest.raises(InvalidParameterError):
            call(messages)  # type: ignore[operator]  # parametrized callable

    def test_locale_is_per_call(self, bundled_translator: CatalogTranslator) -> None:
        """Interleaved calls with different locales do not affect each other."""
        messages = ProblemMessages(bundled_translator)
        german = messages.forbidden_title("de")
        french = messages.forbidden_title("fr")
        assert german == "Zugriff verweigert!"
        assert french != german
        assert messages.forbidden_title("de") == german
