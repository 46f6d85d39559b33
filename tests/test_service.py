"""Tests for TranslationService and the module-level helpers."""

from __future__ import annotations

import pytest

import multilang
from multilang.catalog import CatalogCache
from multilang.config import MultilangConfig
from multilang.plurals import PluralCategory, PluralRules
from multilang.service import TranslationService

from tests.helpers import write_json


class TestResolve:
    """Test directive resolution through the service."""

    def test_site_name(self, service):
        assert service.resolve("translate('SITE_NAME')", "en") == "BS Custom"

    def test_item_count(self, service):
        assert service.resolve("translate('ITEM_COUNT', ['count' => '1'], 1)", "en") == "1 item"
        assert service.resolve("translate('ITEM_COUNT', ['count' => '5'], 5)", "en") == "5 items"
        assert service.resolve("translate('ITEM_COUNT')", "en") == "Count items"

    def test_unknown_key(self, service):
        assert service.resolve("translate('NOPE')", "en") == "NOPE"

    def test_no_marker(self, service):
        text = "Nothing here"
        assert service.resolve(text, "en") is text
        assert service.resolve_raw(text, "en") is text
        assert service.resolve_block_content(text, "en") is text
        assert service.find_patterns(text, "en") == []

    def test_raw(self, service):
        assert service.resolve_raw("translate('HTML_KEY')", "en") == '<b>Bold & "Quoted"</b>'
        assert "&lt;b&gt;" in service.resolve("translate('HTML_KEY')", "en")

    def test_language_selection(self, service):
        assert service.resolve("translate('ITEM_COUNT')", "sr") == "Broj jedinke"

    def test_locale_overlay(self, service, translations_dir):
        write_json(translations_dir / "en_GB.json", {"SITE_NAME": "BS Custom Ltd"})

        assert service.resolve("translate('SITE_NAME')", "en", "en_GB") == "BS Custom Ltd"
        assert service.resolve("translate('SITE_NAME')", "en") == "BS Custom"

    def test_long_text_keeps_tail(self, service):
        """Test text past max_text_length is resolved whole."""
        text = "translate('SITE_NAME') " + "x" * 3000 + " END translate('SITE_NAME')"

        assert service.resolve(text, "en") == "BS Custom " + "x" * 3000 + " END BS Custom"
        assert service.resolve_raw(text, "en").endswith(" END BS Custom")

    def test_block_content_not_truncated(self, service):
        html = "<p>translate('SITE_NAME')</p>" * 100
        assert service.resolve_block_content(html, "en") == "<p>BS Custom</p>" * 100

    def test_block_content_250_repeats(self, service):
        """Test 250 repeats equal independent resolution."""
        unit = "<li>translate('ITEM_COUNT', {\"count\": \"4\"}, 4)</li>"
        result = service.resolve_block_content(unit * 250, "en")

        assert result == service.resolve(unit, "en") * 250
        assert result == "<li>4 items</li>" * 250

    def test_find_patterns(self, service):
        (match,) = service.find_patterns("A translate('HTML_KEY') B", "en")

        assert match.key == "HTML_KEY"
        assert match.resolved == '<b>Bold & "Quoted"</b>'

    def test_custom_directive_name(self, translations_dir, registry):
        config = MultilangConfig(
            translations_dir=translations_dir, lock_strategy="none", directive_name="ct_translate"
        )
        service = TranslationService(config, registry=registry)

        assert service.resolve("ct_translate('SITE_NAME')", "en") == "BS Custom"
        assert service.resolve("translate('SITE_NAME')", "en") == "translate('SITE_NAME')"


class TestDefaultLanguage:
    """Test language fallback when none is given."""

    def test_config_default(self, service):
        assert service.default_language() == "en"
        assert service.resolve("translate('ITEM_COUNT')") == "Count items"

    def test_registry_default_wins(self, service):
        service.registry.add({"iso2": "sr", "native_name": "Srpski"})
        service.registry.set_default("sr")

        assert service.default_language() == "sr"
        assert service.resolve("translate('ITEM_COUNT')") == "Broj jedinke"
        assert service.translate("ITEM_COUNT") == "Broj jedinke"


class TestDirectTranslation:
    """Test translate, translate_raw and has."""

    def test_translate(self, service):
        assert service.translate("GREETING", {"name": "<Ana>"}, iso2="en") == "Hello, &lt;Ana&gt;!"
        assert service.translate_raw("GREETING", {"name": "<Ana>"}, iso2="en") == "Hello, <Ana>!"

    def test_has(self, service):
        assert service.has("SITE_NAME", "en")
        assert not service.has("NOPE", "en")

    def test_catalog(self, service, translations_dir):
        catalog = service.catalog("sr", "sr_RS")

        assert catalog.language_code == "sr"
        assert catalog.locale == "sr_RS"
        assert catalog.base_directory == translations_dir

    def test_clear_cache(self, service, translations_dir):
        assert service.translate("SITE_NAME", iso2="en") == "BS Custom"
        write_json(translations_dir / "en.json", {"SITE_NAME": "Renamed"})
        assert service.translate("SITE_NAME", iso2="en") == "BS Custom"

        service.clear_cache()

        assert service.translate("SITE_NAME", iso2="en") == "Renamed"

    def test_rules_are_injected(self, config, registry):
        rules = PluralRules()
        rules.register_rule("en", lambda n: PluralCategory.OTHER)
        service = TranslationService(config, registry=registry, rules=rules)

        assert service.rules is rules
        assert service.translate("ITEM_COUNT", {"count": 1}, 1, iso2="en") == "1 items"

    def test_services_do_not_share_cache(self, config, registry, translations_dir):
        first = TranslationService(config, registry=registry, cache=CatalogCache())
        second = TranslationService(config, registry=registry, cache=CatalogCache())
        first.translate("SITE_NAME", iso2="en")

        write_json(translations_dir / "en.json", {"SITE_NAME": "Changed"})

        assert first.translate("SITE_NAME", iso2="en") == "BS Custom"
        assert second.translate("SITE_NAME", iso2="en") == "Changed"

    def test_get_all_keys(self, service):
        service.registry.add({"iso2": "en", "native_name": "English"})
        service.registry.add({"iso2": "sr", "native_name": "Srpski"})

        keys = service.get_all_keys()

        assert keys == sorted(keys)
        assert {"SITE_NAME", "ITEM_COUNT", "GREETING"} <= set(keys)

    def test_get_all_keys_empty_registry(self, service):
        assert service.get_all_keys() == []


class TestModuleHelpers:
    """Test the module-level convenience functions."""

    @pytest.fixture(autouse=True)
    def install(self, service):
        multilang.set_default_service(service)

    def test_helpers(self):
        assert multilang.resolve("translate('SITE_NAME')", "en") == "BS Custom"
        assert multilang.resolve_raw("translate('HTML_KEY')", "en") == '<b>Bold & "Quoted"</b>'
        assert multilang.resolve_block_content("translate('SITE_NAME')", "en") == "BS Custom"
        assert multilang.translate("ITEM_COUNT", {"count": 5}, 5, iso2="en") == "5 items"
        assert multilang.translate_raw("NOPE", iso2="en") == "NOPE"
        assert multilang.has("SITE_NAME", "en")
        assert [m.key for m in multilang.find_patterns("translate('SITE_NAME')", "en")] == ["SITE_NAME"]

    def test_get_default_service(self, service):
        assert multilang.get_default_service() is service

    def test_clear_cache(self, service, translations_dir):
        multilang.translate("SITE_NAME", iso2="en")
        write_json(translations_dir / "en.json", {"SITE_NAME": "Fresh"})

        multilang.clear_cache()

        assert multilang.translate("SITE_NAME", iso2="en") == "Fresh"

    def test_lazy_default(self):
        multilang.set_default_service(None)

        created = multilang.get_default_service()

        assert isinstance(created, TranslationService)
        assert created.rules is multilang.get_plural_rules()
        assert multilang.get_default_service() is created
