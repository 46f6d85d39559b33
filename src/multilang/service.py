"""Translation service facade.

TranslationService ties the registry, plural rules and catalog cache
together behind the calls that templates and content filters make:

    service = TranslationService(MultilangConfig(translations_dir="translations"))

    service.resolve("translate('SITE_NAME')", "en")
    service.resolve_block_content(page_html, "sr", locale="sr_RS")
    service.translate("ITEM_COUNT", {"count": 3}, 3, iso2="ru")

When no language is given, the registry's default language is used,
then ``config.default_language``.
"""

from __future__ import annotations

from typing import Any, Mapping

from multilang.catalog import CatalogCache, TranslationCatalog
from multilang.config import MultilangConfig
from multilang.directives import DirectiveMatch, DirectiveResolver
from multilang.loader import DictionaryLoader
from multilang.plurals import PluralRules
from multilang.registry import LanguageRegistry


class TranslationService:
    """Entry point for directive resolution and catalog access.

    Args:
        config: Settings. Defaults to MultilangConfig().
        registry: Language registry. Built from the config if omitted.
        rules: Plural rules. A fresh instance if omitted.
        cache: Catalog cache. A fresh instance if omitted.
    """

    def __init__(
        self,
        config: MultilangConfig | None = None,
        registry: LanguageRegistry | None = None,
        rules: PluralRules | None = None,
        cache: CatalogCache | None = None,
    ) -> None:
        self._config = config or MultilangConfig()
        self._registry = registry or LanguageRegistry(config=self._config)
        self._rules = rules if rules is not None else PluralRules()
        self._loader = DictionaryLoader()
        self._cache = cache if cache is not None else CatalogCache(self._loader)

    @property
    def config(self) -> MultilangConfig:
        return self._config

    @property
    def registry(self) -> LanguageRegistry:
        return self._registry

    @property
    def rules(self) -> PluralRules:
        return self._rules

    @property
    def cache(self) -> CatalogCache:
        return self._cache

    # -------------------------------------------------------------------------
    # Catalogs
    # -------------------------------------------------------------------------

    def default_language(self) -> str:
        """Get the registry default, falling back to the configured one."""
        default = self._registry.get_default()
        if default is not None and default.iso2:
            return default.iso2
        return self._config.default_language

    def catalog(self, iso2: str = "", locale: str | None = None) -> TranslationCatalog:
        """Build a catalog for a language, or the default language."""
        return TranslationCatalog(
            iso2 or self.default_language(),
            locale,
            base_directory=self._config.translations_dir,
            cache=self._cache,
            rules=self._rules,
        )

    def resolver(self, iso2: str = "", locale: str | None = None) -> DirectiveResolver:
        """Build a directive resolver for a language."""
        return DirectiveResolver(self.catalog(iso2, locale), self._config.directive_name)

    def clear_cache(self) -> None:
        """Drop cached dictionaries so the next lookup re-reads the files."""
        self._cache.clear()

    # -------------------------------------------------------------------------
    # Directive resolution
    # -------------------------------------------------------------------------

    def _has_marker(self, text: str) -> bool:
        return bool(text) and f"{self._config.directive_name}(" in text

    def resolve(self, text: str, iso2: str = "", locale: str | None = None) -> str:
        """Resolve directives in a short string with escaped output."""
        if not self._has_marker(text):
            return text
        return self.resolver(iso2, locale).resolve(text)

    def resolve_raw(self, text: str, iso2: str = "", locale: str | None = None) -> str:
        """Resolve directives in a short string without escaping."""
        if not self._has_marker(text):
            return text
        return self.resolver(iso2, locale).resolve_raw(text)

    def resolve_block_content(self, html: str, iso2: str = "", locale: str | None = None) -> str:
        """Resolve directives in page or block content, translating each unique one once."""
        if not self._has_marker(html):
            return html
        return self.resolver(iso2, locale).resolve_block_content(html)

    def find_patterns(
        self, text: str, iso2: str = "", locale: str | None = None
    ) -> list[DirectiveMatch]:
        """List directives in text together with their raw resolution."""
        if not self._has_marker(text):
            return []
        return self.resolver(iso2, locale).find_patterns(text)

    # -------------------------------------------------------------------------
    # Direct translation
    # -------------------------------------------------------------------------

    def translate(
        self,
        key: str,
        args: Mapping[str, Any] | None = None,
        form_or_count: str | int | None = None,
        iso2: str = "",
        locale: str | None = None,
    ) -> str:
        return self.catalog(iso2, locale).translate(key, args, form_or_count)

    def translate_raw(
        self,
        key: str,
        args: Mapping[str, Any] | None = None,
        form_or_count: str | int | None = None,
        iso2: str = "",
        locale: str | None = None,
    ) -> str:
        return self.catalog(iso2, locale).translate_raw(key, args, form_or_count)

    def has(self, key: str, iso2: str = "", locale: str | None = None) -> bool:
        return self.catalog(iso2, locale).has(key)

    def get_all_keys(self) -> list[str]:
        """Get every key defined for any registered language."""
        codes = [lang.iso2 for lang in self._registry.get_all()]
        return self._loader.list_keys(self._config.translations_dir, codes)
