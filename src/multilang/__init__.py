"""Inline translation directives for text and HTML content.

multilang resolves ``translate('KEY', args, form_or_count)`` directives
embedded in content against per-language JSON dictionaries, with locale
overlays, CLDR plural rules and ``##name##`` placeholders.

Example:
    >>> import multilang
    >>> multilang.set_default_service(
    ...     multilang.TranslationService(
    ...         multilang.MultilangConfig(translations_dir="translations")
    ...     )
    ... )
    >>> multilang.resolve("Welcome to translate('SITE_NAME')", "en")
    'Welcome to BS Custom'
    >>> multilang.translate("ITEM_COUNT", {"count": 5}, 5, iso2="en")
    '5 items'

Components:
    - PluralRules: CLDR plural categories with custom overrides
    - LanguageRegistry: Supported languages persisted in a JSON file
    - TranslationCatalog: Dictionary lookup, plural forms, placeholders
    - DirectiveResolver: Finds and replaces directives in content
    - TranslationService: Facade tying the above together
"""

from __future__ import annotations

import threading
from typing import Any, Mapping

from multilang.catalog import (
    CatalogCache,
    InvalidValue,
    PlainValue,
    PluralValue,
    TranslationCatalog,
    TranslationValue,
    classify_value,
    get_default_cache,
)
from multilang.config import MultilangConfig
from multilang.directives import (
    Directive,
    DirectiveMatch,
    DirectiveResolver,
    parse_inline_args,
)
from multilang.exceptions import ConfigError, LockTimeout, MultilangError
from multilang.limits import (
    MAX_ARGS,
    MAX_CUSTOM_RULES,
    MAX_KEYS_PER_LANGUAGE,
    MAX_LANGUAGES,
    MAX_LOCALES_PER,
    MAX_PATTERN_MATCHES,
    MAX_PLACEHOLDER_ITER,
    MAX_TEXT_LENGTH,
)
from multilang.loader import DictionaryLoader
from multilang.plurals import (
    PluralCategory,
    PluralFamily,
    PluralRules,
    get_plural_category,
    get_plural_rules,
)
from multilang.registry import Language, LanguageRegistry
from multilang.service import TranslationService

__version__ = "0.1.0"


_default_service: TranslationService | None = None
_service_lock = threading.Lock()


def get_default_service() -> TranslationService:
    """Get the module-level service, creating it on first use.

    The lazily created service uses the default configuration, the global
    plural rules and the module-level catalog cache.
    """
    global _default_service
    if _default_service is None:
        with _service_lock:
            if _default_service is None:
                _default_service = TranslationService(
                    rules=get_plural_rules(),
                    cache=get_default_cache(),
                )
    return _default_service


def set_default_service(service: TranslationService | None) -> None:
    """Replace the module-level service. None resets it."""
    global _default_service
    with _service_lock:
        _default_service = service


def resolve(text: str, iso2: str = "", locale: str | None = None) -> str:
    """Resolve directives in a short string (HTML-escaped)."""
    return get_default_service().resolve(text, iso2, locale)


def resolve_raw(text: str, iso2: str = "", locale: str | None = None) -> str:
    """Resolve directives in a short string (not escaped)."""
    return get_default_service().resolve_raw(text, iso2, locale)


def resolve_block_content(html: str, iso2: str = "", locale: str | None = None) -> str:
    """Resolve directives in block or page content (HTML-escaped)."""
    return get_default_service().resolve_block_content(html, iso2, locale)


def find_patterns(text: str, iso2: str = "", locale: str | None = None) -> list[DirectiveMatch]:
    """List directives in text with their raw resolution."""
    return get_default_service().find_patterns(text, iso2, locale)


def translate(
    key: str,
    args: Mapping[str, Any] | None = None,
    form_or_count: str | int | None = None,
    iso2: str = "",
    locale: str | None = None,
) -> str:
    """Translate a key (HTML-escaped)."""
    return get_default_service().translate(key, args, form_or_count, iso2, locale)


def translate_raw(
    key: str,
    args: Mapping[str, Any] | None = None,
    form_or_count: str | int | None = None,
    iso2: str = "",
    locale: str | None = None,
) -> str:
    """Translate a key (not escaped)."""
    return get_default_service().translate_raw(key, args, form_or_count, iso2, locale)


def has(key: str, iso2: str = "", locale: str | None = None) -> bool:
    """Check whether a key is defined."""
    return get_default_service().has(key, iso2, locale)


def clear_cache() -> None:
    """Clear cached dictionaries of the default service."""
    get_default_service().clear_cache()


__all__ = [
    # Service
    "TranslationService",
    "get_default_service",
    "set_default_service",
    "resolve",
    "resolve_raw",
    "resolve_block_content",
    "find_patterns",
    "translate",
    "translate_raw",
    "has",
    "clear_cache",
    # Plurals
    "PluralCategory",
    "PluralFamily",
    "PluralRules",
    "get_plural_rules",
    "get_plural_category",
    # Registry
    "Language",
    "LanguageRegistry",
    # Catalog
    "CatalogCache",
    "DictionaryLoader",
    "TranslationCatalog",
    "TranslationValue",
    "PlainValue",
    "PluralValue",
    "InvalidValue",
    "classify_value",
    # Directives
    "Directive",
    "DirectiveMatch",
    "DirectiveResolver",
    "parse_inline_args",
    # Config and errors
    "MultilangConfig",
    "MultilangError",
    "ConfigError",
    "LockTimeout",
    # Limits
    "MAX_ARGS",
    "MAX_PATTERN_MATCHES",
    "MAX_PLACEHOLDER_ITER",
    "MAX_CUSTOM_RULES",
    "MAX_LANGUAGES",
    "MAX_LOCALES_PER",
    "MAX_KEYS_PER_LANGUAGE",
    "MAX_TEXT_LENGTH",
]
