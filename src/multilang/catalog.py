"""Translation catalog with locale overlays and plural forms.

A catalog resolves one key of one language (optionally narrowed to a
locale) to a final string. Dictionary values are either plain strings or
plural objects:

    {
        "SITE_NAME": "BS Custom",
        "ITEM_COUNT": {
            "singular": "Count items",
            "one": "##count## item",
            "other": "##count## items"
        }
    }

Example:
    catalog = TranslationCatalog("en", base_directory=Path("translations"))
    catalog.translate("SITE_NAME")                           # "BS Custom"
    catalog.translate("ITEM_COUNT", {"count": "5"}, 5)       # "5 items"
    catalog.translate("ITEM_COUNT")                          # "Count items"
    catalog.translate("NOPE")                                # "NOPE"

Merged dictionaries are cached in a CatalogCache shared by every catalog
built with it, until the cache is cleared.
"""

from __future__ import annotations

import logging
import re
import threading
from dataclasses import dataclass, field
from itertools import islice
from pathlib import Path
from typing import Any, Mapping, Union

from markupsafe import escape

from multilang.limits import MAX_ARGS, MAX_PLACEHOLDER_ITER
from multilang.loader import DictionaryLoader
from multilang.plurals import PluralRules, get_plural_rules


logger = logging.getLogger(__name__)


# Literal form names a directive or caller may request directly
FORM_NAMES = ("singular", "zero", "one", "two", "few", "many", "other")

_UNRESOLVED_PLACEHOLDER = re.compile(r"##[A-Za-z0-9_]+##")
_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


# =============================================================================
# Translation values
# =============================================================================


@dataclass(frozen=True)
class PlainValue:
    """A translation that is a single string."""

    text: str


@dataclass(frozen=True)
class PluralValue:
    """A translation with per-category forms.

    Attributes:
        forms: Subset of FORM_NAMES mapped to their strings.
    """

    forms: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class InvalidValue:
    """Anything else found in a dictionary. Resolves to the key."""

    raw: Any


TranslationValue = Union[PlainValue, PluralValue, InvalidValue]


def classify_value(raw: Any) -> TranslationValue:
    """Convert a decoded JSON value to a TranslationValue."""
    if isinstance(raw, str):
        return PlainValue(raw)
    if isinstance(raw, dict):
        return PluralValue(dict(raw))
    return InvalidValue(raw)


def coerce_count(value: Any) -> int:
    """Convert a count to int, reading leading digits of strings.

    Strings without leading digits become 0.
    """
    if isinstance(value, int):
        return int(value)
    if isinstance(value, float):
        return int(value)
    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else 0


def replace_placeholders(text: str, args: Mapping[str, Any] | None) -> str:
    """Substitute ``##name##`` tokens and strip any left unresolved."""
    if not args and "##" not in text:
        return text

    if args:
        for name, value in islice(args.items(), MAX_ARGS):
            text = text.replace(f"##{name}##", str(value))

    iterations = 0
    while iterations < MAX_PLACEHOLDER_ITER and "##" in text:
        text, replaced = _UNRESOLVED_PLACEHOLDER.subn("", text, count=1)
        iterations += 1
        if replaced == 0:
            break

    return text


# =============================================================================
# Cache
# =============================================================================


CacheKey = tuple[str, str, Union[str, None]]


class CatalogCache:
    """Process-wide store of merged dictionaries.

    Reads take no lock. A miss loads from disk outside the lock and then
    inserts with setdefault, so concurrent misses agree on one entry.
    clear() swaps in a fresh mapping, so readers see either the old
    entries or none of them. A load that straddles a clear() is returned
    to its caller but not cached.
    """

    def __init__(self, loader: DictionaryLoader | None = None) -> None:
        self._loader = loader or DictionaryLoader()
        self._entries: dict[CacheKey, dict[str, Any]] = {}
        self._generation = 0
        self._lock = threading.Lock()

    @staticmethod
    def make_key(base_directory: Path | str, language_code: str, locale: str | None) -> CacheKey:
        return (str(base_directory), language_code, locale or None)

    def get(
        self,
        base_directory: Path | str,
        language_code: str,
        locale: str | None = None,
    ) -> dict[str, Any]:
        """Get a merged dictionary, loading it on a miss."""
        key = self.make_key(base_directory, language_code, locale)

        data = self._entries.get(key)
        if data is not None:
            return data

        logger.debug(f"Catalog cache miss for {key}")
        generation = self._generation
        data = self._loader.load(Path(base_directory), language_code, locale)

        with self._lock:
            if generation != self._generation:
                logger.debug(f"Cache cleared while loading {key}, not caching")
                return data
            return self._entries.setdefault(key, data)

    def clear(self) -> None:
        """Drop every cached dictionary."""
        with self._lock:
            self._entries = {}
            self._generation += 1
        logger.debug("Catalog cache cleared")

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries


_default_cache = CatalogCache()


def get_default_cache() -> CatalogCache:
    """Get the module-level catalog cache."""
    return _default_cache


def clear_cache() -> None:
    """Clear the module-level catalog cache."""
    _default_cache.clear()


# =============================================================================
# Catalog
# =============================================================================


class TranslationCatalog:
    """Resolves keys of one language and optional locale.

    Args:
        language_code: Two-letter language code.
        locale: Optional locale overlaid on the language dictionary.
        base_directory: Directory holding the dictionary files.
        cache: Cache for merged dictionaries. Defaults to the module cache.
        rules: Plural rules for numeric forms. Defaults to the global rules.
    """

    MAX_ARGS = MAX_ARGS
    MAX_PLACEHOLDER_ITER = MAX_PLACEHOLDER_ITER

    def __init__(
        self,
        language_code: str,
        locale: str | None = None,
        base_directory: Path | str = Path("translations"),
        cache: CatalogCache | None = None,
        rules: PluralRules | None = None,
    ) -> None:
        self._language_code = language_code or ""
        self._locale = locale or None
        self._base_directory = Path(base_directory)
        self._cache = cache if cache is not None else _default_cache
        self._rules = rules if rules is not None else get_plural_rules()

    @property
    def language_code(self) -> str:
        return self._language_code

    @property
    def locale(self) -> str | None:
        return self._locale

    @property
    def base_directory(self) -> Path:
        return self._base_directory

    @property
    def translations(self) -> dict[str, Any]:
        """The merged dictionary, loaded on first access."""
        return self._cache.get(self._base_directory, self._language_code, self._locale)

    def translate(
        self,
        key: str,
        args: Mapping[str, Any] | None = None,
        form_or_count: str | int | None = None,
    ) -> str:
        """Resolve a key and HTML-escape the result."""
        return str(escape(self.translate_raw(key, args, form_or_count)))

    def translate_raw(
        self,
        key: str,
        args: Mapping[str, Any] | None = None,
        form_or_count: str | int | None = None,
    ) -> str:
        """Resolve a key without escaping.

        Args:
            key: Translation key.
            args: Values for ``##name##`` placeholders.
            form_or_count: A literal form name ("one", "few", "singular", ...)
                or a count resolved through the plural rules.

        Returns:
            The translated string, or the key itself if it is unknown or
            its value is malformed.
        """
        raw = self.translations.get(key)
        if raw is None:
            return key

        value = classify_value(raw)

        if isinstance(value, PlainValue):
            text: Any = value.text
        elif isinstance(value, PluralValue):
            text = self._select_form(key, value, form_or_count)
        else:
            text = None

        if not isinstance(text, str):
            return key

        return replace_placeholders(text, args)

    def _select_form(
        self,
        key: str,
        value: PluralValue,
        form_or_count: str | int | None,
    ) -> Any:
        forms = value.forms
        singular_fallback = forms["singular"] if "singular" in forms else key

        if form_or_count is None:
            return singular_fallback

        # A literal form never falls through to "other"
        if isinstance(form_or_count, str) and form_or_count in FORM_NAMES:
            return forms[form_or_count] if form_or_count in forms else singular_fallback

        category = self._rules.resolve(self._language_code, coerce_count(form_or_count))
        if category.value in forms:
            return forms[category.value]
        if "other" in forms:
            return forms["other"]
        return singular_fallback

    def has(self, key: str) -> bool:
        """Check whether a key has a value in the merged dictionary."""
        return self.translations.get(key) is not None

    def get_all_translations(self) -> dict[str, Any]:
        """Get a copy of the merged dictionary."""
        return dict(self.translations)

    def clear_cache(self) -> None:
        """Clear the cache this catalog reads from."""
        self._cache.clear()

    def __repr__(self) -> str:
        return (
            f"TranslationCatalog(language_code={self._language_code!r}, "
            f"locale={self._locale!r}, base_directory={str(self._base_directory)!r})"
        )
