"""CLDR plural rules for directive resolution.

This module maps a language code and an integer count to one of the CLDR
plural categories. Languages are grouped into rule families; codes that
are not mapped fall back to the germanic family. Custom rules registered
at runtime take priority over the builtin families.

Example:
    rules = PluralRules()
    rules.resolve("ar", 3)    # PluralCategory.FEW
    rules.resolve("pl", 5)    # PluralCategory.MANY
    rules.resolve("xx", 1)    # PluralCategory.ONE (germanic fallback)

    rules.register_rule("en", lambda n: "other")
    rules.resolve("en", 1)    # PluralCategory.OTHER
    rules.reset_custom_rules()
"""

from __future__ import annotations

import logging
import threading
from enum import Enum
from typing import Callable

from multilang.limits import MAX_CUSTOM_RULES


logger = logging.getLogger(__name__)


class PluralCategory(str, Enum):
    """CLDR plural categories."""

    ZERO = "zero"
    ONE = "one"
    TWO = "two"
    FEW = "few"
    MANY = "many"
    OTHER = "other"

    @classmethod
    def coerce(cls, value: "PluralCategory | str") -> "PluralCategory":
        """Convert a category name to a category, defaulting to OTHER."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.OTHER


class PluralFamily(str, Enum):
    """Builtin rule families."""

    GERMANIC = "germanic"
    FRENCH = "french"
    EAST_SLAVIC = "east_slavic"
    WEST_SLAVIC = "west_slavic"
    POLISH = "polish"
    ARABIC = "arabic"
    NO_PLURAL = "no_plural"


# Type for custom plural rule callables
PluralRuleFunc = Callable[[int], "PluralCategory | str"]


FAMILY_MAP: dict[str, PluralFamily] = {
    # Germanic (one / other)
    "en": PluralFamily.GERMANIC,
    "de": PluralFamily.GERMANIC,
    "nl": PluralFamily.GERMANIC,
    "sv": PluralFamily.GERMANIC,
    "nb": PluralFamily.GERMANIC,
    "nn": PluralFamily.GERMANIC,
    "da": PluralFamily.GERMANIC,
    "no": PluralFamily.GERMANIC,
    "it": PluralFamily.GERMANIC,
    "es": PluralFamily.GERMANIC,
    "pt": PluralFamily.GERMANIC,
    "el": PluralFamily.GERMANIC,
    "bg": PluralFamily.GERMANIC,
    "he": PluralFamily.GERMANIC,
    "hu": PluralFamily.GERMANIC,
    "fi": PluralFamily.GERMANIC,
    "et": PluralFamily.GERMANIC,
    "ca": PluralFamily.GERMANIC,
    "gl": PluralFamily.GERMANIC,
    # French (0 and 1 -> one)
    "fr": PluralFamily.FRENCH,
    "hi": PluralFamily.FRENCH,
    "fa": PluralFamily.FRENCH,
    # East Slavic (one / few / other)
    "sr": PluralFamily.EAST_SLAVIC,
    "ru": PluralFamily.EAST_SLAVIC,
    "uk": PluralFamily.EAST_SLAVIC,
    "be": PluralFamily.EAST_SLAVIC,
    "hr": PluralFamily.EAST_SLAVIC,
    "bs": PluralFamily.EAST_SLAVIC,
    # West Slavic (1 / 2-4 / other)
    "cs": PluralFamily.WEST_SLAVIC,
    "sk": PluralFamily.WEST_SLAVIC,
    # Polish (one / few / many)
    "pl": PluralFamily.POLISH,
    # Arabic (all six categories)
    "ar": PluralFamily.ARABIC,
    # No plural distinction
    "ja": PluralFamily.NO_PLURAL,
    "zh": PluralFamily.NO_PLURAL,
    "ko": PluralFamily.NO_PLURAL,
    "tr": PluralFamily.NO_PLURAL,
    "vi": PluralFamily.NO_PLURAL,
    "th": PluralFamily.NO_PLURAL,
    "id": PluralFamily.NO_PLURAL,
    "ms": PluralFamily.NO_PLURAL,
}


def _germanic(n: int) -> PluralCategory:
    return PluralCategory.ONE if n == 1 else PluralCategory.OTHER


def _french(n: int) -> PluralCategory:
    return PluralCategory.ONE if n <= 1 else PluralCategory.OTHER


def _east_slavic(n: int) -> PluralCategory:
    """Serbian, Russian, Ukrainian, Belarusian, Croatian, Bosnian.

    mod10 == 1 and mod100 != 11       -> one
    mod10 in 2..4 and mod100 not 12..14 -> few
    everything else                    -> other
    """
    mod10 = n % 10
    mod100 = n % 100

    if mod10 == 1 and mod100 != 11:
        return PluralCategory.ONE
    if 2 <= mod10 <= 4 and (mod100 < 12 or mod100 > 14):
        return PluralCategory.FEW
    return PluralCategory.OTHER


def _west_slavic(n: int) -> PluralCategory:
    if n == 1:
        return PluralCategory.ONE
    if 2 <= n <= 4:
        return PluralCategory.FEW
    return PluralCategory.OTHER


def _polish(n: int) -> PluralCategory:
    if n == 1:
        return PluralCategory.ONE

    mod10 = n % 10
    mod100 = n % 100

    if 2 <= mod10 <= 4 and (mod100 < 12 or mod100 > 14):
        return PluralCategory.FEW
    return PluralCategory.MANY


def _arabic(n: int) -> PluralCategory:
    """Arabic: 0 zero, 1 one, 2 two, 3-10 few, 11-99 many, 100+ other (by mod100)."""
    if n == 0:
        return PluralCategory.ZERO
    if n == 1:
        return PluralCategory.ONE
    if n == 2:
        return PluralCategory.TWO

    mod100 = n % 100

    if 3 <= mod100 <= 10:
        return PluralCategory.FEW
    if 11 <= mod100 <= 99:
        return PluralCategory.MANY
    return PluralCategory.OTHER


def _no_plural(n: int) -> PluralCategory:
    return PluralCategory.OTHER


FAMILY_RULES: dict[PluralFamily, Callable[[int], PluralCategory]] = {
    PluralFamily.GERMANIC: _germanic,
    PluralFamily.FRENCH: _french,
    PluralFamily.EAST_SLAVIC: _east_slavic,
    PluralFamily.WEST_SLAVIC: _west_slavic,
    PluralFamily.POLISH: _polish,
    PluralFamily.ARABIC: _arabic,
    PluralFamily.NO_PLURAL: _no_plural,
}


class PluralRules:
    """CLDR plural rules provider with a bounded custom-rule registry.

    Each instance owns its own override map, so independent engines do
    not share custom rules. Registration and reset are serialized with a
    lock; resolution only reads the current map reference.

    Example:
        rules = PluralRules()
        category = rules.resolve("ru", 22)  # PluralCategory.FEW
    """

    MAX_CUSTOM_RULES = MAX_CUSTOM_RULES

    def __init__(self, max_custom_rules: int = MAX_CUSTOM_RULES) -> None:
        self._max_custom_rules = max_custom_rules
        self._custom_rules: dict[str, PluralRuleFunc] = {}
        self._lock = threading.Lock()

    def resolve(self, language_code: str, count: int) -> PluralCategory:
        """Get the plural category for a count.

        Args:
            language_code: Two-letter language code.
            count: Integer count. Builtin families use its absolute value;
                custom rules receive it unchanged.

        Returns:
            Plural category.
        """
        if not language_code or not language_code.strip():
            return PluralCategory.OTHER

        rule = self._custom_rules.get(language_code)
        if rule is not None:
            result = rule(int(count))
            category = PluralCategory.coerce(result)
            if category is PluralCategory.OTHER and result not in (PluralCategory.OTHER, "other"):
                logger.warning(
                    f"Custom plural rule for '{language_code}' returned unknown category {result!r}"
                )
            return category

        return FAMILY_RULES[self.family_for(language_code)](abs(int(count)))

    def family_for(self, language_code: str) -> PluralFamily:
        """Get the builtin family used for a language code."""
        return FAMILY_MAP.get(language_code, PluralFamily.GERMANIC)

    def register_rule(self, language_code: str, rule: PluralRuleFunc) -> bool:
        """Register a custom plural rule for a language.

        Args:
            language_code: Two-letter language code.
            rule: Callable taking the signed count and returning a category.

        Returns:
            False if the registry is full and the code is not already
            registered, True otherwise.
        """
        with self._lock:
            if (
                len(self._custom_rules) >= self._max_custom_rules
                and language_code not in self._custom_rules
            ):
                logger.info(
                    f"Custom plural rule for '{language_code}' rejected: "
                    f"limit of {self._max_custom_rules} reached"
                )
                return False

            updated = dict(self._custom_rules)
            updated[language_code] = rule
            self._custom_rules = updated
            return True

    def reset_custom_rules(self) -> None:
        """Drop all custom rules; builtin families apply again."""
        with self._lock:
            self._custom_rules = {}

    def has_custom_rule(self, language_code: str) -> bool:
        """Check whether a custom rule is registered for a code."""
        return language_code in self._custom_rules

    @property
    def custom_rule_count(self) -> int:
        """Number of registered custom rules."""
        return len(self._custom_rules)

    def get_supported_languages(self) -> list[str]:
        """Get language codes with an explicit family or custom rule."""
        return sorted(set(FAMILY_MAP) | set(self._custom_rules))


# Global instance
_rules = PluralRules()


def get_plural_rules() -> PluralRules:
    """Get the global plural rules instance."""
    return _rules


def get_plural_category(language_code: str, count: int) -> PluralCategory:
    """Get the plural category using the global rules.

    Example:
        get_plural_category("en", 1)  # ONE
        get_plural_category("pl", 5)  # MANY
    """
    return _rules.resolve(language_code, count)
