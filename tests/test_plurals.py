"""Tests for CLDR plural rules."""

from __future__ import annotations

import threading

import pytest

from multilang.limits import MAX_CUSTOM_RULES
from multilang.plurals import (
    FAMILY_MAP,
    PluralCategory,
    PluralFamily,
    PluralRules,
    get_plural_category,
    get_plural_rules,
)


class TestPluralCategory:
    """Test PluralCategory enum."""

    def test_values(self):
        """Test the six CLDR categories."""
        assert [c.value for c in PluralCategory] == ["zero", "one", "two", "few", "many", "other"]

    def test_coerce_string(self):
        """Test coercing category names."""
        assert PluralCategory.coerce("few") is PluralCategory.FEW
        assert PluralCategory.coerce("MANY") is PluralCategory.MANY

    def test_coerce_unknown_is_other(self):
        """Test unknown names become OTHER."""
        assert PluralCategory.coerce("plenty") is PluralCategory.OTHER


class TestBuiltinFamilies:
    """Test the builtin rule families."""

    @pytest.mark.parametrize(
        "count,expected",
        [(0, "other"), (1, "one"), (2, "other"), (11, "other"), (21, "other"), (-1, "one")],
    )
    def test_germanic(self, rules, count, expected):
        """Test English uses one/other."""
        assert rules.resolve("en", count) == expected

    @pytest.mark.parametrize("count,expected", [(0, "one"), (1, "one"), (2, "other"), (100, "other")])
    def test_french(self, rules, count, expected):
        """Test French treats 0 and 1 as one."""
        assert rules.resolve("fr", count) == expected

    @pytest.mark.parametrize(
        "count,expected",
        [
            (1, "one"),
            (2, "few"),
            (4, "few"),
            (5, "other"),
            (11, "other"),
            (12, "other"),
            (14, "other"),
            (21, "one"),
            (22, "few"),
            (111, "other"),
            (0, "other"),
        ],
    )
    def test_east_slavic(self, rules, count, expected):
        """Test Serbian and Russian mod10/mod100 rules."""
        assert rules.resolve("sr", count) == expected
        assert rules.resolve("ru", count) == expected

    @pytest.mark.parametrize(
        "count,expected",
        [(1, "one"), (2, "few"), (4, "few"), (5, "other"), (22, "other"), (0, "other")],
    )
    def test_west_slavic(self, rules, count, expected):
        """Test Czech uses the literal 2-4 range."""
        assert rules.resolve("cs", count) == expected

    @pytest.mark.parametrize(
        "count,expected",
        [(1, "one"), (2, "few"), (5, "many"), (12, "many"), (22, "few"), (0, "many"), (21, "many")],
    )
    def test_polish(self, rules, count, expected):
        """Test Polish one/few/many."""
        assert rules.resolve("pl", count) == expected

    @pytest.mark.parametrize(
        "count,expected",
        [
            (0, "zero"),
            (1, "one"),
            (2, "two"),
            (3, "few"),
            (10, "few"),
            (11, "many"),
            (50, "many"),
            (99, "many"),
            (100, "other"),
            (102, "other"),
            (103, "few"),
            (200, "other"),
        ],
    )
    def test_arabic(self, rules, count, expected):
        """Test Arabic uses all six categories."""
        assert rules.resolve("ar", count) == expected

    @pytest.mark.parametrize("code", ["ja", "zh", "ko", "tr", "vi", "th", "id", "ms"])
    def test_no_plural(self, rules, code):
        """Test languages without plural distinction."""
        for count in (0, 1, 2, 5, 100):
            assert rules.resolve(code, count) is PluralCategory.OTHER

    def test_negative_counts_use_absolute_value(self, rules):
        """Test negative counts."""
        assert rules.resolve("ar", -3) == "few"
        assert rules.resolve("pl", -2) == "few"


class TestFallbacks:
    """Test unmapped and blank language codes."""

    @pytest.mark.parametrize("code", ["xx", "eo", "qq"])
    def test_unmapped_language_is_germanic(self, rules, code):
        """Test unknown codes behave as germanic."""
        assert code not in FAMILY_MAP
        assert rules.resolve(code, 1) is PluralCategory.ONE
        assert rules.resolve(code, 0) is PluralCategory.OTHER
        assert rules.resolve(code, 2) is PluralCategory.OTHER
        assert rules.family_for(code) is PluralFamily.GERMANIC

    @pytest.mark.parametrize("code", ["", "   "])
    def test_blank_language_is_other(self, rules, code):
        """Test blank codes bypass the germanic fallback."""
        assert rules.resolve(code, 1) is PluralCategory.OTHER


class TestCustomRules:
    """Test custom rule registration."""

    def test_custom_rule_overrides_builtin(self, rules):
        """Test a custom rule replaces the family rule."""
        assert rules.register_rule("en", lambda n: "few")

        assert rules.resolve("en", 1) is PluralCategory.FEW
        assert rules.has_custom_rule("en")

    def test_custom_rule_receives_signed_count(self, rules):
        """Test custom rules receive the count unchanged."""
        seen = []

        def rule(n):
            seen.append(n)
            return PluralCategory.OTHER

        rules.register_rule("xx", rule)
        rules.resolve("xx", -7)

        assert seen == [-7]
        assert rules.resolve("ar", -3) == "few"

    def test_unknown_category_becomes_other(self, rules, caplog):
        """Test an unknown string result is coerced to OTHER."""
        rules.register_rule("en", lambda n: "lots")

        assert rules.resolve("en", 1) is PluralCategory.OTHER
        assert "unknown category" in caplog.text

    def test_reset_restores_builtin(self, rules):
        """Test reset_custom_rules restores builtin behavior exactly."""
        before = [rules.resolve("ru", n) for n in range(30)]
        rules.register_rule("ru", lambda n: "many")
        assert rules.resolve("ru", 1) is PluralCategory.MANY

        rules.reset_custom_rules()

        assert [rules.resolve("ru", n) for n in range(30)] == before
        assert rules.custom_rule_count == 0

    def test_cap_rejects_new_code(self, rules):
        """Test registration beyond the cap fails."""
        for i in range(MAX_CUSTOM_RULES):
            assert rules.register_rule(f"c{i}", lambda n: "other")

        assert rules.custom_rule_count == MAX_CUSTOM_RULES
        assert rules.register_rule("overflow", lambda n: "other") is False
        assert not rules.has_custom_rule("overflow")

    def test_cap_allows_update(self, rules):
        """Test updating an existing code at the cap succeeds."""
        for i in range(MAX_CUSTOM_RULES):
            rules.register_rule(f"c{i}", lambda n: "other")

        assert rules.register_rule("c0", lambda n: "two")
        assert rules.resolve("c0", 5) is PluralCategory.TWO
        assert rules.custom_rule_count == MAX_CUSTOM_RULES

    def test_instances_are_isolated(self):
        """Test custom rules do not leak between instances."""
        first = PluralRules()
        second = PluralRules()
        first.register_rule("en", lambda n: "zero")

        assert first.resolve("en", 1) is PluralCategory.ZERO
        assert second.resolve("en", 1) is PluralCategory.ONE

    def test_concurrent_registration_respects_cap(self):
        """Test concurrent registrations never exceed the cap."""
        rules = PluralRules()

        def register(start):
            for i in range(start, start + 20):
                rules.register_rule(f"t{i}", lambda n: "other")

        threads = [threading.Thread(target=register, args=(i * 20,)) for i in range(5)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert rules.custom_rule_count == MAX_CUSTOM_RULES


class TestGlobalRules:
    """Test module-level helpers."""

    def test_get_plural_category(self):
        """Test the global helper."""
        assert get_plural_category("pl", 5) is PluralCategory.MANY

    def test_global_rules_are_shared(self):
        """Test get_plural_rules returns one instance."""
        assert get_plural_rules() is get_plural_rules()
        get_plural_rules().register_rule("en", lambda n: "two")
        assert get_plural_category("en", 1) is PluralCategory.TWO

    def test_supported_languages(self):
        """Test supported languages include mapped and custom codes."""
        rules = PluralRules()
        rules.register_rule("eo", lambda n: "other")
        supported = rules.get_supported_languages()

        assert "en" in supported
        assert "ar" in supported
        assert "eo" in supported
