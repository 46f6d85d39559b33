"""Shared fixtures for multilang tests."""

from __future__ import annotations

from pathlib import Path

import pytest

import multilang
from multilang.catalog import CatalogCache, get_default_cache
from multilang.config import MultilangConfig
from multilang.locks import NoOpLockStrategy
from multilang.plurals import PluralRules, get_plural_rules
from multilang.registry import LanguageRegistry
from multilang.service import TranslationService

from tests.helpers import EN_DICTIONARY, SR_DICTIONARY, write_json


@pytest.fixture(autouse=True)
def reset_global_state():
    """Keep module-level caches, rules and service isolated per test."""
    get_default_cache().clear()
    get_plural_rules().reset_custom_rules()
    multilang.set_default_service(None)
    yield
    get_default_cache().clear()
    get_plural_rules().reset_custom_rules()
    multilang.set_default_service(None)


@pytest.fixture
def translations_dir(tmp_path: Path) -> Path:
    """Directory with English and Serbian dictionaries."""
    directory = tmp_path / "translations"
    write_json(directory / "en.json", EN_DICTIONARY)
    write_json(directory / "sr.json", SR_DICTIONARY)
    return directory


@pytest.fixture
def cache() -> CatalogCache:
    """Fresh catalog cache."""
    return CatalogCache()


@pytest.fixture
def rules() -> PluralRules:
    """Fresh plural rules."""
    return PluralRules()


@pytest.fixture
def config(translations_dir: Path) -> MultilangConfig:
    """Configuration pointing at the fixture dictionaries."""
    return MultilangConfig(translations_dir=translations_dir, lock_strategy="none")


@pytest.fixture
def registry(config: MultilangConfig) -> LanguageRegistry:
    """Empty registry in the fixture directory."""
    return LanguageRegistry(config=config, lock_strategy=NoOpLockStrategy())


@pytest.fixture
def service(config: MultilangConfig, registry: LanguageRegistry) -> TranslationService:
    """Service with its own cache and rules."""
    return TranslationService(config, registry=registry)
