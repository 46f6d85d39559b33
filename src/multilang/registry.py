"""Language registry backed by a single JSON file.

The registry is an ordered list of Language records. Every mutation reads
the whole file, changes it in memory and writes it back atomically while
holding an exclusive lock on a sidecar lock file, so concurrent writers
from several processes cannot lose each other's updates.

Mutations report invariant violations (duplicate code, unknown code,
removing the default, exceeded caps) by returning False. They never raise.

Example:
    >>> registry = LanguageRegistry(Path("translations/languages.json"))
    >>> registry.add({"iso2": "en", "native_name": "English"})
    True
    >>> registry.set_default("en")
    True
    >>> registry.get_default().native_name
    'English'
"""

from __future__ import annotations

import json
import logging
import threading
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Iterable, Mapping

from multilang.atomic import atomic_write
from multilang.config import MultilangConfig
from multilang.exceptions import LockTimeout
from multilang.limits import MAX_LANGUAGES, MAX_LOCALES_PER
from multilang.locks import LockMode, LockStrategy, get_lock_strategy


logger = logging.getLogger(__name__)


# Fields accepted by LanguageRegistry.update()
UPDATABLE_FIELDS = ("iso2", "iso3", "native_name", "flag", "locales", "enabled", "is_default")

_KNOWN_FIELDS = ("id",) + UPDATABLE_FIELDS


def normalize_locales(locales: Any) -> list[str]:
    """Drop blanks and duplicates, keep order, cap at MAX_LOCALES_PER."""
    if not isinstance(locales, (list, tuple)):
        return []

    result: list[str] = []
    for locale in locales:
        if len(result) >= MAX_LOCALES_PER:
            break
        locale = str(locale).strip()
        if locale and locale not in result:
            result.append(locale)
    return result


@dataclass
class Language:
    """A supported language.

    Attributes:
        iso2: Two-letter lowercase code. Unique within a registry.
        native_name: Display name in the language itself.
        iso3: Optional three-letter code.
        flag: Optional flag image URL.
        locales: Ordered locale codes such as "en_GB".
        enabled: Whether the language is offered to visitors.
        is_default: Whether this is the registry's default language.
        id: Opaque identifier assigned on add.
        extra: Unknown keys read from the file, written back untouched.
    """

    iso2: str
    native_name: str
    iso3: str = ""
    flag: str = ""
    locales: list[str] = field(default_factory=list)
    enabled: bool = True
    is_default: bool = False
    id: str = ""
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Language":
        """Build a record from decoded JSON, tolerating missing fields."""
        locales = data.get("locales")
        return cls(
            iso2=str(data.get("iso2") or ""),
            native_name=str(data.get("native_name") or ""),
            iso3=str(data.get("iso3") or ""),
            flag=str(data.get("flag") or ""),
            locales=[str(x) for x in locales] if isinstance(locales, list) else [],
            enabled=bool(data.get("enabled", False)),
            is_default=bool(data.get("is_default", False)),
            id=str(data.get("id") or ""),
            extra={k: v for k, v in data.items() if k not in _KNOWN_FIELDS},
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to the on-disk representation."""
        data: dict[str, Any] = {
            "id": self.id,
            "iso2": self.iso2,
            "iso3": self.iso3,
            "native_name": self.native_name,
            "flag": self.flag,
            "locales": list(self.locales),
            "enabled": self.enabled,
            "is_default": self.is_default,
        }
        data.update(self.extra)
        return data


def generate_language_id(iso2: str) -> str:
    """Generate an opaque record id such as ``lang_en_1a2b3c4d``."""
    return f"lang_{iso2}_{uuid.uuid4().hex[:8]}"


class LanguageRegistry:
    """CRUD over the persisted list of languages.

    Args:
        file_path: Registry JSON file. Defaults to ``config.registry_file``.
        lock_strategy: Strategy guarding the read-modify-write cycle.
            Defaults to the one named by ``config.lock_strategy``.
        config: Settings supplying defaults and the lock timeout.
    """

    MAX_LANGUAGES = MAX_LANGUAGES
    MAX_LOCALES_PER = MAX_LOCALES_PER

    def __init__(
        self,
        file_path: Path | str | None = None,
        lock_strategy: LockStrategy | None = None,
        config: MultilangConfig | None = None,
    ) -> None:
        self._config = config or MultilangConfig()
        self._file_path = Path(file_path) if file_path is not None else self._config.registry_file
        self._lock_strategy = lock_strategy or get_lock_strategy(self._config.lock_strategy)
        self._lock_timeout = self._config.lock_timeout
        self._lock = threading.RLock()

    def get_file_path(self) -> Path:
        """Get the registry file path."""
        return self._file_path

    # =========================================================================
    # Reads
    # =========================================================================

    def get_all(self) -> list[Language]:
        """Get every language in file order.

        Returns an empty list if the file is missing, empty or not a JSON
        array. Non-object entries are skipped.
        """
        return [Language.from_dict(entry) for entry in self._read()[:MAX_LANGUAGES]]

    def get_enabled(self) -> list[Language]:
        """Get enabled languages in file order."""
        return [lang for lang in self.get_all() if lang.enabled]

    def get_default(self) -> Language | None:
        """Get the first language flagged as default."""
        for lang in self.get_all():
            if lang.is_default:
                return lang
        return None

    def get_by_iso2(self, iso2: str) -> Language | None:
        """Get a language by its two-letter code."""
        for lang in self.get_all():
            if lang.iso2 == iso2:
                return lang
        return None

    def _read(self) -> list[dict[str, Any]]:
        path = self._file_path
        try:
            content = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.debug(f"Registry file not found: {path}")
            return []
        except OSError as e:
            logger.debug(f"Registry file unreadable: {path}: {e}")
            return []

        if not content.strip():
            return []

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            logger.warning(f"Invalid JSON in registry file {path}: {e}")
            return []

        if not isinstance(data, list):
            logger.warning(f"Registry file {path} does not contain a JSON array")
            return []

        return [entry for entry in data if isinstance(entry, dict)]

    # =========================================================================
    # Mutations
    # =========================================================================

    def add(self, fields: Mapping[str, Any]) -> bool:
        """Append a new language.

        Fails if ``iso2`` or ``native_name`` is empty, the code already
        exists, or the registry is full. The new record is enabled and is
        not the default.
        """
        iso2 = str(fields.get("iso2") or "").strip()
        native_name = str(fields.get("native_name") or "").strip()

        if not iso2 or not native_name:
            return self._reject("add", iso2, "iso2 and native_name are required")

        def mutate(languages: list[Language]) -> str | None:
            if len(languages) >= MAX_LANGUAGES:
                return f"limit of {MAX_LANGUAGES} languages reached"
            if any(lang.iso2 == iso2 for lang in languages):
                return "language already exists"

            languages.append(
                Language(
                    iso2=iso2,
                    native_name=native_name,
                    iso3=str(fields.get("iso3") or ""),
                    flag=str(fields.get("flag") or ""),
                    locales=normalize_locales(fields.get("locales")),
                    enabled=True,
                    is_default=False,
                    id=generate_language_id(iso2),
                )
            )
            return None

        return self._mutate("add", iso2, mutate)

    def update(self, iso2: str, fields: Mapping[str, Any]) -> bool:
        """Merge whitelisted fields into an existing language.

        Unknown fields are dropped. Renaming to a code that another record
        already uses fails. Setting ``is_default`` to true clears the flag
        on every other record.
        """
        changes = {k: v for k, v in fields.items() if k in UPDATABLE_FIELDS}

        def mutate(languages: list[Language]) -> str | None:
            target = _find(languages, iso2)
            if target is None:
                return "language not found"

            if "iso2" in changes:
                new_iso2 = str(changes["iso2"] or "").strip()
                if not new_iso2:
                    return "iso2 cannot be empty"
                if new_iso2 != iso2 and _find(languages, new_iso2) is not None:
                    return f"language '{new_iso2}' already exists"
                target.iso2 = new_iso2
            if "native_name" in changes:
                native_name = str(changes["native_name"] or "").strip()
                if not native_name:
                    return "native_name cannot be empty"
                target.native_name = native_name
            if "iso3" in changes:
                target.iso3 = str(changes["iso3"] or "")
            if "flag" in changes:
                target.flag = str(changes["flag"] or "")
            if "locales" in changes:
                target.locales = normalize_locales(changes["locales"])
            if "enabled" in changes:
                target.enabled = bool(changes["enabled"])
            if "is_default" in changes:
                if changes["is_default"]:
                    for lang in languages:
                        lang.is_default = lang is target
                else:
                    target.is_default = False
            return None

        return self._mutate("update", iso2, mutate)

    def remove(self, iso2: str) -> bool:
        """Remove a language. The default language cannot be removed."""

        def mutate(languages: list[Language]) -> str | None:
            target = _find(languages, iso2)
            if target is None:
                return "language not found"
            if target.is_default:
                return "cannot remove the default language"
            languages.remove(target)
            return None

        return self._mutate("remove", iso2, mutate)

    def set_default(self, iso2: str) -> bool:
        """Make a language the only default, in a single write."""

        def mutate(languages: list[Language]) -> str | None:
            if _find(languages, iso2) is None:
                return "language not found"
            for lang in languages:
                lang.is_default = lang.iso2 == iso2
            return None

        return self._mutate("set_default", iso2, mutate)

    def set_enabled(self, iso2: str, enabled: bool) -> bool:
        """Enable or disable a language."""

        def mutate(languages: list[Language]) -> str | None:
            target = _find(languages, iso2)
            if target is None:
                return "language not found"
            target.enabled = bool(enabled)
            return None

        return self._mutate("set_enabled", iso2, mutate)

    def add_locale(self, iso2: str, locale: str) -> bool:
        """Append a locale to a language."""
        locale = (locale or "").strip()

        def mutate(languages: list[Language]) -> str | None:
            target = _find(languages, iso2)
            if target is None:
                return "language not found"
            if not locale:
                return "locale cannot be empty"
            if locale in target.locales:
                return f"locale '{locale}' already exists"
            if len(target.locales) >= MAX_LOCALES_PER:
                return f"limit of {MAX_LOCALES_PER} locales reached"
            target.locales.append(locale)
            return None

        return self._mutate("add_locale", iso2, mutate)

    def remove_locale(self, iso2: str, locale: str) -> bool:
        """Remove a locale from a language."""
        locale = (locale or "").strip()

        def mutate(languages: list[Language]) -> str | None:
            target = _find(languages, iso2)
            if target is None:
                return "language not found"
            if locale not in target.locales:
                return f"locale '{locale}' not found"
            target.locales.remove(locale)
            return None

        return self._mutate("remove_locale", iso2, mutate)

    # =========================================================================
    # Internals
    # =========================================================================

    def _mutate(
        self,
        operation: str,
        iso2: str,
        mutate: Callable[[list[Language]], str | None],
    ) -> bool:
        """Run one locked read-modify-write cycle.

        ``mutate`` edits the list in place and returns None on success or
        a rejection reason. Nothing is written when it rejects.
        """
        with self._lock:
            try:
                with self._lock_strategy.lock(
                    self._file_path, LockMode.EXCLUSIVE, timeout=self._lock_timeout
                ):
                    # Every record, not only the first MAX_LANGUAGES
                    languages = [Language.from_dict(entry) for entry in self._read()]
                    reason = mutate(languages)
                    if reason is not None:
                        return self._reject(operation, iso2, reason)
                    return self._write(languages)
            except LockTimeout as e:
                logger.error(f"Registry {operation} '{iso2}' failed: {e}")
                return False
            except OSError as e:
                logger.error(f"Registry {operation} '{iso2}' could not lock {self._file_path}: {e}")
                return False

    def _write(self, languages: Iterable[Language]) -> bool:
        content = json.dumps(
            [lang.to_dict() for lang in languages],
            indent=4,
            ensure_ascii=False,
        )
        try:
            atomic_write(self._file_path, content)
        except OSError as e:
            logger.error(f"Failed to write registry file {self._file_path}: {e}")
            return False
        return True

    def _reject(self, operation: str, iso2: str, reason: str) -> bool:
        logger.info(f"Registry {operation} '{iso2}' rejected: {reason}")
        return False


def _find(languages: list[Language], iso2: str) -> Language | None:
    for lang in languages:
        if lang.iso2 == iso2:
            return lang
    return None
