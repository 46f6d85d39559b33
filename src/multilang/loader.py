"""Dictionary loader for translation files.

Translations live in one JSON object per language (``{iso2}.json``) and,
optionally, one per locale (``{locale}.json``) in the same directory. A
locale file is overlaid on its language file key by key.

Loading is lenient: a missing, empty, unreadable or malformed file is
treated as an empty dictionary so that content rendering never fails.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable

from multilang.limits import MAX_KEYS_PER_LANGUAGE, MAX_LANGUAGES


logger = logging.getLogger(__name__)


class DictionaryLoader:
    """Loader for language and locale dictionary files.

    Example:
        loader = DictionaryLoader()

        # Language file only
        data = loader.load(Path("translations"), "en")

        # Language file with en_GB overlay
        data = loader.load(Path("translations"), "en", "en_GB")
    """

    def load(
        self,
        base_directory: Path,
        language_code: str,
        locale: str | None = None,
    ) -> dict[str, Any]:
        """Load a language dictionary merged with its locale overlay.

        Args:
            base_directory: Directory holding the dictionary files.
            language_code: Two-letter language code.
            locale: Optional locale whose entries override the language's.

        Returns:
            Merged dictionary. Empty if ``language_code`` is empty.
        """
        if not language_code:
            return {}

        base_directory = Path(base_directory)
        data = self.load_file(base_directory / f"{language_code}.json")

        if locale:
            overlay = self.load_file(base_directory / f"{locale}.json")
            if overlay:
                data = {**data, **overlay}

        return data

    def load_file(self, path: Path) -> dict[str, Any]:
        """Load one dictionary file.

        Returns an empty dictionary if the file is missing, empty, not
        valid JSON or not a JSON object.
        """
        try:
            content = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.debug(f"Dictionary file not found: {path}")
            return {}
        except (OSError, UnicodeDecodeError) as e:
            logger.debug(f"Dictionary file unreadable: {path}: {e}")
            return {}

        if not content.strip():
            logger.debug(f"Dictionary file is empty: {path}")
            return {}

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            logger.warning(f"Invalid JSON in dictionary file {path}: {e}")
            return {}

        if not isinstance(data, dict):
            logger.warning(f"Dictionary file {path} does not contain a JSON object")
            return {}

        return data

    def list_keys(self, base_directory: Path, language_codes: Iterable[str]) -> list[str]:
        """Get the sorted union of keys across language files.

        Reads at most MAX_LANGUAGES languages and MAX_KEYS_PER_LANGUAGE keys
        from each. Locale files are not consulted.
        """
        base_directory = Path(base_directory)
        keys: set[str] = set()

        for index, code in enumerate(language_codes):
            if index >= MAX_LANGUAGES:
                logger.debug(f"Key listing stopped at {MAX_LANGUAGES} languages")
                break
            if not code:
                continue

            data = self.load_file(base_directory / f"{code}.json")
            for key_index, key in enumerate(data):
                if key_index >= MAX_KEYS_PER_LANGUAGE:
                    logger.debug(f"Key listing for '{code}' truncated at {MAX_KEYS_PER_LANGUAGE}")
                    break
                keys.add(key)

        return sorted(keys)
