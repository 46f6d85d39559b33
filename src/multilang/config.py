"""Configuration for multilang.

Configuration is a plain dataclass. It can be built in code, from a
dictionary, or from a YAML/JSON file:

    >>> from multilang.config import MultilangConfig
    >>> config = MultilangConfig(translations_dir="site/translations")
    >>> config = MultilangConfig.from_file("multilang.yaml")

A YAML file looks like:

    translations_dir: site/translations
    default_language: sr
    directive_name: ct_translate
    lock_strategy: fcntl
    lock_timeout: 10
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

from multilang.exceptions import ConfigError
from multilang.limits import MAX_TEXT_LENGTH


LOCK_STRATEGIES = ("auto", "fcntl", "filelock", "none")


@dataclass
class MultilangConfig:
    """Settings shared by the service, registry and CLI.

    Attributes:
        translations_dir: Directory holding {iso2}.json / {locale}.json files.
        registry_file: Language registry JSON file. Defaults to
            translations_dir / "languages.json".
        default_language: Language used when none is supplied and the
            registry has no default.
        directive_name: Function name recognized in content directives.
        lock_strategy: One of "auto", "fcntl", "filelock", "none".
        lock_timeout: Seconds to wait for the registry file lock.
        max_text_length: Characters the CLI resolve command accepts for a single string.
    """

    translations_dir: Path = field(default_factory=lambda: Path("translations"))
    registry_file: Path | None = None
    default_language: str = "en"
    directive_name: str = "translate"
    lock_strategy: str = "auto"
    lock_timeout: float = 30.0
    max_text_length: int = MAX_TEXT_LENGTH

    def __post_init__(self) -> None:
        self.translations_dir = Path(self.translations_dir)
        if self.registry_file is None:
            self.registry_file = self.translations_dir / "languages.json"
        else:
            self.registry_file = Path(self.registry_file)

        errors = self.validate()
        if errors:
            raise ConfigError(
                f"Configuration validation failed: {', '.join(errors)}",
                {"errors": errors},
            )

    def validate(self) -> list[str]:
        """Validate field values.

        Returns:
            List of error messages (empty if valid).
        """
        errors = []
        if not isinstance(self.default_language, str) or not self.default_language:
            errors.append("default_language must be a non-empty string")
        if not isinstance(self.directive_name, str) or not self.directive_name.isidentifier():
            errors.append("directive_name must be a valid identifier")
        if self.lock_strategy not in LOCK_STRATEGIES:
            errors.append(f"lock_strategy must be one of {', '.join(LOCK_STRATEGIES)}")
        if not isinstance(self.lock_timeout, (int, float)) or self.lock_timeout < 0:
            errors.append("lock_timeout must be a non-negative number")
        if not isinstance(self.max_text_length, int) or self.max_text_length <= 0:
            errors.append("max_text_length must be a positive integer")
        return errors

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MultilangConfig":
        """Create configuration from a dictionary.

        Raises:
            ConfigError: On unknown keys or invalid values.
        """
        if not isinstance(data, dict):
            raise ConfigError("Configuration must be a mapping")

        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(
                f"Unknown configuration keys: {', '.join(unknown)}",
                {"unknown": unknown},
            )

        return cls(**data)

    @classmethod
    def from_file(cls, path: Path | str) -> "MultilangConfig":
        """Load configuration from a YAML or JSON file.

        Relative directories in the file are resolved against the file's
        own directory.

        Raises:
            ConfigError: If the file is missing, unparseable or invalid.
        """
        path = Path(path)
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}", {"path": str(path)})

        suffix = path.suffix.lower()
        try:
            with open(path, "r", encoding="utf-8") as f:
                if suffix in (".yaml", ".yml"):
                    data = yaml.safe_load(f) or {}
                elif suffix == ".json":
                    data = json.load(f)
                else:
                    raise ConfigError(
                        f"Unsupported config file format: {suffix}",
                        {"path": str(path)},
                    )
        except (OSError, yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigError(f"Failed to read config file {path}: {e}", {"path": str(path)}) from e

        if not isinstance(data, dict):
            raise ConfigError("Configuration must be a mapping", {"path": str(path)})

        for key in ("translations_dir", "registry_file"):
            value = data.get(key)
            if value is not None and not Path(value).is_absolute():
                data[key] = path.parent / value

        return cls.from_dict(data)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "translations_dir": str(self.translations_dir),
            "registry_file": str(self.registry_file),
            "default_language": self.default_language,
            "directive_name": self.directive_name,
            "lock_strategy": self.lock_strategy,
            "lock_timeout": self.lock_timeout,
            "max_text_length": self.max_text_length,
        }
