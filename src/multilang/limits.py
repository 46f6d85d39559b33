"""Iteration bounds shared by every multilang component.

Each loop over dictionaries, arguments, directive matches, languages,
locales or custom rules is capped by one of these constants. Exceeding a
cap truncates silently; it is never an error.
"""

from __future__ import annotations

# Placeholder arguments applied per translation / parsed per directive.
MAX_ARGS = 50

# Directive occurrences (or unique occurrences in block mode) per text.
MAX_PATTERN_MATCHES = 200

# Passes spent stripping unresolved ##token## placeholders.
MAX_PLACEHOLDER_ITER = 100

# Distinct language codes with a custom plural rule.
MAX_CUSTOM_RULES = 50

# Records held by a language registry.
MAX_LANGUAGES = 50

# Locales attached to a single language record.
MAX_LOCALES_PER = 20

# Keys read per language when listing the available keys.
MAX_KEYS_PER_LANGUAGE = 500

# Characters accepted by the single-string service entry point.
MAX_TEXT_LENGTH = 2000
