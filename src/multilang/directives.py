"""Directive parsing and resolution.

Content authors embed translation directives directly in text and HTML:

    translate('SITE_NAME')
    translate('GREETING', ['name' => 'Ana'])
    translate('ITEM_COUNT', {"count": "5"}, 5)
    translate('ITEM_COUNT', 'few')

The resolver finds each directive, parses its arguments and replaces it
with the catalog's translation. Malformed argument blocks resolve with no
arguments, and text without any directive is returned untouched.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Iterator

from multilang.catalog import TranslationCatalog
from multilang.limits import MAX_ARGS, MAX_PATTERN_MATCHES


logger = logging.getLogger(__name__)


DEFAULT_DIRECTIVE_NAME = "translate"

# 'key' => 'value'  or  'key' => 123
_ARROW_PAIR = re.compile(r"""['"]([A-Za-z0-9_]+)['"]\s*=>\s*(?:['"]([^'"]*)['"]|(\d+))""")
# "key": "value"  or  "key": 123
_COLON_PAIR = re.compile(r"""['"]([A-Za-z0-9_]+)['"]\s*:\s*(?:['"]([^'"]*)['"]|(\d+))""")


def build_directive_pattern(name: str = DEFAULT_DIRECTIVE_NAME) -> re.Pattern[str]:
    """Compile the directive grammar for a function name.

    Groups: 1 key, 2 arrow-style args, 3 colon-style args, 4 literal form,
    5 numeric count.
    """
    return re.compile(
        r"(?<![A-Za-z0-9_])"
        + re.escape(name)
        + r"""\(\s*['"]([A-Z][A-Z0-9_]*)['"]"""
        + r"""\s*(?:,\s*(?:\[(.*?)\]|\{(.*?)\}))?"""
        + r"""\s*(?:,\s*(?:['"]([a-z]+)['"]|(\d+)))?"""
        + r"""\s*\)"""
    )


def parse_inline_args(text: str | None) -> dict[str, str]:
    """Parse the contents of a directive's argument block.

    Arrow pairs are tried first; colon pairs only if no arrow pair is
    found. At most MAX_ARGS pairs are kept and values are strings.

    Example:
        >>> parse_inline_args("'count' => 5, 'name' => 'Ana'")
        {'count': '5', 'name': 'Ana'}
        >>> parse_inline_args('"count": 5')
        {'count': '5'}
    """
    if not text or not text.strip():
        return {}

    for pattern in (_ARROW_PAIR, _COLON_PAIR):
        args: dict[str, str] = {}
        for index, pair in enumerate(pattern.finditer(text)):
            if index >= MAX_ARGS:
                break
            name, quoted, number = pair.groups()
            args[name] = number if number is not None else quoted
        if args:
            return args

    return {}


@dataclass(frozen=True)
class Directive:
    """One parsed directive occurrence.

    Attributes:
        match: The full matched text.
        key: Translation key.
        args: Placeholder arguments.
        form_or_count: Literal form name, integer count, or None.
        start: Offset of the match in the scanned text.
        end: Offset just past the match.
    """

    match: str
    key: str
    args: dict[str, str] = field(default_factory=dict)
    form_or_count: str | int | None = None
    start: int = 0
    end: int = 0


@dataclass(frozen=True)
class DirectiveMatch:
    """Read-only view of a directive for editor tooling."""

    match: str
    key: str
    args: dict[str, str]
    form: str | int | None
    resolved: str

    def to_dict(self) -> dict[str, object]:
        return {
            "match": self.match,
            "key": self.key,
            "args": dict(self.args),
            "form": self.form,
            "resolved": self.resolved,
        }


def _directive_from_match(m: re.Match[str]) -> Directive:
    key, arrow_args, colon_args, form, count = m.groups()

    args_text = arrow_args or colon_args or ""
    form_or_count: str | int | None = None
    if form:
        form_or_count = form
    elif count:
        form_or_count = int(count)

    return Directive(
        match=m.group(0),
        key=key,
        args=parse_inline_args(args_text),
        form_or_count=form_or_count,
        start=m.start(),
        end=m.end(),
    )


class DirectiveResolver:
    """Resolves directives in text against one catalog.

    Args:
        catalog: Catalog used to translate each directive.
        directive_name: Function name authors write, ``translate`` by default.

    Example:
        resolver = DirectiveResolver(TranslationCatalog("en"))
        resolver.resolve("Welcome to translate('SITE_NAME')")
    """

    MAX_PATTERN_MATCHES = MAX_PATTERN_MATCHES

    def __init__(
        self,
        catalog: TranslationCatalog,
        directive_name: str = DEFAULT_DIRECTIVE_NAME,
    ) -> None:
        self._catalog = catalog
        self._directive_name = directive_name
        self._marker = f"{directive_name}("
        self._pattern = build_directive_pattern(directive_name)

    @property
    def catalog(self) -> TranslationCatalog:
        return self._catalog

    @property
    def directive_name(self) -> str:
        return self._directive_name

    def has_directive(self, text: str | None) -> bool:
        """Cheap check for the directive marker."""
        return bool(text) and self._marker in text

    def parse(self, text: str) -> Iterator[Directive]:
        """Yield every directive occurrence in order."""
        if not self.has_directive(text):
            return
        for m in self._pattern.finditer(text):
            yield _directive_from_match(m)

    def parse_inline_args(self, text: str | None) -> dict[str, str]:
        return parse_inline_args(text)

    def resolve(self, text: str) -> str:
        """Replace each directive with its HTML-escaped translation."""
        return self._resolve_each(text, escape=True)

    def resolve_raw(self, text: str) -> str:
        """Replace each directive with its unescaped translation."""
        return self._resolve_each(text, escape=False)

    def _resolve_each(self, text: str, escape: bool) -> str:
        if not self.has_directive(text):
            return text

        translate = self._catalog.translate if escape else self._catalog.translate_raw
        count = 0

        def replace(m: re.Match[str]) -> str:
            nonlocal count
            if count >= MAX_PATTERN_MATCHES:
                return m.group(0)
            count += 1
            directive = _directive_from_match(m)
            return translate(directive.key, directive.args, directive.form_or_count)

        result = self._pattern.sub(replace, text)
        if count >= MAX_PATTERN_MATCHES:
            logger.debug(f"Directive resolution capped at {MAX_PATTERN_MATCHES} matches")
        return result

    def resolve_block_content(self, html: str) -> str:
        """Resolve directives in large content, translating each unique one once.

        Runs in three phases: collect every match, translate each distinct
        match text (at most MAX_PATTERN_MATCHES of them), then substitute
        all occurrences in a single pass. Output is HTML-escaped.
        """
        if not self.has_directive(html):
            return html

        # Phase 1: collect
        matches = list(self._pattern.finditer(html))
        if not matches:
            return html

        # Phase 2: translate unique occurrences
        resolved: dict[str, str] = {}
        for m in matches:
            full = m.group(0)
            if full in resolved:
                continue
            if len(resolved) >= MAX_PATTERN_MATCHES:
                logger.debug(
                    f"Block resolution capped at {MAX_PATTERN_MATCHES} unique directives"
                )
                break
            directive = _directive_from_match(m)
            resolved[full] = self._catalog.translate(
                directive.key, directive.args, directive.form_or_count
            )

        # Phase 3: replace
        return self._pattern.sub(lambda m: resolved.get(m.group(0), m.group(0)), html)

    def find_patterns(self, text: str) -> list[DirectiveMatch]:
        """List directives with their raw resolution, without changing text."""
        results: list[DirectiveMatch] = []
        for directive in self.parse(text):
            if len(results) >= MAX_PATTERN_MATCHES:
                break
            results.append(
                DirectiveMatch(
                    match=directive.match,
                    key=directive.key,
                    args=directive.args,
                    form=directive.form_or_count,
                    resolved=self._catalog.translate_raw(
                        directive.key, directive.args, directive.form_or_count
                    ),
                )
            )
        return results
