"""Command-line interface for multilang.

Commands:
    - languages list/add/remove/set-default/enable/disable/add-locale/remove-locale
    - resolve: Resolve directives in a string
    - keys: List translation keys across registered languages
    - plural: Show the plural category for a count
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Annotated, Optional

import typer

from multilang.config import MultilangConfig
from multilang.exceptions import ConfigError
from multilang.service import TranslationService


logger = logging.getLogger(__name__)

app = typer.Typer(
    name="multilang",
    help="Inline translation directives, dictionaries and language registry",
    add_completion=False,
    no_args_is_help=True,
)

languages_app = typer.Typer(
    name="languages",
    help="Language registry commands",
    no_args_is_help=True,
)
app.add_typer(languages_app, name="languages")


@app.callback()
def main(
    ctx: typer.Context,
    config_file: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="YAML or JSON configuration file"),
    ] = None,
    translations_dir: Annotated[
        Optional[Path],
        typer.Option("--translations-dir", "-t", help="Directory with dictionary files"),
    ] = None,
    registry_file: Annotated[
        Optional[Path],
        typer.Option("--registry", "-r", help="Language registry JSON file"),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging"),
    ] = False,
) -> None:
    """Manage languages and resolve translation directives."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = MultilangConfig.from_file(config_file) if config_file else MultilangConfig()
        overrides: dict[str, Path] = {}
        if translations_dir is not None:
            overrides["translations_dir"] = translations_dir
            # A registry that followed the old directory follows the new one
            if config.registry_file == config.translations_dir / "languages.json":
                overrides["registry_file"] = translations_dir / "languages.json"
        if registry_file is not None:
            overrides["registry_file"] = registry_file
        if overrides:
            config = MultilangConfig.from_dict({**config.to_dict(), **overrides})
    except ConfigError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    ctx.obj = TranslationService(config)


def _service(ctx: typer.Context) -> TranslationService:
    return ctx.obj


def _check(ok: bool, success: str, failure: str) -> None:
    if not ok:
        typer.echo(f"Error: {failure}", err=True)
        raise typer.Exit(1)
    typer.echo(success)


# =============================================================================
# languages
# =============================================================================


@languages_app.command("list")
def list_languages(
    ctx: typer.Context,
    enabled: Annotated[
        bool,
        typer.Option("--enabled", "-e", help="Only show enabled languages"),
    ] = False,
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """List registered languages."""
    registry = _service(ctx).registry
    languages = registry.get_enabled() if enabled else registry.get_all()

    if as_json:
        typer.echo(
            json.dumps([lang.to_dict() for lang in languages], indent=2, ensure_ascii=False)
        )
        return

    if not languages:
        typer.echo("No languages registered.")
        return

    from rich.console import Console
    from rich.table import Table

    console = Console()

    table = Table(title="Languages")
    table.add_column("ISO2", style="cyan", no_wrap=True)
    table.add_column("ISO3")
    table.add_column("Name", style="green")
    table.add_column("Locales")
    table.add_column("Enabled")
    table.add_column("Default")

    for lang in languages:
        table.add_row(
            lang.iso2,
            lang.iso3,
            lang.native_name,
            ", ".join(lang.locales),
            "[green]yes[/green]" if lang.enabled else "[dim]no[/dim]",
            "[yellow]*[/yellow]" if lang.is_default else "",
        )

    console.print(table)


@languages_app.command("add")
def add_language(
    ctx: typer.Context,
    iso2: Annotated[str, typer.Argument(help="Two-letter language code")],
    native_name: Annotated[str, typer.Argument(help="Name in the language itself")],
    iso3: Annotated[
        Optional[str],
        typer.Option("--iso3", help="Three-letter language code"),
    ] = None,
    flag: Annotated[
        Optional[str],
        typer.Option("--flag", help="Flag image URL"),
    ] = None,
    locales: Annotated[
        Optional[list[str]],
        typer.Option("--locale", "-l", help="Locale code (repeatable)"),
    ] = None,
) -> None:
    """Add a language."""
    ok = _service(ctx).registry.add(
        {
            "iso2": iso2,
            "native_name": native_name,
            "iso3": iso3 or "",
            "flag": flag or "",
            "locales": locales or [],
        }
    )
    _check(ok, f"Added language '{iso2}'", f"Could not add language '{iso2}'")


@languages_app.command("remove")
def remove_language(
    ctx: typer.Context,
    iso2: Annotated[str, typer.Argument(help="Language code")],
) -> None:
    """Remove a language. The default language cannot be removed."""
    ok = _service(ctx).registry.remove(iso2)
    _check(ok, f"Removed language '{iso2}'", f"Could not remove language '{iso2}'")


@languages_app.command("set-default")
def set_default_language(
    ctx: typer.Context,
    iso2: Annotated[str, typer.Argument(help="Language code")],
) -> None:
    """Make a language the default."""
    ok = _service(ctx).registry.set_default(iso2)
    _check(ok, f"Default language is now '{iso2}'", f"Unknown language '{iso2}'")


@languages_app.command("enable")
def enable_language(
    ctx: typer.Context,
    iso2: Annotated[str, typer.Argument(help="Language code")],
) -> None:
    """Enable a language."""
    ok = _service(ctx).registry.set_enabled(iso2, True)
    _check(ok, f"Enabled language '{iso2}'", f"Unknown language '{iso2}'")


@languages_app.command("disable")
def disable_language(
    ctx: typer.Context,
    iso2: Annotated[str, typer.Argument(help="Language code")],
) -> None:
    """Disable a language."""
    ok = _service(ctx).registry.set_enabled(iso2, False)
    _check(ok, f"Disabled language '{iso2}'", f"Unknown language '{iso2}'")


@languages_app.command("add-locale")
def add_locale(
    ctx: typer.Context,
    iso2: Annotated[str, typer.Argument(help="Language code")],
    locale: Annotated[str, typer.Argument(help="Locale code, e.g. en_GB")],
) -> None:
    """Attach a locale to a language."""
    ok = _service(ctx).registry.add_locale(iso2, locale)
    _check(ok, f"Added locale '{locale}' to '{iso2}'", f"Could not add locale '{locale}' to '{iso2}'")


@languages_app.command("remove-locale")
def remove_locale(
    ctx: typer.Context,
    iso2: Annotated[str, typer.Argument(help="Language code")],
    locale: Annotated[str, typer.Argument(help="Locale code")],
) -> None:
    """Detach a locale from a language."""
    ok = _service(ctx).registry.remove_locale(iso2, locale)
    _check(
        ok,
        f"Removed locale '{locale}' from '{iso2}'",
        f"Could not remove locale '{locale}' from '{iso2}'",
    )


# =============================================================================
# resolution
# =============================================================================


@app.command("resolve")
def resolve_cmd(
    ctx: typer.Context,
    text: Annotated[str, typer.Argument(help="Text containing directives")],
    lang: Annotated[
        str,
        typer.Option("--lang", "-L", help="Language code (defaults to the registry default)"),
    ] = "",
    locale: Annotated[
        Optional[str],
        typer.Option("--locale", help="Locale overlay"),
    ] = None,
    raw: Annotated[
        bool,
        typer.Option("--raw", help="Do not HTML-escape translations"),
    ] = False,
    block: Annotated[
        bool,
        typer.Option("--block", help="Treat the text as block content"),
    ] = False,
) -> None:
    """Resolve translation directives in TEXT.

    Single strings are cut to ``max_text_length`` characters. Block content
    is resolved whole.
    """
    service = _service(ctx)

    limit = service.config.max_text_length
    if not block and len(text) > limit:
        logger.debug(f"Text truncated from {len(text)} to {limit} characters")
        text = text[:limit]

    if block:
        result = service.resolve_block_content(text, lang, locale)
    elif raw:
        result = service.resolve_raw(text, lang, locale)
    else:
        result = service.resolve(text, lang, locale)

    typer.echo(result)


@app.command("keys")
def keys_cmd(ctx: typer.Context) -> None:
    """List translation keys defined for registered languages."""
    for key in _service(ctx).get_all_keys():
        typer.echo(key)


@app.command("plural")
def plural_cmd(
    ctx: typer.Context,
    iso2: Annotated[str, typer.Argument(help="Language code")],
    count: Annotated[int, typer.Argument(help="Count")],
) -> None:
    """Show the plural category for COUNT."""
    rules = _service(ctx).rules
    category = rules.resolve(iso2, count)
    typer.echo(f"{category.value} ({rules.family_for(iso2).value})")


if __name__ == "__main__":
    app()
