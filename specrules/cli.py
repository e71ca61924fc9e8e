"""specrules CLI - render speculation rules and run the demo site.

Usage:
    specrules render settings.json                   # Print the markup block
    specrules render settings.json --category post   # ... for a post page
    specrules render settings.json --json            # Print only the document
    specrules show settings.json                     # Print sanitized settings
    specrules serve                                  # Start the demo site
"""

from __future__ import annotations

import json
import logging

import click

from specrules.common.exceptions import SpeculationRulesException
from specrules.common.settings import SpeculationSettings
from specrules.generator import PageContext, generate
from specrules.render import dumps_document, render_rules
from specrules.store import JsonFileSettingsStore, load_settings


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _load(settings_file: str) -> SpeculationSettings:
    """Load settings from a JSON file, converting errors for click."""
    try:
        return load_settings(JsonFileSettingsStore(settings_file))
    except SpeculationRulesException as e:
        raise click.ClickException(str(e)) from e


@click.group()
@click.version_option(package_name="specrules")
def cli() -> None:
    """specrules - speculation rules generator CLI."""


@cli.command()
@click.argument("settings_file", type=click.Path(dir_okay=False))
@click.option(
    "--category",
    default=None,
    help="Content category of the page being rendered.",
)
@click.option(
    "--url",
    default=None,
    help="Page URL, shown in debug comments.",
)
@click.option(
    "--json",
    "as_json",
    is_flag=True,
    help="Print only the JSON document, without the script element.",
)
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging.")
def render(
    settings_file: str,
    category: str | None,
    url: str | None,
    as_json: bool,
    verbose: bool,
) -> None:
    """Render the speculation rules for a page.

    SETTINGS_FILE is a JSON object in the settings-store layout. A missing
    file means nothing is configured. Nothing is printed when no rules
    apply.

    \b
    Examples:
        specrules render settings.json
        specrules render settings.json --category product --json
    """
    _configure_logging(verbose)

    settings = _load(settings_file)
    page = PageContext(category=category, url=url)

    if as_json:
        document = generate(settings, page)
        if document is not None:
            click.echo(dumps_document(document))
        return

    markup = render_rules(settings, page)
    if markup:
        click.echo(markup, nl=False)


@cli.command()
@click.argument("settings_file", type=click.Path(dir_okay=False))
def show(settings_file: str) -> None:
    """Show the sanitized settings held in SETTINGS_FILE."""
    settings = _load(settings_file)

    click.echo(f"Type:       {settings.type.value}")
    click.echo(f"Eagerness:  {settings.eagerness.value}")
    categories = ", ".join(sorted(settings.applicable_categories))
    click.echo(f"Categories: {categories or '(all)'}")
    click.echo(f"Debug:      {'on' if settings.debug_enabled else 'off'}")

    click.echo(f"\nMatch patterns ({len(settings.match_patterns)}):")
    for pattern in settings.match_patterns:
        click.echo(f"  {pattern}")

    if settings.exclude_patterns:
        click.echo(f"\nExclude patterns ({len(settings.exclude_patterns)}):")
        for pattern in settings.exclude_patterns:
            click.echo(f"  {pattern}")


@cli.command()
@click.argument("settings_file", type=click.Path(dir_okay=False))
def normalize(settings_file: str) -> None:
    """Print SETTINGS_FILE as it would be stored after sanitization."""
    settings = _load(settings_file)
    click.echo(json.dumps(settings.to_raw(), indent=2))


@cli.command()
@click.option(
    "--host",
    default="127.0.0.1",
    show_default=True,
    help="Host to bind the server to.",
)
@click.option(
    "--port",
    default=8080,
    show_default=True,
    type=int,
    help="Port to bind the server to.",
)
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging.")
def serve(host: str, port: int, verbose: bool) -> None:
    """Start the demo site with speculation rules enabled."""
    try:
        import uvicorn

        from specrules.demo.app import app
    except ImportError as e:
        raise click.ClickException(
            f"Missing dependency: {e}. "
            "Install the 'demo' extra: pip install specrules[demo]"
        ) from e

    _configure_logging(verbose)
    logging.getLogger("specrules").setLevel(
        logging.DEBUG if verbose else logging.INFO
    )

    click.echo(f"Starting demo site at http://{host}:{port}")
    click.echo(f"Settings page: http://{host}:{port}/admin/speculation-rules")

    uvicorn.run(
        app,
        host=host,
        port=port,
        log_level="info" if verbose else "warning",
    )


def main() -> None:
    """Entry point for the ``specrules`` console script."""
    cli()
