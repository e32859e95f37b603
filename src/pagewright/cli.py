"""pagewright CLI interface.

Commands:
- render: Render a page document, or selected blocks of it
- check: Show which template file a template name resolves to
- blocks: List the blocks renderable from a template
- init: Create a default configuration file

Global options:
- --config: Path to configuration file
- --verbose: Enable verbose output with timestamps
- --quiet: Suppress info messages
- --ci: JSON log output
- --version: Show version and exit
"""

from pathlib import Path
from typing import Annotated, Any

import typer
import yaml
from jinja2 import TemplateError

from pagewright import __version__
from pagewright.config import PagewrightConfig, create_default_config, load_config
from pagewright.errors import PagewrightError, TemplateNotFound
from pagewright.page import Page, PageRenderer
from pagewright.utils.logging import configure_from_cli, get_logger

app = typer.Typer(
    name="pagewright",
    help="Resolve page templates and render documents or blocks",
    add_completion=False,
    no_args_is_help=True,
)

# Global state
_config: PagewrightConfig | None = None
_logger = get_logger()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"pagewright {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to configuration file",
            exists=True,
            dir_okay=False,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose output with timestamps"),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Suppress info messages (warnings and errors only)"),
    ] = False,
    ci: Annotated[
        bool,
        typer.Option("--ci", help="Enable CI mode with JSON log output"),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit",
        ),
    ] = False,
) -> None:
    """pagewright - template resolution and scoped rendering."""
    global _config

    configure_from_cli(verbose=verbose, quiet=quiet, ci=ci)

    try:
        _config = load_config(config_path=config)
    except FileNotFoundError as e:
        _logger.error(str(e))
        raise typer.Exit(1)
    except (PagewrightError, ValueError, yaml.YAMLError) as e:
        _logger.error(f"Failed to load config: {e}")
        raise typer.Exit(1)


def _get_config() -> PagewrightConfig:
    return _config if _config is not None else PagewrightConfig()


def _parse_vars(values: list[str]) -> dict[str, str]:
    parsed: dict[str, str] = {}
    for item in values:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"Expected KEY=VALUE, got: {item}", param_hint="--var")
        parsed[key] = value
    return parsed


def _load_params(path: Path | None) -> dict[str, Any]:
    if path is None:
        return {}
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise typer.BadParameter(f"Params file must contain a mapping: {path}", param_hint="--params")
    return data


# =============================================================================
# render command
# =============================================================================


@app.command()
def render(
    template: Annotated[str, typer.Argument(help="Template name of the page (e.g. home)")],
    var: Annotated[
        list[str] | None,
        typer.Option("--var", "-V", help="Template variable as KEY=VALUE (repeatable)"),
    ] = None,
    params: Annotated[
        Path | None,
        typer.Option(
            "--params",
            "-p",
            help="YAML file with page params (highest precedence)",
            exists=True,
            dir_okay=False,
        ),
    ] = None,
    block: Annotated[
        list[str] | None,
        typer.Option("--block", "-b", help="Render only this block (repeatable, in order)"),
    ] = None,
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Write output to a file instead of stdout"),
    ] = None,
) -> None:
    """Render a page template, or selected blocks of it.

    Exit codes:
        0: Rendered successfully
        1: Invalid template name, missing template, or rendering error
    """
    cli_vars = _parse_vars(var or [])
    page = Page(template=template, params=_load_params(params))

    def add_cli_vars(scope: dict[str, Any]) -> dict[str, Any]:
        return {**scope, **cli_vars}

    renderer = PageRenderer(_get_config(), scope_contributors=[add_cli_vars])

    try:
        if block:
            content = renderer.render_blocks(page, block)
        else:
            content = renderer.render_page(page)
    except (PagewrightError, TemplateError, NotImplementedError) as e:
        _logger.error(str(e))
        raise typer.Exit(1)

    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(content, encoding="utf-8")
        _logger.info(f"Wrote {len(content)} characters to {output}")
    else:
        typer.echo(content, nl=False)


# =============================================================================
# check command
# =============================================================================


@app.command()
def check(
    template: Annotated[str, typer.Argument(help="Template name to resolve")],
) -> None:
    """Show which template file a template name resolves to.

    Exit codes:
        0: A template (specific or fallback) was found
        1: Invalid name or no template found
    """
    orchestrator = PageRenderer(_get_config()).orchestrator

    try:
        path = orchestrator.find_template(template)
    except TemplateNotFound as e:
        _logger.error(f"No template found for '{template}'")
        for candidate in e.searched:
            typer.echo(f"  ❌ {candidate}")
        raise typer.Exit(1)
    except PagewrightError as e:
        _logger.error(str(e))
        raise typer.Exit(1)

    fallback = path.name != f"{template}{orchestrator.resolver.extension}"
    suffix = " (fallback)" if fallback else ""
    typer.echo(f"✅ {template} -> {path}{suffix}")


# =============================================================================
# blocks command
# =============================================================================


@app.command()
def blocks(
    template: Annotated[str, typer.Argument(help="Template name to inspect")],
) -> None:
    """List the blocks renderable from a page template (own and inherited)."""
    orchestrator = PageRenderer(_get_config()).orchestrator

    try:
        path = orchestrator.find_template(template)
        names = orchestrator.engine.fragments(path)
    except (PagewrightError, TemplateError) as e:
        _logger.error(str(e))
        raise typer.Exit(1)

    for name in names:
        typer.echo(name)


# =============================================================================
# init command
# =============================================================================


@app.command()
def init(
    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite existing config"),
    ] = False,
) -> None:
    """Initialize pagewright configuration.

    Creates ./pagewright.yaml with default settings.
    """
    config_file = Path("pagewright.yaml")

    if config_file.exists() and not force:
        _logger.error(f"Config already exists: {config_file}")
        _logger.info("Use --force to overwrite")
        raise typer.Exit(1)

    config_file.write_text(create_default_config(), encoding="utf-8")
    _logger.info(f"Created {config_file}")
    typer.echo(f"✅ Created {config_file}")


if __name__ == "__main__":
    app()
