"""Main CLI entry point for typespecific.

Provides command-line inspection of handler resolution and configuration.
"""

import sys
from pathlib import Path
from typing import Optional

import click
import orjson
from rich.console import Console
from rich.table import Table

from typespecific.base import (
    HandlerRegistry,
    Resolution,
    ResolutionFailure,
    Scope,
    load_symbol,
)
from typespecific.config import RegistryConfig

# Global console for Rich output
console = Console()

_OUTCOME_STYLES = {
    "resolved": "green",
    "resolution_failure": "yellow",
    "construction_failure": "red",
}


def load_config(config_path: Optional[str] = None) -> RegistryConfig:
    """Build the effective configuration.

    Priority (highest first):
    1. TYPESPECIFIC_* environment variables
    2. Config file (--config, or ~/.typespecific/config.json)
    3. Defaults
    """
    return RegistryConfig.from_env(RegistryConfig.load(config_path))


def resolution_to_dict(resolution: Resolution) -> dict:
    """Convert a Resolution to a JSON-serializable dict."""
    handler = resolution.handler
    return {
        "subject": _describe(resolution.subject),
        "found": resolution.found,
        "handler": _describe(type(handler)) if handler is not None else None,
        "source": resolution.source,
        "attempts": [
            {
                "strategy": a.strategy,
                "target": a.target,
                "outcome": a.outcome.value,
                "error": str(a.error) if a.error is not None else None,
            }
            for a in resolution.attempts
        ],
    }


def _describe(obj) -> str:
    module = getattr(obj, "__module__", None)
    name = getattr(obj, "__qualname__", None)
    if module and name:
        return f"{module}.{name}"
    return repr(obj)


@click.group()
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(dir_okay=False),
    help="Path to config file (default: ~/.typespecific/config.json)",
)
@click.pass_context
def cli(ctx, config_path):
    """typespecific CLI - Inspect type-specific handler resolution.

    Settings come from the config file, overridden by TYPESPECIFIC_*
    environment variables, overridden by command options.
    """
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


@cli.command("resolve")
@click.argument("subject")
@click.option("--postfix", "-p", help="Conventional class name postfix (e.g. Renderer)")
@click.option("--namespace", "-n", help="Module searched first for handlers")
@click.option(
    "--no-subject-fallback",
    is_flag=True,
    help="Don't search the subject type's module",
)
@click.option(
    "--scope",
    "-s",
    type=click.Choice(["singleton", "prototype"]),
    help="Handler scope",
)
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def resolve(ctx, subject, postfix, namespace, no_subject_fallback, scope, as_json):
    """Resolve the handler for SUBJECT and show every attempt.

    SUBJECT is the qualified name of the subject type, as
    'package.module:Name' or 'package.module.Name'.

    Example:
        typespecific resolve shapes.geometry:Circle -p Renderer
        typespecific resolve shapes.geometry.Circle -p Renderer -n shapes.render --json
    """
    try:
        settings = load_config(ctx.obj.get("config_path"))
    except (OSError, ValueError, TypeError) as e:
        console.print(f"[red]✗[/red] Invalid configuration: {e}", style="red")
        sys.exit(1)

    if postfix:
        settings.postfix = postfix
    if namespace:
        settings.handler_namespace = namespace
    if no_subject_fallback:
        settings.fallback_to_subject_namespace = False
    if scope:
        settings.scope = Scope.parse(scope)

    try:
        subject_type = load_symbol(subject)
    except ResolutionFailure as e:
        console.print(f"[red]✗[/red] Cannot load subject type: {e}", style="red")
        sys.exit(1)

    registry = HandlerRegistry.from_config(settings)
    resolution = registry.resolve(subject_type)

    if as_json:
        data = resolution_to_dict(resolution)
        click.echo(orjson.dumps(data, option=orjson.OPT_INDENT_2).decode())
        sys.exit(0 if resolution.found else 1)

    if not resolution.attempts:
        console.print(
            "[yellow]No strategies to try[/yellow] (set a postfix with --postfix)"
        )
    else:
        table = Table(title=f"Resolution of {_describe(subject_type)}")
        table.add_column("#", justify="right", style="dim")
        table.add_column("Strategy", style="cyan", no_wrap=True)
        table.add_column("Target", style="white")
        table.add_column("Outcome")
        table.add_column("Error", style="dim")

        for i, attempt in enumerate(resolution.attempts, 1):
            outcome = attempt.outcome.value
            style = _OUTCOME_STYLES.get(outcome, "white")
            table.add_row(
                str(i),
                attempt.strategy,
                attempt.target or "",
                f"[{style}]{outcome}[/{style}]",
                str(attempt.error) if attempt.error is not None else "",
            )
        console.print(table)

    if resolution.found:
        console.print(
            f"[green]✓[/green] Found {_describe(type(resolution.handler))} "
            f"(via {resolution.source})"
        )
    else:
        console.print(f"[red]✗[/red] No handler found for {_describe(subject_type)}")
        sys.exit(1)


@cli.group()
def config():
    """Show or write registry configuration."""
    pass


@config.command("show")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@click.pass_context
def config_show(ctx, as_json):
    """Show the effective configuration.

    Example:
        typespecific config show
        typespecific -c ./typespecific.json config show --json
    """
    try:
        effective = load_config(ctx.obj.get("config_path"))
    except (OSError, ValueError, TypeError) as e:
        console.print(f"[red]✗[/red] Invalid configuration: {e}", style="red")
        sys.exit(1)

    data = effective.to_dict()
    if as_json:
        click.echo(orjson.dumps(data, option=orjson.OPT_INDENT_2).decode())
        return

    table = Table(title="Registry configuration")
    table.add_column("Setting", style="cyan", no_wrap=True)
    table.add_column("Value", style="white")
    for key, value in data.items():
        table.add_row(key, "" if value is None else str(value))
    console.print(table)


@config.command("init")
@click.option("--postfix", "-p", help="Conventional class name postfix")
@click.option("--namespace", "-n", help="Module searched first for handlers")
@click.option(
    "--scope",
    "-s",
    type=click.Choice(["singleton", "prototype"]),
    default="singleton",
    help="Handler scope",
)
@click.option("--force", "-f", is_flag=True, help="Overwrite an existing file")
@click.pass_context
def config_init(ctx, postfix, namespace, scope, force):
    """Write a config file.

    Example:
        typespecific -c ./typespecific.json config init -p Renderer
    """
    from typespecific.config import DEFAULT_CONFIG_PATH

    path = Path(ctx.obj.get("config_path") or DEFAULT_CONFIG_PATH)
    if path.exists() and not force:
        console.print(
            f"[red]✗[/red] Config file already exists: {path} (use --force)",
            style="red",
        )
        sys.exit(1)

    RegistryConfig(scope=scope, postfix=postfix, handler_namespace=namespace).save(path)
    console.print(f"[green]✓[/green] Wrote config to {path}")


if __name__ == "__main__":
    cli()
