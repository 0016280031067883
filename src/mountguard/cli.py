"""
CLI entry point for mountguard.

A small diagnostic front end for server operators: create and inspect the
config file, and dry-run mount/equip attempts against it.

Commands:
    init-config   Write a config file with the built-in defaults
    show-config   Show the effective configuration
    check-mount   Evaluate a mount attempt
    check-equip   Evaluate an equip attempt while mounted

Exit codes: 0 = allowed / ok, 1 = denied or error.
"""

import json
import traceback
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from mountguard import __version__
from mountguard.config import ConfigStore
from mountguard.errors import MountGuardError
from mountguard.host import CatalogMessageSink, GearGuard, StaticPermissions
from mountguard.schema import ItemRef, PolicyConfig, PolicyDecision

DEFAULT_CONFIG_PATH = Path("mountguard.yaml")
CLI_ACTOR_ID = "cli"

app = typer.Typer(
    name="mountguard",
    help="Restrict vehicle mounting and equipment changes based on worn gear.",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold]mountguard[/bold] version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """
    mountguard - gear restrictions for vehicles.
    """
    pass


ConfigOption = Annotated[
    Path,
    typer.Option(
        "--config",
        "-c",
        help="Path to the config YAML file.",
        resolve_path=True,
    ),
]

JsonOption = Annotated[
    bool,
    typer.Option(
        "--json",
        help="Output results in JSON format.",
    ),
]

BypassOption = Annotated[
    bool,
    typer.Option(
        "--bypass",
        help="Evaluate as an actor holding the bypass permission.",
    ),
]


DebugOption = Annotated[
    bool,
    typer.Option("--debug", help="Enable debug mode with full error tracebacks."),
]


@app.command("init-config")
def init_config(
    path: Annotated[
        Path,
        typer.Argument(help="Where to write the config file.", resolve_path=True),
    ] = DEFAULT_CONFIG_PATH,
    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite an existing file."),
    ] = False,
) -> None:
    """
    Write a config file with the built-in defaults.

    Example:
        $ mountguard init-config server/mountguard.yaml
    """
    if path.exists() and not force:
        console.print(f"[red]Config already exists: {path}[/red] (use --force to overwrite)")
        raise typer.Exit(code=1)

    try:
        ConfigStore(path).save(PolicyConfig())
    except MountGuardError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(code=1)

    console.print(f"[green]✓[/green] Wrote default config to {path}")


@app.command("show-config")
def show_config(
    config_path: ConfigOption = DEFAULT_CONFIG_PATH,
    json_output: JsonOption = False,
) -> None:
    """
    Show the effective configuration.

    A missing or invalid file shows the defaults that would be used.
    """
    config = _load_config(config_path)

    if json_output:
        print(json.dumps(config.to_document(), indent=2))
        return

    if not config_path.exists():
        console.print(f"[yellow]No config at {config_path}; showing defaults[/yellow]")

    table = Table(show_header=True, header_style="bold")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")
    table.add_row("Monitored vehicles", "\n".join(config.monitored_vehicle_types) or "[dim]none[/dim]")
    table.add_row("Blocked items", "\n".join(config.blocked_items) or "[dim]none[/dim]")
    table.add_row("Require all items", str(config.require_all_items).lower())
    console.print(table)
    console.print(
        f"[dim]Monitoring {len(config.monitored_vehicle_types)} vehicle type(s), "
        f"blocking {len(config.blocked_items)} item(s)[/dim]"
    )


@app.command("check-mount")
def check_mount(
    vehicle: Annotated[
        str,
        typer.Argument(help="Vehicle short prefab name, e.g. minicopter.entity."),
    ],
    wear: Annotated[
        Optional[list[str]],
        typer.Option(
            "--wear",
            "-w",
            help="Worn item as SHORTNAME or SHORTNAME=Display Name. Repeatable.",
        ),
    ] = None,
    bypass: BypassOption = False,
    config_path: ConfigOption = DEFAULT_CONFIG_PATH,
    json_output: JsonOption = False,
    debug: DebugOption = False,
) -> None:
    """
    Evaluate a mount attempt against the config.

    Example:
        $ mountguard check-mount minicopter.entity -w "heavy.plate.helmet=Heavy Plate Helmet"
    """
    try:
        worn = [_parse_item(spec) for spec in wear or []]
    except ValueError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(code=1)

    guard, delivered = _build_guard(config_path, bypass)
    try:
        decision = guard.can_mount(CLI_ACTOR_ID, worn, vehicle)
    except Exception as e:
        console.print(f"[red]Evaluation error: {escape(str(e))}[/red]")
        if debug:
            console.print(f"[dim]{escape(traceback.format_exc())}[/dim]")
        raise typer.Exit(code=1)
    finally:
        guard.on_stop()

    _report(decision, delivered, json_output)


@app.command("check-equip")
def check_equip(
    item: Annotated[
        str,
        typer.Argument(help="Item as SHORTNAME or SHORTNAME=Display Name."),
    ],
    mounted_on: Annotated[
        Optional[str],
        typer.Option(
            "--mounted-on",
            "-m",
            help="Vehicle the actor is mounted on (omit when not mounted).",
        ),
    ] = None,
    bypass: BypassOption = False,
    config_path: ConfigOption = DEFAULT_CONFIG_PATH,
    json_output: JsonOption = False,
    debug: DebugOption = False,
) -> None:
    """
    Evaluate an equip attempt against the config.

    Example:
        $ mountguard check-equip heavy.plate.pants --mounted-on rowboat
    """
    try:
        candidate = _parse_item(item)
    except ValueError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        raise typer.Exit(code=1)

    guard, delivered = _build_guard(config_path, bypass)
    try:
        decision = guard.can_wear(CLI_ACTOR_ID, candidate, mounted_on)
    except Exception as e:
        console.print(f"[red]Evaluation error: {escape(str(e))}[/red]")
        if debug:
            console.print(f"[dim]{escape(traceback.format_exc())}[/dim]")
        raise typer.Exit(code=1)
    finally:
        guard.on_stop()

    _report(decision, delivered, json_output)


# =============================================================================
# Helpers
# =============================================================================


def _load_config(config_path: Path) -> PolicyConfig:
    return ConfigStore(config_path).load_file(write_defaults=False)


def _build_guard(config_path: Path, bypass: bool) -> tuple[GearGuard, list[str]]:
    """Build a guard over the config file that collects delivered messages."""
    delivered: list[str] = []
    permissions = StaticPermissions()
    if bypass:
        permissions.grant(CLI_ACTOR_ID)

    store = ConfigStore(config=_load_config(config_path))
    guard = GearGuard(
        store,
        permissions,
        CatalogMessageSink(lambda _actor_id, text: delivered.append(text)),
    )
    return guard, delivered


def _parse_item(spec: str) -> ItemRef:
    """Parse SHORTNAME or SHORTNAME=Display Name."""
    short_name, _, display_name = spec.partition("=")
    short_name = short_name.strip()
    if not short_name:
        msg = f"Invalid item: {spec!r}"
        raise ValueError(msg)
    return ItemRef(short_name=short_name, display_name=display_name.strip() or None)


def _report(decision: PolicyDecision, delivered: list[str], json_output: bool) -> None:
    if json_output:
        output = decision.model_dump(mode="json")
        output["delivered"] = delivered
        print(json.dumps(output, indent=2))
    elif decision.allowed:
        console.print(f"[green]✓ allowed[/green] {decision.reason}")
    else:
        console.print(f"[red]✗ denied[/red] {decision.reason}")
        for text in delivered:
            console.print(f"[yellow]{text}[/yellow]")

    raise typer.Exit(code=0 if decision.allowed else 1)


if __name__ == "__main__":
    app()
