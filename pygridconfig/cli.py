"""Defines the command-line interface for the gridcfg application.

This module uses the `click` library to create the `gridcfg` command. It
loads configuration sources, displays and queries them, and unfolds them into
the grid of concrete configurations they describe.
"""
import json
import sys
import io
import click
import logging
from typing import Any, Dict, Optional, Tuple

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from halo import Halo

from .core.config import Config
from .core.exceptions import GridConfigError
from .core.grid_config import ALL, GridConfig, unfold as unfold_config
from .core.loader import discover_formats, load_config
from .utils.display import render_table

# Configure rich console for output.
console = Console()

# Set up basic logging.
logger = logging.getLogger(__name__)

FORMAT_OPTION_HELP = "Source format (json, toml, yaml). Detected from the file suffix by default."


class AliasedGroup(click.Group):
    """A custom click Group that supports command aliases and case-insensitivity."""

    def __init__(self, *args, **kwargs):
        """Initializes the aliased group."""
        super().__init__(*args, **kwargs)
        self._aliases: Dict[str, str] = {}

    def get_command(self, ctx: click.Context, cmd_name: str) -> Optional[click.Command]:
        """Gets a command by name, checking for aliases and prefixes.

        Args:
            ctx: The click context.
            cmd_name: The command name entered by the user.

        Returns:
            The matched click command, or None.
        """
        cmd_name = cmd_name.lower()
        # Exact match
        rv = super().get_command(ctx, cmd_name)
        if rv is not None:
            return rv
        # Alias match
        if cmd_name in self._aliases:
            return super().get_command(ctx, self._aliases[cmd_name])
        # Prefix match
        matches = [x for x in self.list_commands(ctx) if x.startswith(cmd_name)]
        if not matches:
            return None
        if len(matches) == 1:
            return super().get_command(ctx, matches[0])
        ctx.fail(f"Ambiguous command: '{cmd_name}'. Matches: {', '.join(sorted(matches))}")
        return None

    def add_alias(self, alias: str, command_name: str) -> None:
        """Adds an alias for a command.

        Args:
            alias: The alias to add.
            command_name: The name of the command to alias.
        """
        self._aliases[alias.lower()] = command_name.lower()


def _load(source: str, fmt: Optional[str], config_obj: Config) -> GridConfig:
    """Loads a source, exiting with an error message on failure."""
    fmt = fmt or config_obj.get("default_format", "auto")
    try:
        return load_config(source, fmt=fmt, config=config_obj)
    except GridConfigError as e:
        console.print(f"[red]Could not load {source}: {e}[/red]")
        sys.exit(1)


def _to_json(value: Any) -> Any:
    return value.as_dict() if isinstance(value, GridConfig) else value


@click.group(cls=AliasedGroup, invoke_without_command=True, context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="pygridconfig")
@click.option("--verbose", is_flag=True, help="Enable verbose output.")
@click.option("--debug", is_flag=True, help="Enable debug logging.")
@click.option("--settings", "settings_path", type=click.Path(exists=True, dir_okay=False), help="Path to a custom settings file.")
@click.pass_context
def main(ctx: click.Context, verbose: bool, debug: bool, settings_path: Optional[str]) -> None:
    """Inspect hierarchical configurations and unfold them into grids.

    A configuration whose entries hold lists describes a grid of concrete
    configurations, one per combination of list items. gridcfg loads JSON,
    TOML and YAML sources, shows their entries by dotted path, and expands
    them into that grid.
    """
    if sys.platform == "win32" and isinstance(sys.stdout, io.TextIOWrapper):
        sys.stdout.reconfigure(encoding='utf-8')
    ctx.obj = Config(config_path=settings_path)
    verbose = verbose or ctx.obj.get("verbose", False)
    log_level = logging.DEBUG if debug else logging.INFO if verbose else logging.WARNING
    logging.basicConfig(level=log_level, format='%(asctime)s - %(levelname)s - %(message)s')
    logger.debug("Debug mode enabled.")
    if not ctx.obj.get("display.colors", True):
        console.no_color = True

    if ctx.invoked_subcommand is None:
        console.print("Use 'gridcfg show <file>' to inspect a configuration, or 'gridcfg --help' for more commands.")


@main.command()
@click.argument("source", type=str)
@click.option("--format", "-f", "fmt", type=str, help=FORMAT_OPTION_HELP)
@click.option("--prefix", "-p", type=str, help="Only show the entries under this group.")
@click.option("--limit", "-n", type=int, help="Maximum number of entries to show.")
@click.option("--no-limit", is_flag=True, help="Show every entry.")
@click.pass_obj
def show(config_obj: Config, source: str, fmt: Optional[str], prefix: Optional[str], limit: Optional[int], no_limit: bool) -> None:
    """Show every entry of a configuration by its dotted path."""
    grid_config = _load(source, fmt, config_obj)
    if prefix:
        try:
            selected = set(grid_config.keys(prefix))
        except GridConfigError as e:
            console.print(f"[red]{e}[/red]")
            sys.exit(1)
        grid_config = grid_config.filter(lambda key, _: key in selected)
    if no_limit:
        limit = None
    elif limit is None:
        limit = config_obj.display_limit()
    console.print(render_table(grid_config, title=source, limit=limit))


@main.command()
@click.argument("source", type=str)
@click.argument("key", type=str)
@click.option("--format", "-f", "fmt", type=str, help=FORMAT_OPTION_HELP)
@click.option("--default", "-d", type=str, help="Value printed when the key does not exist.")
@click.pass_obj
def get(config_obj: Config, source: str, key: str, fmt: Optional[str], default: Optional[str]) -> None:
    """Print the value at a dotted KEY of a configuration."""
    grid_config = _load(source, fmt, config_obj)
    try:
        value = grid_config.get(key, default=default)
    except GridConfigError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)
    if isinstance(value, GridConfig):
        console.print(render_table(value, title=key, limit=config_obj.display_limit()))
    else:
        console.print(json.dumps(value, default=str), markup=False, highlight=False, soft_wrap=True)


@main.command()
@click.argument("source", type=str)
@click.argument("prefix", type=str, required=False)
@click.option("--format", "-f", "fmt", type=str, help=FORMAT_OPTION_HELP)
@click.pass_obj
def keys(config_obj: Config, source: str, prefix: Optional[str], fmt: Optional[str]) -> None:
    """List the leaf paths of a configuration, optionally under PREFIX."""
    grid_config = _load(source, fmt, config_obj)
    try:
        all_keys = grid_config.keys(prefix)
    except GridConfigError as e:
        console.print(f"[red]{e}[/red]")
        sys.exit(1)
    for key in all_keys:
        console.print(key, markup=False, highlight=False, soft_wrap=True)


@main.command()
@click.argument("source", type=str)
@click.argument("unfold_keys", metavar="[KEYS]...", nargs=-1)
@click.option("--all", "all_keys", is_flag=True, help="Unfold every entry.")
@click.option("--format", "-f", "fmt", type=str, help=FORMAT_OPTION_HELP)
@click.option("--json", "json_output", is_flag=True, help="Output the unfolded configurations as a JSON array.")
@click.pass_obj
def unfold(config_obj: Config, source: str, unfold_keys: Tuple[str, ...], all_keys: bool, fmt: Optional[str], json_output: bool) -> None:
    """Unfold the list-valued entries at KEYS into every combination.

    Each KEY is a dotted path. A key naming a group unfolds every entry of the
    group. With --all, every entry of the configuration is unfolded.
    """
    if all_keys and unfold_keys:
        console.print("[red]Error: --all cannot be combined with explicit keys.[/red]")
        sys.exit(1)

    grid_config = _load(source, fmt, config_obj)
    with Halo(text=f"Unfolding {source}...", spinner="dots", enabled=not json_output) as spinner:
        try:
            variants = unfold_config(grid_config, ALL) if all_keys else unfold_config(grid_config, *unfold_keys)
        except GridConfigError as e:
            spinner.fail(f"Unfolding failed for {source}: {e}")
            sys.exit(1)
        spinner.succeed(f"Unfolded {source} into {len(variants)} configuration(s)")

    if json_output:
        console.print_json(json.dumps([variant.as_dict() for variant in variants], default=str))
        return

    limit = config_obj.display_limit()
    for i, variant in enumerate(variants, start=1):
        console.print(render_table(variant, title=f"Configuration {i} of {len(variants)}", limit=limit))


@main.command()
def formats() -> None:
    """List the supported configuration formats."""
    table = Table(title="Supported Formats")
    table.add_column("Format", style="cyan")
    table.add_column("Aliases", style="magenta")
    table.add_column("Extensions")
    table.add_column("Description")
    for format_cls in discover_formats():
        table.add_row(format_cls.name, ", ".join(format_cls.aliases), ", ".join(format_cls.extensions), format_cls.description)
    console.print(table)


@main.command()
@click.argument("action", type=click.Choice(['get', 'list']), required=True)
@click.argument("key", type=str, required=False)
@click.pass_obj
def config(config_obj: Config, action: str, key: Optional[str]) -> None:
    """Inspect the gridcfg settings.

    \b
    ACTION:
        get <key>       Get a setting.
        list            List all current settings.
    """
    if action == "list":
        console.print(Panel(json.dumps(config_obj.settings.as_dict(), indent=2), title="Current Settings"))
    elif action == "get":
        if not key:
            console.print("[red]Error: 'get' action requires a key.[/red]")
            sys.exit(1)
        console.print(json.dumps(_to_json(config_obj.get(key)), default=str), markup=False, highlight=False, soft_wrap=True)


main.add_alias('ls', 'keys')
main.add_alias('u', 'unfold')

if __name__ == "__main__":
    main()
