"""Human-readable renderings of a `GridConfig`.

Every leaf path is listed with its value, paths padded to the longest one.
When a limit is given, entries past it are dropped and the truncation is
marked with an ellipsis.
"""
from typing import Optional

from rich.table import Table
from rich.text import Text

from ..core.grid_config import GridConfig

ELLIPSIS = "…"


def format_config(config: GridConfig, limit: Optional[int] = None) -> str:
    """Formats a configuration as plain text.

    Args:
        config (GridConfig): The configuration to format.
        limit (Optional[int]): The maximum number of entries to list. None
            lists all of them.

    Returns:
        str: ``GridConfig()`` for an empty configuration, otherwise an entry
        count header followed by one ``path = value`` line per entry.
    """
    all_pairs = list(config)
    if not all_pairs:
        return "GridConfig()"

    n = len(all_pairs)
    width = max(len(key) for key, _ in all_pairs)
    lines = [f"GridConfig with {n} entr{'y' if n == 1 else 'ies'}:"]
    for key, value in all_pairs[:limit]:
        lines.append(f"  {key.ljust(width)} = {value!r}")
    if limit is not None and n > limit:
        lines.append(f"  {ELLIPSIS}")
    return "\n".join(lines)


def render_table(config: GridConfig, title: Optional[str] = None, limit: Optional[int] = None) -> Table:
    """Builds a rich table of the leaf entries of a configuration.

    Args:
        config (GridConfig): The configuration to render.
        title (Optional[str]): The table title. Defaults to the entry count.
        limit (Optional[int]): The maximum number of rows. None shows all.

    Returns:
        Table: A two-column (Key, Value) table. A truncated table ends with an
        ellipsis row and carries a "showing X of N entries" caption.
    """
    all_pairs = list(config)
    n = len(all_pairs)
    table = Table(title=title or f"GridConfig with {n} entr{'y' if n == 1 else 'ies'}")
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Value")
    for key, value in all_pairs[:limit]:
        table.add_row(Text(key), Text(repr(value)))
    if limit is not None and n > limit:
        table.add_row(ELLIPSIS, "")
        table.caption = f"showing {limit} of {n} entries"
    return table
