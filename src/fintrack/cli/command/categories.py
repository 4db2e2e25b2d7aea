from __future__ import annotations

"""
List the categories defined in config/categories.yml.
"""

from rich.table import Table

from fintrack.errors import FinTrackError
from fintrack.model.category_io import load_categories_config
from fintrack.workspace import Workspace

from .util import console


def run(*, workspace: Workspace) -> int:
    """Show configured categories with their colors.

    Returns:
        Exit code (0 = success, 1 = unreadable config)
    """
    try:
        config = load_categories_config(workspace.categories_config)
    except FinTrackError as e:
        console.print(f"[red]Error:[/] {e}")
        return 1

    if not config.categories:
        console.print(
            "[yellow]No categories defined.[/] Run 'fintrack init' or edit config/categories.yml."
        )
        return 0

    table = Table(title="Categories", show_lines=False)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Name", style="bold")
    table.add_column("Color")

    for category in config.to_categories():
        color = category.color or ""
        swatch = f"[{color}]■[/] {color}" if color else "[dim](none)[/]"
        table.add_row(str(category.id), category.name, swatch)

    console.print(table)
    return 0
