"""Initialize a new fintrack workspace directory."""

from __future__ import annotations

from fintrack.model.category import CategoryConfig
from fintrack.model.category_io import STARTER_CATEGORIES, save_categories_config
from fintrack.storage.event_store import EventStore
from fintrack.workspace import Workspace

from .util import console


def run(*, workspace: Workspace) -> int:
    """Create the data and config directories, starter categories and the journal.

    Skips anything that already exists (safe to run on an existing workspace).

    Args:
        workspace: Workspace to initialize

    Returns:
        Exit code (0 = success)
    """
    root = workspace.root
    console.print(f"[bold cyan]Initializing workspace:[/] {root}\n")

    created = []
    skipped = []

    for directory in [workspace.data_dir, workspace.config_dir]:
        if directory.exists():
            skipped.append(str(directory.relative_to(root)) + "/")
        else:
            directory.mkdir(parents=True, exist_ok=True)
            created.append(str(directory.relative_to(root)) + "/")

    if workspace.categories_config.exists():
        skipped.append(str(workspace.categories_config.relative_to(root)))
    else:
        save_categories_config(
            workspace.categories_config,
            CategoryConfig(categories=list(STARTER_CATEGORIES)),
        )
        created.append(str(workspace.categories_config.relative_to(root)))

    if workspace.event_store_path.exists():
        skipped.append(str(workspace.event_store_path.relative_to(root)))
    else:
        EventStore(workspace.event_store_path)
        created.append(str(workspace.event_store_path.relative_to(root)))

    if created:
        console.print("[green]Created:[/]")
        for path in created:
            console.print(f"  {path}")

    if skipped:
        console.print("[dim]Already exists (skipped):[/dim]")
        for path in skipped:
            console.print(f"  [dim]{path}[/dim]")

    if not created:
        console.print("[green]Workspace already fully initialized.[/]")
    else:
        console.print(f"\n[green]Workspace ready at {root}[/]")
        console.print("\n[dim]Next steps:[/dim]")
        console.print("  1. Edit config/categories.yml to define your categories")
        console.print("  2. Run: fintrack normalize \"UBER *TRIP SAO PAULO\"")

    return 0
