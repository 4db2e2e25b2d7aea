from __future__ import annotations

"""
Show the event journal.
"""

from typing import Optional

from rich.table import Table

from fintrack.model.events import Event
from fintrack.storage.event_store import EventStore
from fintrack.workspace import Workspace

from .util import console

_SKIPPED_FIELDS = {
    "event_id",
    "event_type",
    "event_timestamp",
    "aggregate_type",
    "aggregate_id",
    "metadata",
}


def _summary(event: Event) -> str:
    data = event.model_dump(mode="json", exclude=_SKIPPED_FIELDS, exclude_none=True)
    return ", ".join(f"{key}={value}" for key, value in data.items())


def run(
    *,
    workspace: Workspace,
    limit: int = 20,
    event_type: Optional[str] = None,
    aggregate_type: Optional[str] = None,
    aggregate_id: Optional[str] = None,
) -> int:
    """List journaled events, newest last.

    Returns:
        Exit code (0 = success, 1 = bad filter)
    """
    if not workspace.event_store_path.exists():
        console.print("[yellow]No journal yet.[/] Run 'fintrack init' first.")
        return 0
    if (aggregate_type is None) != (aggregate_id is None):
        console.print("[red]Error:[/] --aggregate-type and --aggregate-id go together")
        return 1

    store = EventStore(workspace.event_store_path)
    if aggregate_type is not None:
        events = store.get_events(aggregate_type, aggregate_id)
    elif event_type is not None:
        events = store.get_events_by_type(event_type)
    else:
        events = store.get_recent_events(limit)
    events = events[-limit:]

    if not events:
        console.print("[dim]Journal is empty.[/dim]")
        return 0

    table = Table(title=f"Journal ({len(events)} of {store.get_latest_sequence_number()})")
    table.add_column("When", style="dim")
    table.add_column("Event", style="bold")
    table.add_column("Aggregate")
    table.add_column("Details", overflow="fold")
    for event in events:
        table.add_row(
            event.event_timestamp.strftime("%Y-%m-%d %H:%M:%S"),
            event.event_type,
            f"{event.aggregate_type}:{event.aggregate_id}",
            _summary(event),
        )
    console.print(table)
    return 0
