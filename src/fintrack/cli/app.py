from __future__ import annotations

"""
FinTrack CLI Wrapper (Typer + Rich)

Local tooling around the FinTrack domain engine: workspace setup, category
listing, merchant key inspection, split previews, status checks and the
event journal.

All paths are resolved from a single workspace root:
  --data-dir / FINTRACK_DATA env var / current working directory
"""

import logging
from pathlib import Path
from typing import List, Optional

import typer

from fintrack.workspace import Workspace

APP_HELP = "FinTrack CLI (local-only)"

app = typer.Typer(no_args_is_help=True, add_completion=False, help=APP_HELP)


@app.callback()
def main(
    ctx: typer.Context,
    data_dir: Optional[Path] = typer.Option(
        None,
        "--data-dir",
        envvar="FINTRACK_DATA",
        help="Workspace root directory (default: current directory)",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log service activity"),
):
    """FinTrack CLI: all paths resolved from a single workspace root."""
    logging.basicConfig(level=logging.INFO if verbose else logging.WARNING)
    ctx.ensure_object(dict)
    ctx.obj["workspace"] = Workspace.resolve(data_dir)


def _ws(ctx: typer.Context) -> Workspace:
    return ctx.obj["workspace"]


@app.command()
def init(ctx: typer.Context):
    """Initialize a workspace with directories, starter categories and the journal.

    Safe to run on an existing workspace; skips anything that already exists.

    Examples:
      fintrack --data-dir ~/cards init
      fintrack init
    """
    from fintrack.cli.command import init as cmd_init

    code = cmd_init.run(workspace=_ws(ctx))
    raise typer.Exit(code=code)


@app.command()
def categories(ctx: typer.Context):
    """List the categories defined in config/categories.yml."""
    from fintrack.cli.command import categories as cmd_categories

    code = cmd_categories.run(workspace=_ws(ctx))
    raise typer.Exit(code=code)


@app.command()
def normalize(
    descriptions: List[str] = typer.Argument(..., help="Raw statement descriptions"),
):
    """Show the merchant key each description normalizes to.

    Examples:
      fintrack normalize "UBER *TRIP 12345 SAO PAULO BR" "PAG*IFOOD RESTAURANTE"
    """
    from fintrack.cli.command import normalize as cmd_normalize

    code = cmd_normalize.run(descriptions=descriptions)
    raise typer.Exit(code=code)


@app.command()
def split(
    amount: str = typer.Option(..., "--amount", "-a", help="Item amount (e.g., 100.00)"),
    participants: List[str] = typer.Option(..., "--participant", "-p", help="Participant name (repeatable)"),
    amounts: Optional[List[str]] = typer.Option(
        None, "--share", "-s", help="Amount for the participant at the same position (repeatable)"
    ),
):
    """Preview an item split: equal by default, or by per-participant amounts.

    Examples:
      fintrack split --amount 100 -p Ana -p Bruno -p Carla
      fintrack split --amount 90 -p Ana -s 60 -p Bruno -s 30
    """
    from fintrack.cli.command import split as cmd_split

    code = cmd_split.run(amount=amount, participants=participants, amounts=amounts or None)
    raise typer.Exit(code=code)


@app.command()
def status(
    total: str = typer.Option(..., "--total", help="Invoice total"),
    paid: str = typer.Option("0", "--paid", help="Amount paid so far"),
    due: str = typer.Option(..., "--due", help="Due date (YYYY-MM-DD)"),
    today: Optional[str] = typer.Option(None, "--today", help="Evaluate as of this date (YYYY-MM-DD)"),
):
    """Show the status an invoice with these numbers has.

    Examples:
      fintrack status --total 100 --due 2024-01-10 --today 2024-02-01
      fintrack status --total 100 --paid 40 --due 2024-01-10
    """
    from fintrack.cli.command import status as cmd_status

    code = cmd_status.run(total=total, paid=paid, due=due, today=today)
    raise typer.Exit(code=code)


@app.command()
def journal(
    ctx: typer.Context,
    limit: int = typer.Option(20, "--limit", "-n", min=1, help="Max number of events to show"),
    event_type: Optional[str] = typer.Option(None, "--type", help="Only events of this type (e.g., InvoicePaymentRecorded)"),
    aggregate_type: Optional[str] = typer.Option(None, "--aggregate-type", help="invoice, invoice_item, item_share or merchant_rule"),
    aggregate_id: Optional[str] = typer.Option(None, "--aggregate-id", help="Aggregate identifier"),
):
    """Show the most recent events of the journal.

    Examples:
      fintrack journal
      fintrack journal --type MerchantRuleLearned
      fintrack journal --aggregate-type invoice --aggregate-id 1
    """
    from fintrack.cli.command import journal as cmd_journal

    code = cmd_journal.run(
        workspace=_ws(ctx),
        limit=limit,
        event_type=event_type,
        aggregate_type=aggregate_type,
        aggregate_id=aggregate_id,
    )
    raise typer.Exit(code=code)


if __name__ == "__main__":
    app()  # pragma: no cover
