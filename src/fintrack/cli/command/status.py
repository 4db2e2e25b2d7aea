from __future__ import annotations

"""
Derive an invoice status from its numbers and dates.
"""

from datetime import date
from typing import Optional

from fintrack.errors import FinTrackError
from fintrack.model.invoice import derive_status
from fintrack.model.money import to_money

from .util import console, fmt_status, parse_date


def run(*, total: str, paid: str, due: str, today: Optional[str] = None) -> int:
    """Print the status an invoice with these numbers has.

    Returns:
        Exit code (0 = success, 1 = invalid input)
    """
    try:
        total_amount = to_money(total)
        paid_amount = to_money(paid)
        due_date = parse_date(due, "--due")
        current = parse_date(today, "--today") if today else date.today()
    except FinTrackError as e:
        console.print(f"[red]Error:[/] {e}")
        return 1

    status = derive_status(total_amount, paid_amount, due_date, current)
    console.print(
        f"Total {total_amount:,.2f}, paid {paid_amount:,.2f}, due {due_date.isoformat()} "
        f"(today {current.isoformat()}): ",
        fmt_status(status),
    )
    return 0
