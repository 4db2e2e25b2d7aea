from __future__ import annotations

from datetime import date
from decimal import Decimal

from rich.console import Console
from rich.text import Text

from fintrack.errors import DomainRuleViolation
from fintrack.model.invoice import InvoiceStatus

console = Console()

STATUS_STYLES = {
    InvoiceStatus.OPEN: "cyan",
    InvoiceStatus.PARTIAL: "yellow",
    InvoiceStatus.PAID: "green",
    InvoiceStatus.OVERDUE: "bold red",
    InvoiceStatus.CLOSED: "dim",
}


def fmt_amount(amt: Decimal) -> Text:
    s = f"{amt:,.2f}"
    if amt < 0:
        return Text(s, style="bold red")
    elif amt > 0:
        return Text(s, style="bold green")
    return Text(s)


def fmt_percentage(pct: Decimal) -> str:
    return f"{pct * 100:.2f}%"


def fmt_status(status: InvoiceStatus) -> Text:
    return Text(status.display_name, style=STATUS_STYLES.get(status, ""))


def parse_date(value: str, option: str) -> date:
    try:
        return date.fromisoformat(value.strip())
    except ValueError as e:
        raise DomainRuleViolation(f"{option} must be a date in YYYY-MM-DD form: {value}") from e
