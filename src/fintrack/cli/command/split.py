from __future__ import annotations

"""
Preview how an item amount splits among participants.

Nothing is saved: the split runs against a throwaway item so the numbers are
exactly what sharing the item would produce.
"""

from datetime import date
from typing import Optional

from rich.table import Table

from fintrack.errors import DomainRuleViolation, FinTrackError
from fintrack.model.credit_card import Bank, CreditCard
from fintrack.model.invoice import BillingMonth, Invoice
from fintrack.model.invoice_item import InvoiceItem
from fintrack.model.money import ZERO, to_money
from fintrack.model.participant import User
from fintrack.services.expense_sharing_service import ExpenseSharingService
from fintrack.storage.repositories import ItemShareRepository, UserRepository

from .util import console, fmt_amount, fmt_percentage


def _preview_item(amount) -> InvoiceItem:
    today = date.today()
    owner = User.create("Preview", "preview@localhost")
    card = CreditCard.create("Preview", "0000", "1.00", owner, Bank.create("000", "Preview"))
    invoice = Invoice.create(card, BillingMonth.from_date(today), today, today=today)
    item = InvoiceItem.create(invoice, "Split preview", amount, None, today)
    invoice.add_item(item, today=today)
    return item


def run(*, amount: str, participants: list[str], amounts: Optional[list[str]] = None) -> int:
    """Show each participant's percentage and amount.

    Args:
        amount: Item amount
        participants: Participant names, in order (the last absorbs rounding)
        amounts: Optional amount per participant; an equal split otherwise

    Returns:
        Exit code (0 = success, 1 = invalid split)
    """
    try:
        if not participants:
            raise DomainRuleViolation("At least one --participant is required.")
        if amounts and len(amounts) != len(participants):
            raise DomainRuleViolation(
                f"Got {len(amounts)} amounts for {len(participants)} participants."
            )

        item = _preview_item(to_money(amount))
        users = UserRepository()
        people = [
            users.save(User.create(name, f"participant{index}@localhost"))
            for index, name in enumerate(participants, start=1)
        ]

        service = ExpenseSharingService(ItemShareRepository())
        if amounts:
            shares = service.distribute_by_amounts(item, list(zip(people, amounts)))
        else:
            shares = service.distribute_equally(item, people)
    except FinTrackError as e:
        console.print(f"[red]Error:[/] {e}")
        return 1

    table = Table(title=f"Split of {item.amount:,.2f}")
    table.add_column("Participant", style="bold")
    table.add_column("Percentage", justify="right")
    table.add_column("Amount", justify="right")
    for share in shares:
        table.add_row(share.participant_name, fmt_percentage(share.percentage), fmt_amount(share.amount))

    console.print(table)
    total = sum((share.amount for share in shares), ZERO)
    console.print(f"Total shared: {total:,.2f}  Unshared: {item.unshared_amount:,.2f}")
    return 0
