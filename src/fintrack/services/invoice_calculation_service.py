"""
Invoice calculation service - who carries how much of an invoice.

A participant's part of an item is their share amount. The card owner also
carries everything nobody else took: the whole item when it has no shares,
the unshared rest otherwise. Anyone else carries nothing for items they hold
no share of.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from fintrack.model.invoice import BillingMonth, Invoice
from fintrack.model.invoice_item import InvoiceItem
from fintrack.model.money import PERCENTAGE_QUANTUM, ZERO, to_money
from fintrack.model.participant import Participant
from fintrack.storage.repositories import ItemShareRepository


def share_of_item(item: InvoiceItem, participant: Participant) -> Decimal:
    """Amount ``participant`` is responsible for in ``item``."""
    share = item.share_for(participant)
    if share is not None:
        return share.amount

    invoice = item.invoice
    is_owner = invoice is not None and invoice.credit_card.owner == participant
    if not is_owner:
        return ZERO
    if not item.shares:
        return item.amount
    return item.unshared_amount


class InvoiceCalculationService:
    """Per-participant and shared/unshared totals over invoices."""

    def __init__(self, share_repository: ItemShareRepository | None = None):
        self._shares = share_repository

    def user_share(self, invoice: Invoice, participant: Participant) -> Decimal:
        return to_money(sum((share_of_item(i, participant) for i in invoice.items), ZERO))

    def total_for_participant(self, participant: Participant, month: BillingMonth) -> Decimal:
        """Sum of the participant's share amounts on invoices of ``month``."""
        if self._shares is None:
            return ZERO
        total = ZERO
        for share in self._shares.find_by_participant(participant):
            item = share.invoice_item
            if item is not None and item.invoice is not None and item.invoice.month == month:
                total += share.amount
        return to_money(total)

    def shares_for_item(self, item: InvoiceItem) -> dict[str, Decimal]:
        """Participant name -> share amount."""
        return {share.participant_name: share.amount for share in item.shares}

    def total_shared_amount(self, invoice: Invoice) -> Decimal:
        return to_money(sum((item.shared_amount for item in invoice.items), ZERO))

    def unshared_amount(self, invoice: Invoice) -> Decimal:
        return to_money(sum((item.unshared_amount for item in invoice.items), ZERO))

    def shared_percentage(self, invoice: Invoice) -> Decimal:
        """Shared fraction of the invoice total at four places (0 for an empty invoice)."""
        if invoice.total_amount == 0:
            return ZERO
        ratio = self.total_shared_amount(invoice) / invoice.total_amount
        return ratio.quantize(PERCENTAGE_QUANTUM, rounding=ROUND_HALF_UP)


__all__ = ["InvoiceCalculationService", "share_of_item"]
