"""
InvoiceItem: one purchased item on a monthly credit card invoice.

Amounts are signed: chargebacks and refunds are legitimate negative items.
Installment purchases carry their position (``installments``) and the total
number of installments; every installment is its own item on its own
invoice.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from enum import StrEnum
from typing import TYPE_CHECKING

from pydantic import Field, PrivateAttr

from fintrack.errors import DomainRuleViolation, require, require_text
from fintrack.model.category import Category
from fintrack.model.entity import Entity
from fintrack.model.item_share import ItemShare
from fintrack.model.money import ZERO, same_money, to_money

if TYPE_CHECKING:
    from fintrack.model.invoice import Invoice


class CategorizationSource(StrEnum):
    """How an item's category was decided."""

    MANUAL = "MANUAL"
    AUTO_RULE = "AUTO_RULE"
    SUGGESTED = "SUGGESTED"


class InvoiceItem(Entity):
    """An expense line with installment metadata and optional shares."""

    description: str
    amount: Decimal
    category: Category | None = None
    purchase_date: date
    installments: int = 1
    total_installments: int = 1
    merchant_key: str | None = None
    categorization_source: CategorizationSource | None = None
    created_at: datetime = Field(default_factory=datetime.now)

    _invoice: Invoice | None = PrivateAttr(default=None)
    _shares: list[ItemShare] = PrivateAttr(default_factory=list)

    @classmethod
    def create(
        cls,
        invoice: Invoice,
        description: str,
        amount,
        category: Category | None,
        purchase_date: date,
        installments: int = 1,
        total_installments: int = 1,
    ) -> InvoiceItem:
        """Create an item bound to ``invoice``.

        The item only points back at the invoice here; ``Invoice.add_item``
        is what adds it to the invoice total.
        """
        require(invoice, "Invoice must not be null.")
        require_text(description, "Description must not be null or blank.")
        require(amount, "Amount must not be null.")
        require(purchase_date, "Purchase date must not be null.")
        require(installments, "Installments must not be null.")
        require(total_installments, "Total installments must not be null.")
        if installments < 1:
            raise DomainRuleViolation("Installments must be positive.")
        if total_installments < 1:
            raise DomainRuleViolation("Total installments must be positive.")
        if installments > total_installments:
            raise DomainRuleViolation("Current installment cannot exceed total installments.")

        item = cls(
            description=description.strip(),
            amount=to_money(amount),
            category=category,
            purchase_date=purchase_date,
            installments=installments,
            total_installments=total_installments,
            categorization_source=CategorizationSource.MANUAL if category is not None else None,
        )
        item._invoice = invoice
        return item

    @property
    def invoice(self) -> Invoice | None:
        return self._invoice

    def _attach_to(self, invoice: Invoice | None) -> None:
        self._invoice = invoice

    @property
    def shares(self) -> list[ItemShare]:
        """Copy of the share collection."""
        return list(self._shares)

    def add_share(self, share: ItemShare) -> None:
        require(share, "Share must not be null.")
        if share.invoice_item is not None and share.invoice_item is not self:
            raise DomainRuleViolation("Share belongs to a different invoice item.")
        if share not in self._shares:
            self._shares.append(share)
        share._attach_to(self)

    def remove_share(self, share: ItemShare) -> None:
        require(share, "Share must not be null.")
        if share in self._shares:
            self._shares.remove(share)
        share._attach_to(None)

    @property
    def shared_amount(self) -> Decimal:
        return to_money(sum((share.amount for share in self._shares), ZERO))

    @property
    def unshared_amount(self) -> Decimal:
        return to_money(self.amount - self.shared_amount)

    def is_fully_shared(self) -> bool:
        return same_money(self.shared_amount, self.amount)

    def share_for(self, participant) -> ItemShare | None:
        for share in self._shares:
            if share.is_held_by(participant):
                return share
        return None

    @property
    def remaining_installments(self) -> int:
        return max(0, self.total_installments - self.installments)

    @property
    def total_amount_across_installments(self) -> Decimal:
        return to_money(self.amount * self.total_installments)

    @property
    def remaining_amount_across_installments(self) -> Decimal:
        return to_money(self.amount * self.remaining_installments)

    def update_category(
        self,
        category: Category | None,
        source: CategorizationSource = CategorizationSource.MANUAL,
    ) -> None:
        """Set (or clear) the category and remember how it was chosen."""
        self.category = category
        self.categorization_source = source if category is not None else None

    def assign_merchant_key(self, merchant_key: str | None) -> None:
        self.merchant_key = merchant_key


__all__ = ["CategorizationSource", "InvoiceItem"]
