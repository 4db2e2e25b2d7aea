"""
Invoice service - the workflows around the Invoice aggregate.

Opens billing cycles, adds and removes items, records payments and keeps
the journal in step. Item categorization goes through here as well so that
every manual choice also teaches the user's merchant rules.

NO IMPORTS FROM:
- rich (console, table, prompt)
- typer

All dependencies are injected. All functions return data structures.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date

from fintrack.errors import AccessDenied, DomainRuleViolation, require
from fintrack.model.category import Category
from fintrack.model.credit_card import CreditCard
from fintrack.model.events import (
    InvoiceItemAdded,
    InvoiceItemRemoved,
    InvoiceOpened,
    InvoicePaymentRecorded,
    ref,
)
from fintrack.model.invoice import BillingMonth, Invoice, InvoiceStatus
from fintrack.model.invoice_item import CategorizationSource, InvoiceItem
from fintrack.model.participant import User
from fintrack.services.expense_sharing_service import ExpenseSharingService
from fintrack.services.merchant_categorization_service import MerchantCategorizationService
from fintrack.storage.event_store import EventStore
from fintrack.storage.repositories import InvoiceItemRepository, InvoiceRepository

logger = logging.getLogger(__name__)


@dataclass
class StatusChange:
    """An invoice whose status moved during a refresh."""

    invoice: Invoice
    previous: InvoiceStatus
    current: InvoiceStatus


class InvoiceService:
    """
    Service for invoice workflows.

    Responsibilities:
    - Open one invoice per card and month
    - Add/remove items and record payments, saving the aggregate
    - Re-derive statuses as dates pass
    - Forward manual categorizations to the merchant rule learner
    """

    def __init__(
        self,
        invoice_repository: InvoiceRepository,
        item_repository: InvoiceItemRepository,
        categorization_service: MerchantCategorizationService | None = None,
        sharing_service: ExpenseSharingService | None = None,
        event_store: EventStore | None = None,
    ):
        """
        Args:
            invoice_repository: Where invoices are saved and looked up
            item_repository: Where invoice items are saved
            categorization_service: Optional rule learner fed by manual categorizations
            sharing_service: Optional; drops the shares of removed items
            event_store: Optional journal for invoice events
        """
        self._invoices = invoice_repository
        self._items = item_repository
        self._categorization = categorization_service
        self._sharing = sharing_service
        self._event_store = event_store

    def open_invoice(
        self,
        credit_card: CreditCard,
        month: BillingMonth | str,
        due_date: date,
        *,
        today: date | None = None,
    ) -> Invoice:
        """Open the invoice of ``credit_card`` for ``month``.

        A card has at most one invoice per month.
        """
        require(credit_card, "Credit card must not be null.")
        require(month, "Month must not be null.")
        if not credit_card.active:
            raise DomainRuleViolation(f"Credit card {credit_card.name} is inactive.")

        invoice = Invoice.create(credit_card, month, due_date, today=today)
        if self._invoices.find_by_credit_card_and_month(credit_card, invoice.month) is not None:
            raise DomainRuleViolation(
                f"Credit card {credit_card.name} already has an invoice for {invoice.month}."
            )
        self._invoices.save(invoice)
        logger.info("Opened invoice %s for card %s (%s)", invoice.id, credit_card.name, invoice.month)

        if self._event_store:
            self._event_store.append_event(
                InvoiceOpened(
                    invoice_id=ref(invoice.id),
                    credit_card_id=ref(credit_card.id) or credit_card.last_four_digits,
                    month=str(invoice.month),
                    due_date=invoice.due_date.isoformat(),
                    status=invoice.status.value,
                )
            )
        return invoice

    def invoices_for(self, user: User) -> list[Invoice]:
        return self._invoices.find_by_owner(user)

    def get_invoice(self, invoice_id: int, user: User) -> Invoice:
        """Load an invoice the user owns; NotFoundError or AccessDenied otherwise."""
        invoice = self._invoices.get(invoice_id)
        if invoice.credit_card.owner != user:
            raise AccessDenied(f"Invoice {invoice_id} does not belong to {user.email}.")
        return invoice

    def add_item(
        self,
        invoice: Invoice,
        description: str,
        amount,
        purchase_date: date,
        *,
        category: Category | None = None,
        installments: int = 1,
        total_installments: int = 1,
        user: User | None = None,
        source: str = "manual",
        today: date | None = None,
    ) -> InvoiceItem:
        """Create an item on ``invoice`` and save both.

        A category given here by ``user`` counts as a manual categorization.
        """
        require(invoice, "Invoice must not be null.")
        item = InvoiceItem.create(
            invoice,
            description,
            amount,
            category,
            purchase_date,
            installments=installments,
            total_installments=total_installments,
        )
        invoice.add_item(item, today=today)
        self._items.save(item)
        self._invoices.save(invoice)
        logger.debug("Added item '%s' (%s) to invoice %s", item.description, item.amount, invoice.id)

        if category is not None and user is not None and self._categorization:
            self._categorization.record_manual_categorization(item, category, user)

        self._record_item_added(invoice, item, source)
        return item

    def attach_item(
        self,
        invoice: Invoice,
        item: InvoiceItem,
        *,
        source: str = "import",
        today: date | None = None,
    ) -> InvoiceItem:
        """Add an already built item (used by the importer) and save both."""
        require(invoice, "Invoice must not be null.")
        require(item, "Item must not be null.")
        invoice.add_item(item, today=today)
        self._items.save(item)
        self._invoices.save(invoice)
        self._record_item_added(invoice, item, source)
        return item

    def remove_item(
        self, invoice: Invoice, item: InvoiceItem, *, today: date | None = None
    ) -> Invoice:
        """Take ``item`` off ``invoice``; its shares go with it."""
        require(invoice, "Invoice must not be null.")
        invoice.remove_item(item, today=today)
        if self._sharing and item.shares:
            self._sharing.remove_shares(item)
        self._items.delete(item)
        self._invoices.save(invoice)
        logger.debug("Removed item '%s' from invoice %s", item.description, invoice.id)

        if self._event_store:
            self._event_store.append_event(
                InvoiceItemRemoved(
                    invoice_id=ref(invoice.id),
                    item_id=ref(item.id),
                    description=item.description,
                    amount=item.amount,
                    total_amount=invoice.total_amount,
                    status=invoice.status.value,
                )
            )
        return invoice

    def record_payment(self, invoice: Invoice, amount, *, today: date | None = None) -> Invoice:
        require(invoice, "Invoice must not be null.")
        invoice.record_payment(amount, today=today)
        self._invoices.save(invoice)
        logger.info(
            "Recorded payment of %s on invoice %s (paid %s of %s, %s)",
            amount,
            invoice.id,
            invoice.paid_amount,
            invoice.total_amount,
            invoice.status.value,
        )

        if self._event_store:
            self._event_store.append_event(
                InvoicePaymentRecorded(
                    invoice_id=ref(invoice.id),
                    amount=amount,
                    paid_amount=invoice.paid_amount,
                    total_amount=invoice.total_amount,
                    status=invoice.status.value,
                )
            )
        return invoice

    def refresh_statuses(self, *, today: date | None = None) -> list[StatusChange]:
        """Re-derive every invoice's status; returns the ones that changed."""
        changes = []
        for invoice in self._invoices.find_all():
            previous = invoice.status
            current = invoice.refresh_status(today=today)
            if current is not previous:
                self._invoices.save(invoice)
                changes.append(StatusChange(invoice=invoice, previous=previous, current=current))
        if changes:
            logger.info("Refreshed %d invoice statuses", len(changes))
        return changes

    def categorize_item(self, item: InvoiceItem, category: Category | None, user: User) -> InvoiceItem:
        """Set ``item``'s category by hand and teach the merchant rules."""
        require(item, "Item must not be null.")
        require(user, "User must not be null.")
        item.update_category(category, CategorizationSource.MANUAL)
        self._items.save(item)
        if category is not None and self._categorization:
            self._categorization.record_manual_categorization(item, category, user)
        return item

    def _record_item_added(self, invoice: Invoice, item: InvoiceItem, source: str) -> None:
        if not self._event_store:
            return
        self._event_store.append_event(
            InvoiceItemAdded(
                invoice_id=ref(invoice.id),
                item_id=ref(item.id),
                description=item.description,
                amount=item.amount,
                total_amount=invoice.total_amount,
                status=invoice.status.value,
                category=item.category.name if item.category is not None else None,
                source=source,
            )
        )


__all__ = ["InvoiceService", "StatusChange"]
