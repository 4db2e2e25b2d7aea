from __future__ import annotations

"""
Expense Report Service - monthly spending by category

Two views of the same invoices:
- "my" expenses: what a participant actually carries (their shares, plus the
  unshared rest of items on cards they own)
- "total" expenses: every item on the cards a user owns, shared or not

Items without a category are grouped under a synthetic "Uncategorized" entry.
"""

from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional

from fintrack.model.category import Category, uncategorized
from fintrack.model.invoice import BillingMonth, Invoice
from fintrack.model.invoice_item import InvoiceItem
from fintrack.model.money import ZERO, to_money
from fintrack.model.participant import Participant, User
from fintrack.services.invoice_calculation_service import InvoiceCalculationService, share_of_item
from fintrack.storage.repositories import InvoiceRepository

UNCATEGORIZED = uncategorized()

DEFAULT_TOP_LIMIT = 10


@dataclass
class ExpenseDetail:
    """One item line contributing to a category total."""
    item_id: Optional[int]
    share_id: Optional[int]
    description: str
    amount: Decimal
    purchase_date: date
    invoice_id: Optional[int]


@dataclass
class TopExpense:
    item_id: Optional[int]
    description: str
    amount: Decimal
    purchase_date: date
    invoice_id: Optional[int]
    category: Category


def resolve_category(item: InvoiceItem) -> Category:
    return item.category if item.category is not None else UNCATEGORIZED


def same_category(a: Category, b: Category) -> bool:
    """Compare by identity when both are persisted, by name otherwise."""
    if a.id is not None and b.id is not None:
        return a.id == b.id
    return a.name == b.name


class ExpenseReportService:
    """Aggregates invoice items into per-category and per-month totals."""

    def __init__(
        self,
        invoice_repository: InvoiceRepository,
        calculation_service: Optional[InvoiceCalculationService] = None,
    ):
        """
        Args:
            invoice_repository: Source of invoices by month
            calculation_service: Share arithmetic (default instance if omitted)
        """
        self._invoices = invoice_repository
        self._calculation = calculation_service or InvoiceCalculationService()

    # Participant view

    def expenses_by_category(
        self, participant: Participant, month: BillingMonth
    ) -> Dict[Category, Decimal]:
        totals: Dict[Category, Decimal] = defaultdict(lambda: ZERO)
        for invoice in self._invoices.find_by_month(month):
            self._accumulate_shares(invoice, participant, totals)
        return dict(totals)

    def total_by_category(
        self, participant: Participant, month: BillingMonth, category: Category
    ) -> Decimal:
        for key, amount in self.expenses_by_category(participant, month).items():
            if same_category(key, category):
                return amount
        return ZERO

    def total_expenses(self, participant: Participant, month: BillingMonth) -> Decimal:
        return to_money(
            sum(
                (self._calculation.user_share(i, participant) for i in self._invoices.find_by_month(month)),
                ZERO,
            )
        )

    def expense_details(
        self,
        participant: Participant,
        month: BillingMonth,
        category: Optional[Category] = None,
    ) -> List[ExpenseDetail]:
        """Items behind one category total (None means uncategorized)."""
        target = category if category is not None else UNCATEGORIZED
        details = []
        for invoice in self._invoices.find_by_month(month):
            for item in invoice.items:
                amount = share_of_item(item, participant)
                if amount > 0 and same_category(resolve_category(item), target):
                    share = item.share_for(participant)
                    details.append(
                        ExpenseDetail(
                            item_id=item.id,
                            share_id=share.id if share is not None else None,
                            description=item.description,
                            amount=amount,
                            purchase_date=item.purchase_date,
                            invoice_id=invoice.id,
                        )
                    )
        return details

    def expenses_by_month_and_category(
        self, participant: Participant, start: BillingMonth, end: BillingMonth
    ) -> Dict[BillingMonth, Dict[Category, Decimal]]:
        """Per-month breakdown; every month of the range is present, even when empty."""
        result = self._month_range(start, end)
        for invoice in self._invoices.find_by_month_between(start, end):
            totals = result.get(invoice.month)
            if totals is not None:
                self._accumulate_shares(invoice, participant, totals)
        return {month: dict(totals) for month, totals in result.items()}

    def top_expenses(
        self, participant: Participant, month: BillingMonth, limit: int = DEFAULT_TOP_LIMIT
    ) -> List[TopExpense]:
        entries = []
        for invoice in self._invoices.find_by_month(month):
            for item in invoice.items:
                amount = share_of_item(item, participant)
                if amount > 0:
                    entries.append(self._top_entry(item, invoice, amount))
        return self._sort_and_limit(entries, limit)

    # Card owner view

    def total_expenses_by_category(self, owner: User, month: BillingMonth) -> Dict[Category, Decimal]:
        totals: Dict[Category, Decimal] = defaultdict(lambda: ZERO)
        for invoice in self._owned(owner, self._invoices.find_by_month(month)):
            for item in invoice.items:
                totals[resolve_category(item)] += item.amount
        return dict(totals)

    def grand_total_expenses(self, owner: User, month: BillingMonth) -> Decimal:
        invoices = self._owned(owner, self._invoices.find_by_month(month))
        return to_money(sum((invoice.total_amount for invoice in invoices), ZERO))

    def total_expenses_by_month_and_category(
        self, owner: User, start: BillingMonth, end: BillingMonth
    ) -> Dict[BillingMonth, Dict[Category, Decimal]]:
        result = self._month_range(start, end)
        for invoice in self._owned(owner, self._invoices.find_by_month_between(start, end)):
            totals = result.get(invoice.month)
            if totals is None:
                continue
            for item in invoice.items:
                totals[resolve_category(item)] += item.amount
        return {month: dict(totals) for month, totals in result.items()}

    def total_top_expenses(
        self, owner: User, month: BillingMonth, limit: int = DEFAULT_TOP_LIMIT
    ) -> List[TopExpense]:
        entries = [
            self._top_entry(item, invoice, item.amount)
            for invoice in self._owned(owner, self._invoices.find_by_month(month))
            for item in invoice.items
        ]
        return self._sort_and_limit(entries, limit)

    # Helpers

    def _accumulate_shares(
        self, invoice: Invoice, participant: Participant, totals: Dict[Category, Decimal]
    ) -> None:
        for item in invoice.items:
            amount = share_of_item(item, participant)
            if amount > 0:
                totals[resolve_category(item)] += amount

    def _owned(self, owner: User, invoices: List[Invoice]) -> List[Invoice]:
        return [invoice for invoice in invoices if invoice.credit_card.owner == owner]

    def _month_range(
        self, start: BillingMonth, end: BillingMonth
    ) -> Dict[BillingMonth, Dict[Category, Decimal]]:
        result: Dict[BillingMonth, Dict[Category, Decimal]] = {}
        current = start
        while current <= end:
            result[current] = defaultdict(lambda: ZERO)
            current = current.next()
        return result

    def _top_entry(self, item: InvoiceItem, invoice: Invoice, amount: Decimal) -> TopExpense:
        return TopExpense(
            item_id=item.id,
            description=item.description,
            amount=amount,
            purchase_date=item.purchase_date,
            invoice_id=invoice.id,
            category=resolve_category(item),
        )

    def _sort_and_limit(self, entries: List[TopExpense], limit: int) -> List[TopExpense]:
        return sorted(entries, key=lambda entry: entry.amount, reverse=True)[:limit]


__all__ = [
    "ExpenseDetail",
    "ExpenseReportService",
    "TopExpense",
    "UNCATEGORIZED",
    "resolve_category",
    "same_category",
]
