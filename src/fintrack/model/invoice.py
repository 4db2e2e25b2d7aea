"""
Invoice: the monthly statement of one credit card.

Status is never stored independently of the numbers it describes. Every
mutation (adding or removing an item, recording a payment, an explicit
refresh) re-derives it through ``derive_status`` from the total, the paid
amount, the due date and today's date:

    total == 0            -> CLOSED once the due date has passed, else OPEN
    paid >= total         -> PAID
    paid > 0              -> PARTIAL
    due date has passed   -> OVERDUE
    otherwise             -> OPEN

Every operation that depends on the date accepts an optional ``today`` so
callers and tests can pin the clock.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator

from fintrack.errors import (
    CrossAggregateConflict,
    DomainRuleViolation,
    require,
)
from fintrack.model.credit_card import CreditCard
from fintrack.model.entity import Entity
from fintrack.model.invoice_item import InvoiceItem
from fintrack.model.money import ZERO, to_decimal, to_money


class InvoiceStatus(StrEnum):
    OPEN = "OPEN"
    PARTIAL = "PARTIAL"
    PAID = "PAID"
    OVERDUE = "OVERDUE"
    CLOSED = "CLOSED"

    @property
    def display_name(self) -> str:
        return self.value.capitalize()


def derive_status(
    total_amount: Decimal,
    paid_amount: Decimal,
    due_date: date,
    today: date,
) -> InvoiceStatus:
    """Pure status function of an invoice's numbers and the current date."""
    past_due = due_date < today
    if total_amount == 0:
        return InvoiceStatus.CLOSED if past_due else InvoiceStatus.OPEN
    if paid_amount >= total_amount:
        return InvoiceStatus.PAID
    if paid_amount > 0:
        return InvoiceStatus.PARTIAL
    if past_due:
        return InvoiceStatus.OVERDUE
    return InvoiceStatus.OPEN


class BillingMonth(BaseModel):
    """A calendar month (year + month) an invoice bills for."""

    model_config = ConfigDict(frozen=True)

    year: int = Field(ge=1)
    month: int = Field(ge=1, le=12)

    @classmethod
    def of(cls, year: int, month: int) -> BillingMonth:
        return cls(year=year, month=month)

    @classmethod
    def from_date(cls, value: date) -> BillingMonth:
        return cls(year=value.year, month=value.month)

    @classmethod
    def parse(cls, text: str) -> BillingMonth:
        """Parse ``YYYY-MM``."""
        year, _, month = text.strip().partition("-")
        return cls(year=int(year), month=int(month))

    def next(self) -> BillingMonth:
        if self.month == 12:
            return BillingMonth(year=self.year + 1, month=1)
        return BillingMonth(year=self.year, month=self.month + 1)

    def __lt__(self, other: BillingMonth) -> bool:
        return (self.year, self.month) < (other.year, other.month)

    def __le__(self, other: BillingMonth) -> bool:
        return (self.year, self.month) <= (other.year, other.month)

    def __str__(self) -> str:
        return f"{self.year:04d}-{self.month:02d}"


def _today(today: date | None) -> date:
    return today if today is not None else date.today()


class Invoice(Entity):
    """Billing-cycle aggregate: items, totals and the derived status."""

    credit_card: CreditCard = Field(repr=False)
    month: BillingMonth
    due_date: date
    total_amount: Decimal = ZERO
    paid_amount: Decimal = ZERO
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    _items: list[InvoiceItem] = PrivateAttr(default_factory=list)
    _status: InvoiceStatus = PrivateAttr(default=InvoiceStatus.OPEN)

    @field_validator("month", mode="before")
    @classmethod
    def _parse_month(cls, value):
        if isinstance(value, str):
            return BillingMonth.parse(value)
        return value

    @classmethod
    def create(
        cls,
        credit_card: CreditCard,
        month: BillingMonth | str,
        due_date: date,
        *,
        today: date | None = None,
    ) -> Invoice:
        """Open the invoice of ``credit_card`` for ``month``; the due date is fixed here."""
        require(credit_card, "Credit card must not be null.")
        require(month, "Month must not be null.")
        require(due_date, "Due date must not be null.")
        invoice = cls(credit_card=credit_card, month=month, due_date=due_date)
        invoice.refresh_status(today=today)
        return invoice

    @property
    def status(self) -> InvoiceStatus:
        """Derived from the amounts and the due date; see ``refresh_status``."""
        return self._status

    @property
    def items(self) -> list[InvoiceItem]:
        """Copy of the item list, in insertion order."""
        return list(self._items)

    @property
    def remaining_amount(self) -> Decimal:
        return to_money(self.total_amount - self.paid_amount)

    def contains(self, item: InvoiceItem) -> bool:
        return item in self._items

    def add_item(self, item: InvoiceItem, *, today: date | None = None) -> None:
        require(item, "Item must not be null.")
        if item in self._items:
            raise DomainRuleViolation("Item is already part of this invoice.")
        if item.invoice is not None and item.invoice is not self:
            raise DomainRuleViolation("Item belongs to a different invoice.")

        self._items.append(item)
        item._attach_to(self)
        self._recalculate_total(today)

    def remove_item(self, item: InvoiceItem, *, today: date | None = None) -> None:
        require(item, "Item must not be null.")
        if item not in self._items:
            raise DomainRuleViolation("Item is not part of this invoice.")

        self._items.remove(item)
        item._attach_to(None)
        self._recalculate_total(today)

    def record_payment(self, amount, *, today: date | None = None) -> None:
        """Add ``amount`` to the paid total.

        Payments never push the paid amount above the total, except on a
        zero-total invoice where any non-negative payment is accepted so
        catch-up reconciliations can be recorded.
        """
        require(amount, "Payment amount must not be null.")
        payment = to_money(to_decimal(amount))
        if payment < 0:
            raise DomainRuleViolation("Payment amount must not be negative.")
        if self.total_amount != 0 and self.paid_amount + payment > self.total_amount:
            raise CrossAggregateConflict(
                f"Payment of {payment} would exceed the invoice total "
                f"(total {self.total_amount}, already paid {self.paid_amount})."
            )

        self.paid_amount = to_money(self.paid_amount + payment)
        self.refresh_status(today=today)
        self.updated_at = datetime.now()

    def refresh_status(self, *, today: date | None = None) -> InvoiceStatus:
        """Re-derive the status without touching any amount."""
        self._status = derive_status(
            self.total_amount, self.paid_amount, self.due_date, _today(today)
        )
        return self._status

    def _recalculate_total(self, today: date | None) -> None:
        self.total_amount = to_money(sum((item.amount for item in self._items), ZERO))
        self.refresh_status(today=today)
        self.updated_at = datetime.now()


__all__ = ["BillingMonth", "Invoice", "InvoiceStatus", "derive_status"]
