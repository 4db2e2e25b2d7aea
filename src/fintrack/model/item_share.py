"""
ItemShare: one participant's stake in an invoice item.

A share holds a percentage of the item (0 to 1) and the amount that
percentage represents, plus its own payment state. Paying a share is
independent of paying the invoice it came from: the card owner pays the
bank, participants pay the card owner.

The entity validates only its own fields. Whether the shares of one item
add up to no more than the item amount is checked when a whole distribution
is committed (see ExpenseSharingService.commit_distribution).
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from enum import StrEnum
from typing import TYPE_CHECKING

from pydantic import Field, PrivateAttr

from fintrack.errors import (
    DomainRuleViolation,
    PercentageOutOfRange,
    PreconditionViolation,
    require,
)
from fintrack.model.entity import Entity
from fintrack.model.money import ONE, to_decimal, to_money
from fintrack.model.participant import TrustedContact, User

if TYPE_CHECKING:
    from fintrack.model.invoice_item import InvoiceItem


class PaymentMethod(StrEnum):
    """Well-known ways a participant settles a share.

    Shares store the method as free text; these are the values the UI offers.
    """

    PIX = "PIX"
    BANK_TRANSFER = "BANK_TRANSFER"
    CASH = "CASH"
    CREDIT_CARD = "CREDIT_CARD"
    DEBIT_CARD = "DEBIT_CARD"
    OTHER = "OTHER"


def validate_percentage(percentage) -> Decimal:
    """Return the percentage as Decimal, or raise when it is outside [0, 1]."""
    if percentage is None:
        raise PreconditionViolation("Percentage must not be null.")
    value = to_decimal(percentage)
    if value < 0:
        raise PercentageOutOfRange("Percentage must be non-negative.")
    if value > ONE:
        raise PercentageOutOfRange("Percentage cannot exceed 1.0 (100%).")
    return value


class ItemShare(Entity):
    """A participant's percentage of an invoice item and its payment state."""

    user: User | None = Field(default=None, repr=False)
    trusted_contact: TrustedContact | None = Field(default=None, repr=False)
    contact_display_name: str | None = None
    contact_display_email: str | None = None
    percentage: Decimal
    amount: Decimal
    responsible: bool = False
    paid: bool = False
    payment_method: str | None = None
    paid_at: datetime | None = None
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    _invoice_item: InvoiceItem | None = PrivateAttr(default=None)

    @classmethod
    def for_user(
        cls,
        user: User,
        invoice_item: InvoiceItem,
        percentage,
        amount=None,
        responsible: bool = False,
    ) -> ItemShare:
        """Create a share held by a registered user.

        When ``amount`` is omitted it is ``percentage * item.amount`` rounded
        to cents.
        """
        require(user, "User must not be null.")
        return cls._build(invoice_item, percentage, amount, responsible, user=user)

    @classmethod
    def for_contact(
        cls,
        contact: TrustedContact,
        invoice_item: InvoiceItem,
        percentage,
        amount=None,
        responsible: bool = False,
    ) -> ItemShare:
        """Create a share held by a trusted contact (unregistered person)."""
        require(contact, "Trusted contact must not be null.")
        return cls._build(invoice_item, percentage, amount, responsible, contact=contact)

    @classmethod
    def _build(
        cls,
        invoice_item: InvoiceItem,
        percentage,
        amount,
        responsible: bool,
        *,
        user: User | None = None,
        contact: TrustedContact | None = None,
    ) -> ItemShare:
        require(invoice_item, "Invoice item must not be null.")
        checked = validate_percentage(percentage)
        share_amount = to_money(checked * invoice_item.amount) if amount is None else to_money(amount)

        share = cls(
            user=user,
            trusted_contact=contact,
            contact_display_name=contact.name if contact is not None else None,
            contact_display_email=contact.email if contact is not None else None,
            percentage=checked,
            amount=share_amount,
            responsible=bool(responsible),
        )
        share._invoice_item = invoice_item
        return share

    @property
    def invoice_item(self) -> InvoiceItem | None:
        return self._invoice_item

    def _attach_to(self, invoice_item: InvoiceItem | None) -> None:
        self._invoice_item = invoice_item

    @property
    def is_contact_share(self) -> bool:
        return self.trusted_contact is not None

    @property
    def participant(self) -> User | TrustedContact:
        return self.trusted_contact if self.trusted_contact is not None else self.user

    @property
    def participant_name(self) -> str:
        if self.trusted_contact is not None:
            return self.contact_display_name or self.trusted_contact.name
        return self.user.name if self.user is not None else ""

    def is_held_by(self, participant: User | TrustedContact) -> bool:
        return participant is not None and self.participant == participant

    def is_paid(self) -> bool:
        return self.paid

    def update_percentage(self, new_percentage) -> None:
        """Change the percentage and recompute the amount from the item's current amount."""
        checked = validate_percentage(new_percentage)
        if self._invoice_item is None:
            raise DomainRuleViolation("Share is not attached to an invoice item.")
        self.percentage = checked
        self.amount = to_money(checked * self._invoice_item.amount)
        self.updated_at = datetime.now()

    def set_responsible(self, responsible: bool) -> None:
        self.responsible = bool(responsible)
        self.updated_at = datetime.now()

    def mark_as_paid(self, payment_method: str | PaymentMethod, paid_at: datetime) -> None:
        require(payment_method, "Payment method must not be null.")
        if not str(payment_method).strip():
            raise DomainRuleViolation("Payment method cannot be blank.")
        require(paid_at, "Payment date cannot be null.")

        self.paid = True
        self.payment_method = str(payment_method).strip()
        self.paid_at = paid_at
        self.updated_at = datetime.now()

    def mark_as_unpaid(self) -> None:
        self.paid = False
        self.payment_method = None
        self.paid_at = None
        self.updated_at = datetime.now()


__all__ = ["ItemShare", "PaymentMethod", "validate_percentage"]
