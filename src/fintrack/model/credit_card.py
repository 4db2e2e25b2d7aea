"""
Credit cards and the banks that issue them.

A card is owned by one user. Virtual and additional cards are sub-cards of a
physical parent card belonging to the same owner; their purchases land on
invoices of their own but they share the parent's limit in practice.
"""

from __future__ import annotations

import re
from datetime import datetime
from decimal import Decimal
from enum import StrEnum

from pydantic import Field

from fintrack.errors import DomainRuleViolation, require, require_text
from fintrack.model.entity import Entity
from fintrack.model.money import ZERO, to_money
from fintrack.model.participant import User

_LAST_FOUR = re.compile(r"^\d{4}$")


class Bank(Entity):
    code: str
    name: str

    @classmethod
    def create(cls, code: str, name: str) -> Bank:
        require_text(code, "Bank code must not be null or blank.")
        require_text(name, "Bank name must not be null or blank.")
        return cls(code=code.strip(), name=name.strip())


class CardType(StrEnum):
    PHYSICAL = "PHYSICAL"
    VIRTUAL = "VIRTUAL"
    ADDITIONAL = "ADDITIONAL"


def _validate_limit(limit) -> Decimal:
    require(limit, "Credit card limit must not be null.")
    value = to_money(limit)
    if value <= ZERO:
        raise DomainRuleViolation("Credit card limit must be positive.")
    return value


class CreditCard(Entity):
    """A payment instrument owned by a user."""

    name: str
    last_four_digits: str
    limit: Decimal
    owner: User = Field(repr=False)
    bank: Bank = Field(repr=False)
    card_type: CardType = CardType.PHYSICAL
    parent_card: CreditCard | None = Field(default=None, repr=False)
    active: bool = True
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    @classmethod
    def create(
        cls,
        name: str,
        last_four_digits: str,
        limit,
        owner: User,
        bank: Bank,
        card_type: CardType = CardType.PHYSICAL,
        parent_card: CreditCard | None = None,
    ) -> CreditCard:
        require_text(name, "Credit card name must not be null or blank.")
        require_text(last_four_digits, "Last four digits must not be null or blank.")
        if not _LAST_FOUR.match(last_four_digits):
            raise DomainRuleViolation("Last four digits must be exactly 4 digits.")
        checked_limit = _validate_limit(limit)
        require(owner, "Credit card owner must not be null.")
        require(bank, "Bank must not be null.")
        require(card_type, "Card type must not be null.")

        if card_type is CardType.PHYSICAL:
            if parent_card is not None:
                raise DomainRuleViolation("A physical card cannot have a parent card.")
        else:
            require(parent_card, f"A {card_type.value.lower()} card requires a parent card.")
            if parent_card.card_type is not CardType.PHYSICAL:
                raise DomainRuleViolation("Parent card must be a physical card.")
            if parent_card.owner != owner:
                raise DomainRuleViolation("Parent card must belong to the same owner.")

        return cls(
            name=name.strip(),
            last_four_digits=last_four_digits,
            limit=checked_limit,
            owner=owner,
            bank=bank,
            card_type=card_type,
            parent_card=parent_card,
        )

    @property
    def is_sub_card(self) -> bool:
        return self.parent_card is not None

    def deactivate(self) -> None:
        self.active = False
        self.updated_at = datetime.now()

    def activate(self) -> None:
        self.active = True
        self.updated_at = datetime.now()

    def update_limit(self, new_limit) -> None:
        self.limit = _validate_limit(new_limit)
        self.updated_at = datetime.now()


__all__ = ["Bank", "CardType", "CreditCard"]
