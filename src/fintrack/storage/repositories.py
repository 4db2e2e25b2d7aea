"""
In-memory repositories for the FinTrack aggregates.

Saving an entity assigns its identity (sequential per repository) the first
time; saving again keeps it. Services only rely on the methods defined here,
so a database-backed repository can replace these without touching them.
"""

from __future__ import annotations

from typing import Generic, Iterable, TypeVar

from fintrack.errors import NotFoundError, require
from fintrack.model.category import Category
from fintrack.model.credit_card import Bank, CreditCard
from fintrack.model.entity import Entity
from fintrack.model.invoice import BillingMonth, Invoice
from fintrack.model.invoice_item import InvoiceItem
from fintrack.model.item_share import ItemShare
from fintrack.model.merchant_rule import MerchantCategoryRule
from fintrack.model.participant import TrustedContact, User

TEntity = TypeVar("TEntity", bound=Entity)


class InMemoryRepository(Generic[TEntity]):
    """Keeps entities in insertion order, keyed by their assigned id."""

    entity_name = "Entity"

    def __init__(self, entities: Iterable[TEntity] = ()):
        self._entities: dict[int, TEntity] = {}
        self._next_id = 1
        for entity in entities:
            self.save(entity)

    def save(self, entity: TEntity) -> TEntity:
        require(entity, f"{self.entity_name} must not be null.")
        if entity.id is None:
            entity.assign_id(self._next_id)
        self._next_id = max(self._next_id, entity.id + 1)
        self._entities[entity.id] = entity
        return entity

    def save_all(self, entities: Iterable[TEntity]) -> list[TEntity]:
        return [self.save(entity) for entity in entities]

    def find_by_id(self, entity_id: int) -> TEntity | None:
        return self._entities.get(entity_id)

    def get(self, entity_id: int) -> TEntity:
        """Like find_by_id, but raises NotFoundError when absent."""
        entity = self.find_by_id(entity_id)
        if entity is None:
            raise NotFoundError(f"{self.entity_name} {entity_id} not found.")
        return entity

    def find_all(self) -> list[TEntity]:
        return list(self._entities.values())

    def delete(self, entity: TEntity) -> None:
        if entity.id is not None:
            self._entities.pop(entity.id, None)

    def __len__(self) -> int:
        return len(self._entities)


class UserRepository(InMemoryRepository[User]):
    entity_name = "User"

    def find_by_email(self, email: str) -> User | None:
        wanted = email.strip().lower()
        for user in self._entities.values():
            if user.email == wanted:
                return user
        return None


class TrustedContactRepository(InMemoryRepository[TrustedContact]):
    entity_name = "Trusted contact"

    def find_by_owner(self, owner: User) -> list[TrustedContact]:
        return [c for c in self._entities.values() if c.owner == owner]

    def find_by_owner_and_email(self, owner: User, email: str) -> TrustedContact | None:
        wanted = email.strip().lower()
        for contact in self.find_by_owner(owner):
            if contact.email == wanted:
                return contact
        return None


class BankRepository(InMemoryRepository[Bank]):
    entity_name = "Bank"


class CategoryRepository(InMemoryRepository[Category]):
    entity_name = "Category"

    def find_by_name(self, name: str) -> Category | None:
        for category in self._entities.values():
            if category.name == name:
                return category
        return None


class CreditCardRepository(InMemoryRepository[CreditCard]):
    entity_name = "Credit card"

    def find_by_owner(self, owner: User) -> list[CreditCard]:
        return [card for card in self._entities.values() if card.owner == owner]


class InvoiceRepository(InMemoryRepository[Invoice]):
    entity_name = "Invoice"

    def find_by_credit_card(self, credit_card: CreditCard) -> list[Invoice]:
        return [i for i in self._entities.values() if i.credit_card == credit_card]

    def find_by_owner(self, owner: User) -> list[Invoice]:
        return [i for i in self._entities.values() if i.credit_card.owner == owner]

    def find_by_credit_card_and_month(
        self, credit_card: CreditCard, month: BillingMonth
    ) -> Invoice | None:
        for invoice in self.find_by_credit_card(credit_card):
            if invoice.month == month:
                return invoice
        return None

    def find_by_month(self, month: BillingMonth) -> list[Invoice]:
        return [i for i in self._entities.values() if i.month == month]

    def find_by_month_between(self, start: BillingMonth, end: BillingMonth) -> list[Invoice]:
        """Invoices whose month lies in [start, end]."""
        return [i for i in self._entities.values() if start <= i.month <= end]


class InvoiceItemRepository(InMemoryRepository[InvoiceItem]):
    entity_name = "Invoice item"

    def find_by_invoice(self, invoice: Invoice) -> list[InvoiceItem]:
        return [item for item in self._entities.values() if item.invoice is invoice]


class ItemShareRepository(InMemoryRepository[ItemShare]):
    entity_name = "Item share"

    def find_by_item(self, item: InvoiceItem) -> list[ItemShare]:
        return [s for s in self._entities.values() if s.invoice_item is item]

    def find_by_participant(self, participant: User | TrustedContact) -> list[ItemShare]:
        return [s for s in self._entities.values() if s.is_held_by(participant)]


class MerchantRuleRepository(InMemoryRepository[MerchantCategoryRule]):
    entity_name = "Merchant rule"

    def find_by_user_and_key(self, user: User, merchant_key: str) -> MerchantCategoryRule | None:
        for rule in self._entities.values():
            if rule.user == user and rule.merchant_key == merchant_key:
                return rule
        return None

    def find_by_user(self, user: User) -> list[MerchantCategoryRule]:
        """Rules of ``user``, most confirmed first."""
        rules = [rule for rule in self._entities.values() if rule.user == user]
        return sorted(rules, key=lambda rule: rule.times_confirmed, reverse=True)


__all__ = [
    "BankRepository",
    "CategoryRepository",
    "CreditCardRepository",
    "InMemoryRepository",
    "InvoiceItemRepository",
    "InvoiceRepository",
    "ItemShareRepository",
    "MerchantRuleRepository",
    "TrustedContactRepository",
    "UserRepository",
]
