from __future__ import annotations

from datetime import date

import pytest

from fintrack.errors import NotFoundError
from fintrack.model.category import Category
from fintrack.model.credit_card import Bank, CreditCard
from fintrack.model.invoice import BillingMonth, Invoice
from fintrack.model.merchant_rule import MerchantCategoryRule
from fintrack.model.participant import TrustedContact, User
from fintrack.storage.repositories import (
    CategoryRepository,
    InvoiceRepository,
    MerchantRuleRepository,
    TrustedContactRepository,
    UserRepository,
)


class DescribeInMemoryRepository:
    def it_should_assign_sequential_ids_on_first_save(self):
        repository = UserRepository()

        ana = repository.save(User.create("Ana", "ana@example.com"))
        bruno = repository.save(User.create("Bruno", "bruno@example.com"))
        repository.save(ana)

        assert (ana.id, bruno.id) == (1, 2)
        assert len(repository) == 2

    def it_should_keep_ids_assigned_elsewhere(self):
        user = User.create("Ana", "ana@example.com")
        user.assign_id(10)
        repository = UserRepository([user])

        assert repository.save(User.create("Bruno", "bruno@example.com")).id == 11

    def it_should_raise_when_getting_a_missing_entity(self):
        with pytest.raises(NotFoundError, match="User 3 not found."):
            UserRepository().get(3)

    def it_should_forget_deleted_entities(self):
        repository = CategoryRepository()
        category = repository.save(Category.create("Food"))

        repository.delete(category)

        assert repository.find_by_id(category.id) is None
        assert repository.find_by_name("Food") is None


class DescribeLookups:
    @pytest.fixture
    def ana(self):
        return UserRepository().save(User.create("Ana", "ana@example.com"))

    def it_should_find_users_by_email_ignoring_case(self):
        repository = UserRepository()
        ana = repository.save(User.create("Ana", "ana@example.com"))

        assert repository.find_by_email(" ANA@example.com ") == ana

    def it_should_find_contacts_of_an_owner(self, ana):
        repository = TrustedContactRepository()
        bruno = repository.save(TrustedContact.create(ana, "Bruno", "bruno@example.com"))

        assert repository.find_by_owner(ana) == [bruno]
        assert repository.find_by_owner_and_email(ana, "BRUNO@example.com") == bruno

    def it_should_find_invoices_by_card_month_and_range(self, ana):
        card = CreditCard.create("Roxinho", "1234", "5000", ana, Bank.create("260", "Nubank"))
        card.assign_id(1)
        repository = InvoiceRepository()
        january = repository.save(Invoice.create(card, "2024-01", date(2024, 1, 10)))
        february = repository.save(Invoice.create(card, "2024-02", date(2024, 2, 10)))
        repository.save(Invoice.create(card, "2024-04", date(2024, 4, 10)))

        assert repository.find_by_credit_card_and_month(card, BillingMonth.of(2024, 2)) == february
        assert repository.find_by_credit_card_and_month(card, BillingMonth.of(2024, 3)) is None
        assert repository.find_by_month_between(BillingMonth.of(2024, 1), BillingMonth.of(2024, 3)) == [
            january,
            february,
        ]
        assert len(repository.find_by_owner(ana)) == 3

    def it_should_list_rules_most_confirmed_first(self, ana):
        repository = MerchantRuleRepository()
        category = Category.create("Transport")
        uber = repository.save(MerchantCategoryRule.create(ana, "UBER", None, category))
        netflix = repository.save(MerchantCategoryRule.create(ana, "NETFLIX", None, category))
        netflix.record_confirmation()

        assert repository.find_by_user(ana) == [netflix, uber]
        assert repository.find_by_user_and_key(ana, "UBER") == uber
        assert repository.find_by_user_and_key(ana, "IFOOD") is None
