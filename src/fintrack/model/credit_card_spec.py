from __future__ import annotations

from decimal import Decimal

import pytest

from fintrack.errors import DomainRuleViolation, PreconditionViolation
from fintrack.model.credit_card import Bank, CardType, CreditCard
from fintrack.model.participant import User


@pytest.fixture
def owner():
    user = User.create("Ana", "ana@example.com")
    user.assign_id(1)
    return user


@pytest.fixture
def bank():
    return Bank.create("260", "Nubank")


@pytest.fixture
def physical(owner, bank):
    card = CreditCard.create("Roxinho", "1234", "5000", owner, bank)
    card.assign_id(1)
    return card


class DescribeCreditCard:
    def it_should_create_an_active_physical_card(self, physical):
        assert physical.active
        assert physical.card_type is CardType.PHYSICAL
        assert physical.limit == Decimal("5000.00")
        assert not physical.is_sub_card

    @pytest.mark.parametrize("digits", ["123", "12345", "12a4"])
    def it_should_require_exactly_four_digits(self, owner, bank, digits):
        with pytest.raises(DomainRuleViolation):
            CreditCard.create("Roxinho", digits, "5000", owner, bank)

    def it_should_require_a_positive_limit(self, owner, bank):
        with pytest.raises(DomainRuleViolation):
            CreditCard.create("Roxinho", "1234", "0", owner, bank)

    def it_should_create_a_virtual_card_under_a_physical_parent(self, owner, bank, physical):
        virtual = CreditCard.create(
            "Virtual", "9876", "1000", owner, bank, CardType.VIRTUAL, parent_card=physical
        )

        assert virtual.is_sub_card
        assert virtual.parent_card is physical

    def it_should_require_a_parent_for_virtual_cards(self, owner, bank):
        with pytest.raises(PreconditionViolation):
            CreditCard.create("Virtual", "9876", "1000", owner, bank, CardType.VIRTUAL)

    def it_should_reject_a_parent_of_another_owner(self, bank, physical):
        other = User.create("Bruno", "bruno@example.com")
        other.assign_id(2)

        with pytest.raises(DomainRuleViolation):
            CreditCard.create("Extra", "5555", "1000", other, bank, CardType.ADDITIONAL, physical)

    def it_should_reject_a_parent_on_a_physical_card(self, owner, bank, physical):
        with pytest.raises(DomainRuleViolation):
            CreditCard.create("Outro", "5555", "1000", owner, bank, CardType.PHYSICAL, physical)

    def it_should_toggle_activation(self, physical):
        physical.deactivate()
        assert not physical.active
        physical.activate()
        assert physical.active

    def it_should_validate_limit_updates(self, physical):
        with pytest.raises(DomainRuleViolation):
            physical.update_limit("-10")
        assert physical.limit == Decimal("5000.00")
