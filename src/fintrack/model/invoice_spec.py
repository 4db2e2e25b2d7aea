from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from fintrack.errors import CrossAggregateConflict, DomainRuleViolation, PreconditionViolation
from fintrack.model.credit_card import Bank, CreditCard
from fintrack.model.invoice import BillingMonth, Invoice, InvoiceStatus, derive_status
from fintrack.model.invoice_item import InvoiceItem
from fintrack.model.participant import User

DUE = date(2024, 1, 10)
BEFORE_DUE = date(2024, 1, 5)
AFTER_DUE = date(2024, 2, 1)


@pytest.fixture
def card():
    owner = User.create("Ana", "ana@example.com")
    owner.assign_id(1)
    bank = Bank.create("260", "Nubank")
    bank.assign_id(1)
    card = CreditCard.create("Roxinho", "1234", "5000", owner, bank)
    card.assign_id(1)
    return card


@pytest.fixture
def invoice(card):
    return Invoice.create(card, "2024-01", DUE, today=BEFORE_DUE)


def _item(invoice, amount, description="Mercado", item_id=None):
    item = InvoiceItem.create(invoice, description, amount, None, date(2024, 1, 2))
    if item_id is not None:
        item.assign_id(item_id)
    return item


class DescribeDeriveStatus:
    def it_should_close_an_empty_invoice_after_the_due_date(self):
        assert derive_status(Decimal("0"), Decimal("0"), DUE, AFTER_DUE) is InvoiceStatus.CLOSED

    def it_should_keep_an_empty_invoice_open_before_the_due_date(self):
        assert derive_status(Decimal("0"), Decimal("0"), DUE, BEFORE_DUE) is InvoiceStatus.OPEN

    def it_should_prefer_paid_over_overdue(self):
        assert derive_status(Decimal("100"), Decimal("100"), DUE, AFTER_DUE) is InvoiceStatus.PAID

    def it_should_report_partial_payments(self):
        assert derive_status(Decimal("100"), Decimal("40"), DUE, AFTER_DUE) is InvoiceStatus.PARTIAL

    def it_should_report_unpaid_invoices_past_due_as_overdue(self):
        assert derive_status(Decimal("100"), Decimal("0"), DUE, AFTER_DUE) is InvoiceStatus.OVERDUE

    def it_should_not_consider_the_due_date_itself_overdue(self):
        assert derive_status(Decimal("100"), Decimal("0"), DUE, DUE) is InvoiceStatus.OPEN


class DescribeBillingMonth:
    def it_should_parse_and_format_year_month(self):
        month = BillingMonth.parse("2024-03")

        assert month == BillingMonth.of(2024, 3)
        assert str(month) == "2024-03"

    def it_should_roll_over_the_year(self):
        assert BillingMonth.of(2024, 12).next() == BillingMonth.of(2025, 1)

    def it_should_order_chronologically(self):
        assert BillingMonth.of(2023, 12) < BillingMonth.of(2024, 1)
        assert BillingMonth.of(2024, 1) <= BillingMonth.of(2024, 1)

    def it_should_reject_month_thirteen(self):
        with pytest.raises(ValueError):
            BillingMonth.of(2024, 13)


class DescribeInvoice:
    class DescribeCreate:
        def it_should_start_empty_and_open(self, invoice):
            assert invoice.total_amount == Decimal("0.00")
            assert invoice.paid_amount == Decimal("0.00")
            assert invoice.status is InvoiceStatus.OPEN
            assert invoice.month == BillingMonth.of(2024, 1)
            assert invoice.items == []

        def it_should_require_a_due_date(self, card):
            with pytest.raises(PreconditionViolation):
                Invoice.create(card, "2024-01", None)

    class DescribeItems:
        def it_should_add_items_to_the_total(self, invoice):
            invoice.add_item(_item(invoice, "30.10"), today=BEFORE_DUE)
            invoice.add_item(_item(invoice, "19.90"), today=BEFORE_DUE)

            assert invoice.total_amount == Decimal("50.00")
            assert len(invoice.items) == 2

        def it_should_accept_negative_items_as_refunds(self, invoice):
            invoice.add_item(_item(invoice, "100"), today=BEFORE_DUE)
            invoice.add_item(_item(invoice, "-30", "Estorno"), today=BEFORE_DUE)

            assert invoice.total_amount == Decimal("70.00")

        def it_should_reject_the_same_item_twice(self, invoice):
            item = _item(invoice, "10")
            invoice.add_item(item, today=BEFORE_DUE)

            with pytest.raises(DomainRuleViolation):
                invoice.add_item(item, today=BEFORE_DUE)
            assert invoice.total_amount == Decimal("10.00")

        def it_should_reject_items_of_another_invoice(self, card, invoice):
            other = Invoice.create(card, "2024-02", date(2024, 2, 10), today=BEFORE_DUE)
            item = _item(other, "10")

            with pytest.raises(DomainRuleViolation):
                invoice.add_item(item, today=BEFORE_DUE)

        def it_should_restore_the_total_when_an_item_is_removed(self, invoice):
            invoice.add_item(_item(invoice, "40"), today=BEFORE_DUE)
            item = _item(invoice, "60")
            invoice.add_item(item, today=BEFORE_DUE)

            invoice.remove_item(item, today=BEFORE_DUE)

            assert invoice.total_amount == Decimal("40.00")
            assert not invoice.contains(item)
            assert item.invoice is None

        def it_should_reject_removing_an_item_it_does_not_hold(self, invoice):
            with pytest.raises(DomainRuleViolation):
                invoice.remove_item(_item(invoice, "5"), today=BEFORE_DUE)

        def it_should_return_a_copy_of_its_items(self, invoice):
            invoice.add_item(_item(invoice, "5"), today=BEFORE_DUE)

            invoice.items.clear()

            assert len(invoice.items) == 1

    class DescribeStatusLifecycle:
        def it_should_follow_the_worked_scenario(self, invoice):
            item = _item(invoice, "100")
            invoice.add_item(item, today=BEFORE_DUE)
            assert invoice.refresh_status(today=AFTER_DUE) is InvoiceStatus.OVERDUE

            invoice.record_payment("100", today=AFTER_DUE)
            assert invoice.status is InvoiceStatus.PAID

        def it_should_close_an_empty_invoice_past_due_and_reopen_as_overdue(self, invoice):
            assert invoice.refresh_status(today=AFTER_DUE) is InvoiceStatus.CLOSED

            invoice.add_item(_item(invoice, "50"), today=AFTER_DUE)

            assert invoice.status is InvoiceStatus.OVERDUE
            assert invoice.total_amount == Decimal("50.00")

        def it_should_be_idempotent_when_refreshed(self, invoice):
            invoice.add_item(_item(invoice, "10"), today=AFTER_DUE)

            first = invoice.refresh_status(today=AFTER_DUE)
            second = invoice.refresh_status(today=AFTER_DUE)

            assert first is second is InvoiceStatus.OVERDUE
            assert invoice.total_amount == Decimal("10.00")

        def it_should_fall_back_from_paid_when_new_items_arrive(self, invoice):
            invoice.add_item(_item(invoice, "100"), today=BEFORE_DUE)
            invoice.record_payment("100", today=BEFORE_DUE)

            invoice.add_item(_item(invoice, "20"), today=BEFORE_DUE)

            assert invoice.status is InvoiceStatus.PARTIAL

        def it_should_not_allow_the_status_to_be_set_directly(self, invoice):
            with pytest.raises((AttributeError, ValueError)):
                invoice.status = InvoiceStatus.PAID

            assert invoice.status is InvoiceStatus.OPEN

    class DescribePayments:
        def it_should_accumulate_partial_payments(self, invoice):
            invoice.add_item(_item(invoice, "100"), today=BEFORE_DUE)

            invoice.record_payment("30", today=BEFORE_DUE)
            invoice.record_payment(Decimal("20.005"), today=BEFORE_DUE)

            assert invoice.paid_amount == Decimal("50.01")
            assert invoice.remaining_amount == Decimal("49.99")
            assert invoice.status is InvoiceStatus.PARTIAL

        def it_should_reject_negative_payments(self, invoice):
            invoice.add_item(_item(invoice, "100"), today=BEFORE_DUE)

            with pytest.raises(DomainRuleViolation):
                invoice.record_payment("-1", today=BEFORE_DUE)
            assert invoice.paid_amount == Decimal("0.00")

        def it_should_reject_a_payment_that_is_not_a_number(self, invoice):
            invoice.add_item(_item(invoice, "100"), today=BEFORE_DUE)

            with pytest.raises(DomainRuleViolation):
                invoice.record_payment("NaN", today=BEFORE_DUE)
            assert invoice.paid_amount == Decimal("0.00")

        def it_should_reject_paying_more_than_the_total(self, invoice):
            invoice.add_item(_item(invoice, "100"), today=BEFORE_DUE)
            invoice.record_payment("80", today=BEFORE_DUE)

            with pytest.raises(CrossAggregateConflict):
                invoice.record_payment("30", today=BEFORE_DUE)
            assert invoice.paid_amount == Decimal("80.00")

        def it_should_accept_payments_on_a_zero_total_invoice(self, invoice):
            invoice.record_payment("15", today=BEFORE_DUE)

            assert invoice.paid_amount == Decimal("15.00")
            assert invoice.status is InvoiceStatus.OPEN

        def it_should_require_an_amount(self, invoice):
            with pytest.raises(PreconditionViolation):
                invoice.record_payment(None)


class DescribeInvoiceStatus:
    def it_should_offer_a_display_name(self):
        assert InvoiceStatus.OVERDUE.display_name == "Overdue"
