from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from fintrack.model.category import Category
from fintrack.model.credit_card import Bank, CreditCard
from fintrack.model.invoice import BillingMonth
from fintrack.model.invoice_item import CategorizationSource
from fintrack.model.merchant_rule import AutoApplyPolicy
from fintrack.model.participant import User
from fintrack.services.invoice_import_service import (
    ImportResult,
    ImportStatus,
    InvoiceImportService,
    ParsedInvoice,
    ParsedInvoiceItem,
    is_special_item,
    item_signature,
    normalize_description,
)
from fintrack.services.invoice_service import InvoiceService
from fintrack.services.merchant_categorization_service import MerchantCategorizationService
from fintrack.storage.repositories import InvoiceItemRepository, InvoiceRepository, MerchantRuleRepository

TODAY = date(2024, 1, 20)


@pytest.fixture
def ana():
    user = User.create("Ana", "ana@example.com")
    user.assign_id(1)
    return user


@pytest.fixture
def card(ana):
    card = CreditCard.create("Roxinho", "1234", "5000", ana, Bank.create("260", "Nubank"))
    card.assign_id(1)
    return card


@pytest.fixture
def invoices():
    return InvoiceRepository()


@pytest.fixture
def categorization():
    return MerchantCategorizationService(MerchantRuleRepository())


@pytest.fixture
def service(invoices, categorization):
    invoice_service = InvoiceService(invoices, InvoiceItemRepository(), categorization_service=categorization)
    return InvoiceImportService(invoice_service, invoices, categorization)


def _line(description, amount, day=5, installments=None, total_installments=None):
    return ParsedInvoiceItem(
        description=description,
        amount=Decimal(amount),
        purchase_date=date(2024, 1, day),
        installments=installments,
        total_installments=total_installments,
    )


def _statement(*lines, confidence=None):
    return ParsedInvoice(
        credit_card_name="Roxinho",
        card_number="1234",
        due_date=date(2024, 1, 10),
        invoice_month="2024-01",
        items=list(lines),
        confidence=confidence,
    )


class DescribeSignatures:
    def it_should_normalize_case_and_whitespace(self):
        assert normalize_description("  Mercado   Extra ") == "mercado extra"
        assert normalize_description(None) == ""

    def it_should_recognize_fee_like_items(self):
        assert is_special_item("iof compra exterior")
        assert is_special_item("anuidade tarifa")
        assert not is_special_item("mercado extra")
        assert not is_special_item("")

    def it_should_ignore_installments_for_fee_like_items(self):
        first = item_signature("IOF Compra Exterior", "3.50", date(2024, 1, 5), 1, 1)
        second = item_signature("iof compra  exterior", Decimal("3.5"), date(2024, 1, 5), 2, 3)

        assert first == second

    def it_should_distinguish_installments_of_ordinary_purchases(self):
        first = item_signature("Geladeira", "300", date(2024, 1, 5), 1, 10)
        second = item_signature("Geladeira", "300", date(2024, 1, 5), 2, 10)

        assert first != second


class DescribeImportInvoice:
    def it_should_open_the_invoice_and_add_every_line(self, service, invoices, card, ana):
        result = service.import_invoice(
            card, _statement(_line("Mercado", "100.00"), _line("Farmacia", "23.90")), ana, today=TODAY
        )

        assert result.status is ImportStatus.COMPLETED
        assert len(result.added) == 2
        assert result.skipped == 0
        assert result.invoice.total_amount == Decimal("123.90")
        assert invoices.find_by_credit_card_and_month(card, BillingMonth.of(2024, 1)) is result.invoice

    def it_should_skip_lines_already_imported(self, service, invoices, card, ana):
        statement = _statement(_line("Mercado", "100.00"), _line("Farmacia", "23.90"))
        service.import_invoice(card, statement, ana, today=TODAY)

        result = service.import_invoice(card, statement, ana, today=TODAY)

        assert result.added == []
        assert result.skipped == 2
        assert result.invoice.total_amount == Decimal("123.90")
        assert len(invoices) == 1

    def it_should_skip_repeats_within_one_statement(self, service, card, ana):
        result = service.import_invoice(
            card, _statement(_line("Mercado", "100.00"), _line("MERCADO ", "100")), ana, today=TODAY
        )

        assert len(result.added) == 1
        assert result.skipped == 1

    def it_should_match_fees_regardless_of_installment_data(self, service, card, ana):
        service.import_invoice(card, _statement(_line("IOF compra exterior", "3.50")), ana, today=TODAY)

        result = service.import_invoice(
            card,
            _statement(_line("IOF compra exterior", "3.50", installments=1, total_installments=3)),
            ana,
            today=TODAY,
        )

        assert result.skipped == 1

    def it_should_keep_each_installment_of_a_purchase(self, service, card, ana):
        result = service.import_invoice(
            card,
            _statement(
                _line("Geladeira", "300", installments=1, total_installments=10),
                _line("Geladeira", "300", installments=2, total_installments=10),
            ),
            ana,
            today=TODAY,
        )

        assert len(result.added) == 2

    def it_should_ask_for_review_when_parsing_was_unsure(self, service, invoices, card, ana):
        result = service.import_invoice(card, _statement(_line("Mercado", "10"), confidence=0.5), ana, today=TODAY)

        assert result.status is ImportStatus.MANUAL_REVIEW
        assert result.invoice is None
        assert len(invoices) == 0

    def it_should_default_the_due_date_and_month(self, service, card, ana):
        statement = ParsedInvoice(items=[_line("Mercado", "10")])

        result = service.import_invoice(card, statement, ana, today=TODAY)

        assert result.invoice.due_date == date(2024, 2, 19)
        assert result.invoice.month == BillingMonth.of(2024, 2)

    def it_should_report_bad_lines_and_keep_going(self, service, card, ana):
        result = service.import_invoice(
            card,
            _statement(
                _line("Parcelado", "50", installments=3, total_installments=2),
                _line("Mercado", "10"),
            ),
            ana,
            today=TODAY,
        )

        assert len(result.added) == 1
        assert result.skipped == 1
        assert result.errors[0].startswith("Parcelado:")


class DescribeImportCategorization:
    def it_should_auto_categorize_known_merchants(self, service, categorization, card, ana):
        transport = Category.create("Transport")
        first = service.import_invoice(card, _statement(_line("UBER *TRIP 1", "20")), ana, today=TODAY)
        categorization.record_manual_categorization(first.added[0], transport, ana)

        result = service.import_invoice(card, _statement(_line("UBER *TRIP 2", "31.50", day=6)), ana, today=TODAY)

        assert result.auto_categorized == 1
        assert result.added[0].category == transport
        assert result.added[0].categorization_source is CategorizationSource.AUTO_RULE

    def it_should_only_suggest_from_untrusted_rules(self, invoices, card, ana):
        categorization = MerchantCategorizationService(
            MerchantRuleRepository(), policy=AutoApplyPolicy(min_confirmations=5)
        )
        invoice_service = InvoiceService(invoices, InvoiceItemRepository())
        service = InvoiceImportService(invoice_service, invoices, categorization)
        transport = Category.create("Transport")
        first = service.import_invoice(card, _statement(_line("UBER", "20")), ana, today=TODAY)
        categorization.record_manual_categorization(first.added[0], transport, ana)

        result = service.import_invoice(card, _statement(_line("UBER BR", "31.50")), ana, today=TODAY)

        assert result.auto_categorized == 0
        assert result.suggestions[0].category == transport
        assert result.added[0].category is None


class DescribeImportResult:
    def it_should_compute_the_success_rate(self):
        result = ImportResult(invoice=None, added=[object(), object(), object()], skipped=1)

        assert result.total_processed == 4
        assert result.success_rate == 75.0

    def it_should_report_zero_for_an_empty_import(self):
        assert ImportResult(invoice=None).success_rate == 0.0
