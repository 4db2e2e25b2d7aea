"""
Invoice import service - turns parsed statement data into invoice items.

Parsing (PDF, OCR, CSV) happens elsewhere; this service receives the parsed
lines, finds or opens the invoice for the statement's month, adds the lines
that are not already there and lets the user's merchant rules categorize
them.

Duplicates are detected by signature: the SHA-256 of the normalized
description, amount, purchase date and installment position. Fee-like lines
(IOF, tarifa, foreign transaction fee, ...) are matched on description, amount
and date alone, since banks repeat them with arbitrary installment data.

NO IMPORTS FROM:
- rich (console, table, prompt)
- typer
"""

from __future__ import annotations

import hashlib
import logging
import re
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal
from enum import StrEnum
from typing import List, Optional

from pydantic import BaseModel, Field

from fintrack.config import SPECIAL_ITEM_MARKERS
from fintrack.errors import FinTrackError, require
from fintrack.model.category import Category
from fintrack.model.credit_card import CreditCard
from fintrack.model.invoice import BillingMonth, Invoice
from fintrack.model.invoice_item import CategorizationSource, InvoiceItem
from fintrack.model.money import to_money
from fintrack.model.participant import User
from fintrack.services.invoice_service import InvoiceService
from fintrack.services.merchant_categorization_service import MerchantCategorizationService
from fintrack.storage.repositories import InvoiceRepository

logger = logging.getLogger(__name__)

SIGNATURE_DELIMITER = "|"
DEFAULT_INSTALLMENTS = 1
DEFAULT_DUE_DATE_DAYS = 30
MANUAL_REVIEW_CONFIDENCE_THRESHOLD = 0.7

_WHITESPACE = re.compile(r"\s+")


class ParsedInvoiceItem(BaseModel):
    """One line read from a statement."""

    description: str = Field(min_length=1)
    amount: Decimal
    purchase_date: Optional[date] = None
    category: Optional[str] = Field(default=None, description="Parser's category guess")
    installments: Optional[int] = Field(default=None, ge=1)
    total_installments: Optional[int] = Field(default=None, ge=1)
    confidence: Optional[float] = Field(default=None, ge=0.0, le=1.0)


class ParsedInvoice(BaseModel):
    """A whole parsed statement."""

    credit_card_name: Optional[str] = None
    card_number: Optional[str] = Field(default=None, description="Last four digits")
    due_date: Optional[date] = None
    total_amount: Optional[Decimal] = None
    invoice_month: Optional[str] = Field(default=None, description="YYYY-MM")
    items: List[ParsedInvoiceItem] = Field(default_factory=list)
    confidence: Optional[float] = Field(default=None, ge=0.0, le=1.0)


class ImportStatus(StrEnum):
    COMPLETED = "COMPLETED"
    MANUAL_REVIEW = "MANUAL_REVIEW"


@dataclass
class Suggestion:
    item: InvoiceItem
    category: Category


@dataclass
class ImportResult:
    """What an import did to the invoice."""

    invoice: Invoice | None
    status: ImportStatus = ImportStatus.COMPLETED
    added: list[InvoiceItem] = field(default_factory=list)
    skipped: int = 0
    auto_categorized: int = 0
    suggestions: list[Suggestion] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def total_processed(self) -> int:
        return len(self.added) + self.skipped

    @property
    def success_rate(self) -> float:
        """Percentage of processed lines that were added."""
        if self.total_processed == 0:
            return 0.0
        return len(self.added) / self.total_processed * 100


def normalize_description(description: str | None) -> str:
    if description is None:
        return ""
    return _WHITESPACE.sub(" ", description.strip().lower())


def is_special_item(normalized_description: str) -> bool:
    return bool(normalized_description) and any(
        marker in normalized_description for marker in SPECIAL_ITEM_MARKERS
    )


def item_signature(
    description: str,
    amount,
    purchase_date: date | None,
    installments: int,
    total_installments: int,
) -> str:
    """Deduplication signature of one item (hex SHA-256)."""
    normalized = normalize_description(description)
    parts = [
        normalized,
        str(to_money(amount)) if amount is not None else "0.00",
        purchase_date.isoformat() if purchase_date is not None else "",
    ]
    if not is_special_item(normalized):
        parts += [str(installments), str(total_installments)]
    base = SIGNATURE_DELIMITER.join(parts)
    return hashlib.sha256(base.encode("utf-8")).hexdigest()


class InvoiceImportService:
    """
    Imports parsed statement lines into invoices.

    Responsibilities:
    - Find or open the invoice of the statement's card and month
    - Skip lines already on the invoice or repeated within the batch
    - Apply the user's merchant rules to the new lines

    Does NOT:
    - Parse files
    - Fail the whole import because of one bad line (it is skipped and reported)
    """

    def __init__(
        self,
        invoice_service: InvoiceService,
        invoice_repository: InvoiceRepository,
        categorization_service: MerchantCategorizationService | None = None,
    ):
        self._invoice_service = invoice_service
        self._invoices = invoice_repository
        self._categorization = categorization_service

    def import_invoice(
        self,
        credit_card: CreditCard,
        parsed: ParsedInvoice,
        user: User,
        *,
        today: date | None = None,
    ) -> ImportResult:
        """Import a whole parsed statement for ``credit_card``.

        Statements parsed with low confidence are not imported; the result
        asks for manual review instead.
        """
        require(credit_card, "Credit card must not be null.")
        require(parsed, "Parsed invoice must not be null.")
        if parsed.confidence is not None and parsed.confidence < MANUAL_REVIEW_CONFIDENCE_THRESHOLD:
            logger.info(
                "Import for card %s needs manual review (confidence %.2f)",
                credit_card.name,
                parsed.confidence,
            )
            return ImportResult(invoice=None, status=ImportStatus.MANUAL_REVIEW)

        current = today if today is not None else date.today()
        due_date = parsed.due_date or current + timedelta(days=DEFAULT_DUE_DATE_DAYS)
        month = (
            BillingMonth.parse(parsed.invoice_month)
            if parsed.invoice_month
            else BillingMonth.from_date(due_date)
        )
        invoice = self._find_or_open(credit_card, month, due_date, current)
        return self.import_items(invoice, parsed.items, user, today=current)

    def import_items(
        self,
        invoice: Invoice,
        parsed_items: list[ParsedInvoiceItem],
        user: User | None,
        *,
        today: date | None = None,
    ) -> ImportResult:
        """Add the new lines of ``parsed_items`` to ``invoice``."""
        require(invoice, "Invoice must not be null.")
        current = today if today is not None else date.today()
        result = ImportResult(invoice=invoice)
        if not parsed_items:
            logger.warning("No items found in parsed data for invoice: %s", invoice.id)
            return result

        total_before = invoice.total_amount
        signatures = {self._signature_of(item) for item in invoice.items}

        for parsed in parsed_items:
            purchase_date = parsed.purchase_date or current
            installments = parsed.installments or DEFAULT_INSTALLMENTS
            total_installments = parsed.total_installments or DEFAULT_INSTALLMENTS
            signature = item_signature(
                parsed.description, parsed.amount, purchase_date, installments, total_installments
            )
            if signature in signatures:
                logger.debug("Skipped duplicate item by signature: %s", parsed.description)
                result.skipped += 1
                continue

            try:
                item = InvoiceItem.create(
                    invoice,
                    parsed.description,
                    parsed.amount,
                    None,
                    purchase_date,
                    installments=installments,
                    total_installments=total_installments,
                )
                self._invoice_service.attach_item(invoice, item, source="import", today=current)
            except FinTrackError as e:
                logger.warning("Error adding item to invoice: %s - %s", parsed.description, e)
                result.errors.append(f"{parsed.description}: {e}")
                result.skipped += 1
                continue

            signatures.add(signature)
            result.added.append(item)
            if user is not None:
                self._categorize(item, user, result)

        logger.info(
            "Invoice %s updated. Items added: %d, skipped: %d, total: %s -> %s",
            invoice.id,
            len(result.added),
            result.skipped,
            total_before,
            invoice.total_amount,
        )
        return result

    def _find_or_open(
        self, credit_card: CreditCard, month: BillingMonth, due_date: date, today: date
    ) -> Invoice:
        invoice = self._invoices.find_by_credit_card_and_month(credit_card, month)
        if invoice is not None:
            logger.info("Found existing invoice %s for card %s and month %s", invoice.id, credit_card.id, month)
            return invoice
        return self._invoice_service.open_invoice(credit_card, month, due_date, today=today)

    def _signature_of(self, item: InvoiceItem) -> str:
        return item_signature(
            item.description,
            item.amount,
            item.purchase_date,
            item.installments,
            item.total_installments,
        )

    def _categorize(self, item: InvoiceItem, user: User, result: ImportResult) -> None:
        if not self._categorization:
            return
        outcome = self._categorization.apply_rule(item, user)
        if not outcome.applied:
            return
        if outcome.source is CategorizationSource.AUTO_RULE:
            result.auto_categorized += 1
        elif outcome.suggested_category is not None:
            result.suggestions.append(Suggestion(item=item, category=outcome.suggested_category))


__all__ = [
    "ImportResult",
    "ImportStatus",
    "InvoiceImportService",
    "ParsedInvoice",
    "ParsedInvoiceItem",
    "Suggestion",
    "is_special_item",
    "item_signature",
    "normalize_description",
]
