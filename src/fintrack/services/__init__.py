"""
Service layer for FinTrack.

This module contains the functional core separated from the imperative
shell (CLI). Services work on the domain aggregates and return data
structures; they never print.

Principles:
- No UI framework imports (Rich, Typer)
- All dependencies injected through constructors
- Failures raised as fintrack.errors exceptions before anything is mutated
"""

from fintrack.services.expense_report_service import ExpenseReportService
from fintrack.services.expense_sharing_service import (
    Allocation,
    ExpenseSharingService,
    divide_equally,
    percentages_from_amounts,
)
from fintrack.services.invoice_calculation_service import InvoiceCalculationService
from fintrack.services.invoice_import_service import (
    ImportResult,
    InvoiceImportService,
    ParsedInvoice,
    ParsedInvoiceItem,
)
from fintrack.services.invoice_service import InvoiceService
from fintrack.services.merchant_categorization_service import (
    CategorizationResult,
    MerchantCategorizationService,
)
from fintrack.services.merchant_normalization_service import MerchantNormalizationService

__all__ = [
    "Allocation",
    "CategorizationResult",
    "ExpenseReportService",
    "ExpenseSharingService",
    "ImportResult",
    "InvoiceCalculationService",
    "InvoiceImportService",
    "InvoiceService",
    "MerchantCategorizationService",
    "MerchantNormalizationService",
    "ParsedInvoice",
    "ParsedInvoiceItem",
    "divide_equally",
    "percentages_from_amounts",
]
