from .category import Category, CategoryConfig, CategoryDefinition, uncategorized
from .credit_card import Bank, CardType, CreditCard
from .entity import Entity
from .invoice import BillingMonth, Invoice, InvoiceStatus, derive_status
from .invoice_item import CategorizationSource, InvoiceItem
from .item_share import ItemShare, PaymentMethod
from .merchant_rule import AutoApplyPolicy, MerchantCategoryRule
from .participant import Participant, TrustedContact, User

__all__ = [
    # support types
    "Bank",
    "CardType",
    "Category",
    "CategoryConfig",
    "CategoryDefinition",
    "CreditCard",
    "Entity",
    "Participant",
    "TrustedContact",
    "User",
    "uncategorized",
    # invoice aggregate
    "BillingMonth",
    "Invoice",
    "InvoiceStatus",
    "derive_status",
    "CategorizationSource",
    "InvoiceItem",
    "ItemShare",
    "PaymentMethod",
    # learning
    "AutoApplyPolicy",
    "MerchantCategoryRule",
]
