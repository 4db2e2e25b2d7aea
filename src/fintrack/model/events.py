"""
Domain events journaled by the FinTrack services.

Each successful mutation of an aggregate (invoice, item shares, merchant
rule) can be recorded as an immutable event in the EventStore. The journal
is an audit trail; the aggregates themselves remain the source of truth.

All events inherit from ``Event`` and include:
- Automatic event_id generation (UUID)
- Automatic event_timestamp
- JSON serialization/deserialization via Pydantic v2
- Aggregate type and ID for grouping per invoice, item or rule

Monetary values are Decimals serialized as strings to keep cent precision.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Literal, Optional
from uuid import uuid4

from pydantic import BaseModel, Field, field_serializer, field_validator


def _as_decimal(value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


class Event(BaseModel):
    """Base event: identity, time and the aggregate it concerns."""

    event_id: str = Field(default_factory=lambda: str(uuid4()))
    event_type: str
    event_timestamp: datetime = Field(default_factory=datetime.now)
    aggregate_type: Optional[str] = None
    aggregate_id: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @field_serializer("event_timestamp")
    def serialize_timestamp(self, value: datetime) -> str:
        return value.isoformat()

    @field_validator("event_timestamp", mode="before")
    @classmethod
    def parse_timestamp(cls, value: Any) -> datetime:
        if isinstance(value, str):
            return datetime.fromisoformat(value)
        return value


class InvoiceEvent(Event):
    """Events grouped under the ``invoice`` aggregate."""

    aggregate_type: str = Field(default="invoice", frozen=True)
    invoice_id: str

    def __init__(self, **data):
        if "aggregate_id" not in data and "invoice_id" in data:
            data["aggregate_id"] = data["invoice_id"]
        super().__init__(**data)


class InvoiceOpened(InvoiceEvent):
    """A billing cycle opened for a credit card."""

    event_type: str = Field(default="InvoiceOpened", frozen=True)

    credit_card_id: str
    month: str  # YYYY-MM
    due_date: str  # ISO date
    status: str


class InvoiceItemAdded(InvoiceEvent):
    event_type: str = Field(default="InvoiceItemAdded", frozen=True)

    item_id: Optional[str] = None
    description: str
    amount: Decimal
    total_amount: Decimal
    status: str
    category: Optional[str] = None
    source: Literal["manual", "import"] = "manual"

    @field_serializer("amount", "total_amount")
    def serialize_amounts(self, value: Decimal) -> str:
        return str(value)

    @field_validator("amount", "total_amount", mode="before")
    @classmethod
    def parse_amounts(cls, value: Any) -> Decimal:
        return _as_decimal(value)


class InvoiceItemRemoved(InvoiceEvent):
    event_type: str = Field(default="InvoiceItemRemoved", frozen=True)

    item_id: Optional[str] = None
    description: str
    amount: Decimal
    total_amount: Decimal
    status: str

    @field_serializer("amount", "total_amount")
    def serialize_amounts(self, value: Decimal) -> str:
        return str(value)

    @field_validator("amount", "total_amount", mode="before")
    @classmethod
    def parse_amounts(cls, value: Any) -> Decimal:
        return _as_decimal(value)


class InvoicePaymentRecorded(InvoiceEvent):
    event_type: str = Field(default="InvoicePaymentRecorded", frozen=True)

    amount: Decimal
    paid_amount: Decimal
    total_amount: Decimal
    status: str

    @field_serializer("amount", "paid_amount", "total_amount")
    def serialize_amounts(self, value: Decimal) -> str:
        return str(value)

    @field_validator("amount", "paid_amount", "total_amount", mode="before")
    @classmethod
    def parse_amounts(cls, value: Any) -> Decimal:
        return _as_decimal(value)


class ShareAllocation(BaseModel):
    """One participant line of a committed distribution."""

    participant: str  # "user:<id>" or "contact:<id>"
    percentage: Decimal
    amount: Decimal
    responsible: bool = False

    @field_serializer("percentage", "amount")
    def serialize_decimals(self, value: Decimal) -> str:
        return str(value)

    @field_validator("percentage", "amount", mode="before")
    @classmethod
    def parse_decimals(cls, value: Any) -> Decimal:
        return _as_decimal(value)


class ItemSharesDistributed(Event):
    """An item's shares were replaced by a new distribution (empty = removed)."""

    event_type: str = Field(default="ItemSharesDistributed", frozen=True)
    aggregate_type: str = Field(default="invoice_item", frozen=True)

    item_id: Optional[str] = None
    item_amount: Decimal
    allocations: List[ShareAllocation] = Field(default_factory=list)

    def __init__(self, **data):
        if "aggregate_id" not in data and "item_id" in data:
            data["aggregate_id"] = data["item_id"]
        super().__init__(**data)

    @field_serializer("item_amount")
    def serialize_item_amount(self, value: Decimal) -> str:
        return str(value)

    @field_validator("item_amount", mode="before")
    @classmethod
    def parse_item_amount(cls, value: Any) -> Decimal:
        return _as_decimal(value)


class ItemSharePaymentChanged(Event):
    """A share was marked paid or unpaid."""

    event_type: str = Field(default="ItemSharePaymentChanged", frozen=True)
    aggregate_type: str = Field(default="item_share", frozen=True)

    share_id: Optional[str] = None
    paid: bool
    payment_method: Optional[str] = None
    paid_at: Optional[datetime] = None
    acting_user_id: Optional[str] = None

    def __init__(self, **data):
        if "aggregate_id" not in data and "share_id" in data:
            data["aggregate_id"] = data["share_id"]
        super().__init__(**data)


class MerchantRuleLearned(Event):
    """A merchant rule was created, confirmed or overridden by the user."""

    event_type: str = Field(default="MerchantRuleLearned", frozen=True)
    aggregate_type: str = Field(default="merchant_rule", frozen=True)

    user_id: str
    merchant_key: str
    action: Literal["created", "confirmed", "overridden"]
    category: str
    previous_category: Optional[str] = None
    times_confirmed: int = Field(ge=0)
    times_overridden: int = Field(ge=0)
    auto_apply: bool
    confidence: float = Field(ge=0.0, le=1.0)

    def __init__(self, **data):
        if "aggregate_id" not in data and "user_id" in data and "merchant_key" in data:
            data["aggregate_id"] = f"{data['user_id']}:{data['merchant_key']}"
        super().__init__(**data)


class MerchantRuleApplied(Event):
    """A rule auto-categorized an item."""

    event_type: str = Field(default="MerchantRuleApplied", frozen=True)
    aggregate_type: str = Field(default="merchant_rule", frozen=True)

    user_id: str
    merchant_key: str
    category: str
    item_description: str
    times_applied: int = Field(ge=0)

    def __init__(self, **data):
        if "aggregate_id" not in data and "user_id" in data and "merchant_key" in data:
            data["aggregate_id"] = f"{data['user_id']}:{data['merchant_key']}"
        super().__init__(**data)


def ref(value: Any) -> Optional[str]:
    """String form of an entity id for event payloads (None stays None)."""
    return None if value is None else str(value)


__all__ = [
    "Event",
    "InvoiceEvent",
    "InvoiceItemAdded",
    "InvoiceItemRemoved",
    "InvoiceOpened",
    "InvoicePaymentRecorded",
    "ItemSharePaymentChanged",
    "ItemSharesDistributed",
    "MerchantRuleApplied",
    "MerchantRuleLearned",
    "ShareAllocation",
    "ref",
]
