from __future__ import annotations

from decimal import Decimal

from fintrack.model.events import (
    InvoiceItemAdded,
    InvoicePaymentRecorded,
    ItemSharesDistributed,
    MerchantRuleLearned,
    ShareAllocation,
    ref,
)


class DescribeInvoiceEvents:
    def it_should_group_under_the_invoice_aggregate(self):
        event = InvoicePaymentRecorded(
            invoice_id="7",
            amount=Decimal("40.00"),
            paid_amount=Decimal("40.00"),
            total_amount=Decimal("100.00"),
            status="PARTIAL",
        )

        assert event.event_type == "InvoicePaymentRecorded"
        assert event.aggregate_type == "invoice"
        assert event.aggregate_id == "7"

    def it_should_keep_cent_precision_through_json(self):
        event = InvoiceItemAdded(
            invoice_id="7",
            item_id="3",
            description="Mercado",
            amount=Decimal("10.10"),
            total_amount=Decimal("110.10"),
            status="OPEN",
        )

        restored = InvoiceItemAdded.model_validate_json(event.model_dump_json())

        assert restored.amount == Decimal("10.10")
        assert str(restored.total_amount) == "110.10"
        assert restored.event_id == event.event_id
        assert restored.event_timestamp == event.event_timestamp


class DescribeItemSharesDistributed:
    def it_should_use_the_item_as_aggregate(self):
        event = ItemSharesDistributed(
            item_id="12",
            item_amount=Decimal("100.00"),
            allocations=[
                ShareAllocation(participant="user:1", percentage=Decimal("0.5"), amount=Decimal("50.00")),
                ShareAllocation(participant="contact:4", percentage=Decimal("0.5"), amount=Decimal("50.00")),
            ],
        )

        assert event.aggregate_type == "invoice_item"
        assert event.aggregate_id == "12"
        assert len(event.allocations) == 2


class DescribeMerchantRuleLearned:
    def it_should_key_the_aggregate_by_user_and_merchant(self):
        event = MerchantRuleLearned(
            user_id="1",
            merchant_key="UBER",
            action="created",
            category="Transport",
            times_confirmed=1,
            times_overridden=0,
            auto_apply=True,
            confidence=1.0,
        )

        assert event.aggregate_id == "1:UBER"


class DescribeRef:
    def it_should_stringify_ids_and_keep_none(self):
        assert ref(5) == "5"
        assert ref(None) is None
