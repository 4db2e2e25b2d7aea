from __future__ import annotations

"""
Tests for journal command.
"""

from decimal import Decimal

import pytest

from fintrack.cli.command.journal import run
from fintrack.model.events import InvoiceOpened, InvoicePaymentRecorded
from fintrack.storage.event_store import EventStore
from fintrack.workspace import Workspace


@pytest.fixture
def workspace(tmp_path):
    workspace = Workspace(root=tmp_path)
    store = EventStore(workspace.event_store_path)
    store.append_event(
        InvoiceOpened(invoice_id="1", credit_card_id="1", month="2024-01", due_date="2024-01-10", status="OPEN")
    )
    store.append_event(
        InvoicePaymentRecorded(
            invoice_id="1",
            amount=Decimal("40.00"),
            paid_amount=Decimal("40.00"),
            total_amount=Decimal("100.00"),
            status="PARTIAL",
        )
    )
    return workspace


class DescribeJournalCommand:
    def it_should_list_recent_events(self, workspace, capsys):
        rc = run(workspace=workspace)

        assert rc == 0
        out = capsys.readouterr().out
        assert "InvoiceOpened" in out
        assert "InvoicePaymentRecorded" in out

    def it_should_filter_by_type(self, workspace, capsys):
        rc = run(workspace=workspace, event_type="InvoiceOpened")

        assert rc == 0
        assert "InvoicePaymentRecorded" not in capsys.readouterr().out

    def it_should_filter_by_aggregate(self, workspace):
        assert run(workspace=workspace, aggregate_type="invoice", aggregate_id="1") == 0

    def it_should_require_both_aggregate_options(self, workspace):
        assert run(workspace=workspace, aggregate_type="invoice") == 1

    def it_should_succeed_without_a_journal(self, tmp_path):
        assert run(workspace=Workspace(root=tmp_path)) == 0
