from __future__ import annotations

"""
Tests for status command.
"""

from fintrack.cli.command.status import run


class DescribeStatusCommand:
    def it_should_report_an_unpaid_invoice_past_due_as_overdue(self, capsys):
        rc = run(total="100", paid="0", due="2024-01-10", today="2024-02-01")

        assert rc == 0
        assert "Overdue" in capsys.readouterr().out

    def it_should_report_a_partial_payment(self, capsys):
        rc = run(total="100", paid="40", due="2024-01-10", today="2024-01-05")

        assert rc == 0
        assert "Partial" in capsys.readouterr().out

    def it_should_fail_on_a_malformed_date(self):
        assert run(total="100", paid="0", due="10/01/2024") == 1

    def it_should_fail_on_an_infinite_total(self, capsys):
        rc = run(total="Infinity", paid="0", due="2024-01-10", today="2024-01-05")

        assert rc == 1
        assert "Error:" in capsys.readouterr().out
