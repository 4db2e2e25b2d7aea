from __future__ import annotations

"""
Tests for split command.
"""

from fintrack.cli.command.split import run


class DescribeSplitCommand:
    def it_should_split_equally_with_the_remainder_on_the_last_participant(self, capsys):
        rc = run(amount="100", participants=["Ana", "Bruno", "Carla"])

        assert rc == 0
        out = capsys.readouterr().out
        assert "33.33" in out
        assert "33.34" in out

    def it_should_split_by_amounts(self, capsys):
        rc = run(amount="90", participants=["Ana", "Bruno"], amounts=["60", "30"])

        assert rc == 0
        assert "66.67%" in capsys.readouterr().out

    def it_should_fail_when_amounts_exceed_the_item(self):
        assert run(amount="50", participants=["Ana", "Bruno"], amounts=["40", "30"]) == 1

    def it_should_fail_when_amounts_and_participants_differ_in_number(self):
        assert run(amount="50", participants=["Ana", "Bruno"], amounts=["50"]) == 1

    def it_should_fail_on_an_invalid_amount(self):
        assert run(amount="fifty", participants=["Ana"]) == 1
