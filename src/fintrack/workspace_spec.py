from __future__ import annotations

from pathlib import Path

from fintrack.workspace import Workspace


class DescribeWorkspace:
    class DescribeResolve:
        def it_should_use_explicit_path_when_provided(self):
            ws = Workspace.resolve(explicit=Path("/tmp/my-cards"))
            assert ws.root == Path("/tmp/my-cards")

        def it_should_use_fintrack_data_env_var_when_set(self, monkeypatch):
            monkeypatch.setenv("FINTRACK_DATA", "/tmp/env-cards")
            ws = Workspace.resolve()
            assert ws.root == Path("/tmp/env-cards")

        def it_should_prefer_explicit_over_env_var(self, monkeypatch):
            monkeypatch.setenv("FINTRACK_DATA", "/tmp/env-cards")
            ws = Workspace.resolve(explicit=Path("/tmp/explicit"))
            assert ws.root == Path("/tmp/explicit")

        def it_should_fall_back_to_cwd_when_no_env_var(self, monkeypatch):
            monkeypatch.delenv("FINTRACK_DATA", raising=False)
            ws = Workspace.resolve()
            assert ws.root == Path.cwd()

    class DescribePaths:
        def it_should_keep_the_journal_under_data(self):
            ws = Workspace(root=Path("/cards"))
            assert ws.event_store_path == Path("/cards/data/events.db")

        def it_should_compute_categories_config(self):
            ws = Workspace(root=Path("/cards"))
            assert ws.categories_config == Path("/cards/config/categories.yml")
