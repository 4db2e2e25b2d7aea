from __future__ import annotations

"""
Tests for categories command.
"""

from pathlib import Path
from tempfile import TemporaryDirectory

from fintrack.cli.command.categories import run
from fintrack.model.category import CategoryConfig, CategoryDefinition
from fintrack.model.category_io import save_categories_config
from fintrack.workspace import Workspace


class DescribeCategoriesCommand:
    def it_should_succeed_when_no_categories_are_defined(self):
        with TemporaryDirectory() as tmpdir:
            workspace = Workspace(root=Path(tmpdir))

            assert run(workspace=workspace) == 0

    def it_should_list_configured_categories(self, capsys):
        with TemporaryDirectory() as tmpdir:
            workspace = Workspace(root=Path(tmpdir))
            save_categories_config(
                workspace.categories_config,
                CategoryConfig(
                    categories=[
                        CategoryDefinition(name="Groceries", color="#4CAF50"),
                        CategoryDefinition(name="Pets"),
                    ]
                ),
            )

            rc = run(workspace=workspace)

            assert rc == 0
            out = capsys.readouterr().out
            assert "Groceries" in out
            assert "Pets" in out

    def it_should_fail_on_an_invalid_config(self):
        with TemporaryDirectory() as tmpdir:
            workspace = Workspace(root=Path(tmpdir))
            workspace.config_dir.mkdir()
            workspace.categories_config.write_text("categories:\n  - color: '#123456'\n", encoding="utf-8")

            assert run(workspace=workspace) == 1
