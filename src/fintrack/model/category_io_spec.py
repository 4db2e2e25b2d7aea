from __future__ import annotations

from pathlib import Path
from tempfile import TemporaryDirectory

import pytest

from fintrack.errors import DomainRuleViolation
from fintrack.model.category import CategoryConfig, CategoryDefinition
from fintrack.model.category_io import (
    STARTER_CATEGORIES,
    load_categories_config,
    save_categories_config,
)


class DescribeCategoryIO:
    def it_should_load_an_empty_config_when_the_file_is_missing(self):
        with TemporaryDirectory() as tmpdir:
            config = load_categories_config(Path(tmpdir) / "categories.yml")

            assert config.categories == []

    def it_should_save_and_reload_definitions(self):
        with TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "config" / "categories.yml"

            save_categories_config(path, CategoryConfig(categories=STARTER_CATEGORIES))
            loaded = load_categories_config(path)

            assert [d.name for d in loaded.categories] == [
                "Groceries",
                "Restaurants",
                "Transport",
                "Subscriptions",
                "Health",
            ]
            assert loaded.find("Groceries").color == "#4CAF50"

    def it_should_omit_missing_colors_from_the_file(self):
        with TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "categories.yml"

            save_categories_config(path, CategoryConfig(categories=[CategoryDefinition(name="Pets")]))

            assert "color" not in path.read_text(encoding="utf-8")

    def it_should_read_hand_written_yaml(self):
        with TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "categories.yml"
            path.write_text(
                'categories:\n  - name: Mercado\n    color: "#00FF00"\n  - name: Farmácia\n',
                encoding="utf-8",
            )

            config = load_categories_config(path)

            assert [d.name for d in config.categories] == ["Mercado", "Farmácia"]

    def it_should_report_invalid_files(self):
        with TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "categories.yml"
            path.write_text("categories:\n  - color: '#00FF00'\n", encoding="utf-8")

            with pytest.raises(DomainRuleViolation, match="Invalid categories config"):
                load_categories_config(path)
