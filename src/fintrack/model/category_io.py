from __future__ import annotations

"""
Category configuration I/O (YAML loading and saving).

Reads and writes config/categories.yml:

    categories:
      - name: Groceries
        color: "#4CAF50"
      - name: Transport
"""

from pathlib import Path

import yaml
from pydantic import ValidationError

from fintrack.errors import DomainRuleViolation
from fintrack.model.category import CategoryConfig, CategoryDefinition

STARTER_CATEGORIES = [
    CategoryDefinition(name="Groceries", color="#4CAF50"),
    CategoryDefinition(name="Restaurants", color="#FF9800"),
    CategoryDefinition(name="Transport", color="#2196F3"),
    CategoryDefinition(name="Subscriptions", color="#9C27B0"),
    CategoryDefinition(name="Health", color="#F44336"),
]


def load_categories_config(path: Path) -> CategoryConfig:
    """Load categories from YAML with the safe loader.

    A missing file yields an empty config. A file that exists but does not
    describe valid categories raises DomainRuleViolation naming the file.
    """
    if not path.exists():
        return CategoryConfig(categories=[])

    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        return CategoryConfig.model_validate(data)
    except (yaml.YAMLError, ValidationError) as e:
        raise DomainRuleViolation(f"Invalid categories config {path}: {e}") from e


def save_categories_config(path: Path, config: CategoryConfig) -> None:
    """Write ``config`` to ``path`` as YAML, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    data = config.model_dump(exclude_none=True, mode="json")
    with path.open("w", encoding="utf-8") as f:
        yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False, allow_unicode=True)


__all__ = ["STARTER_CATEGORIES", "load_categories_config", "save_categories_config"]
