from __future__ import annotations

"""
Expense categories.

Scope
- Pydantic v2 models for the named, colored tags applied to invoice items
- CategoryConfig mirrors config/categories.yml
- No I/O operations (handled by category_io.py)
"""

import re

from pydantic import BaseModel, Field, field_validator

from fintrack.config import UNCATEGORIZED_COLOR, UNCATEGORIZED_NAME
from fintrack.errors import require_text
from fintrack.model.entity import Entity

_COLOR_PATTERN = re.compile(r"^#[0-9A-Fa-f]{6}$")


class Category(Entity):
    """A named, colored expense tag. Identity only, no behavior."""

    name: str = Field(min_length=1, description="Category name")
    color: str | None = Field(default=None, description="Hex color such as #FF8800")

    @field_validator("color")
    @classmethod
    def _validate_color(cls, value: str | None) -> str | None:
        if value is not None and not _COLOR_PATTERN.match(value):
            raise ValueError(f"Category color must look like #RRGGBB: {value}")
        return value

    @classmethod
    def create(cls, name: str, color: str | None = None) -> Category:
        require_text(name, "Category name must not be null or blank.")
        return cls(name=name.strip(), color=color)


def uncategorized() -> Category:
    """Synthetic bucket used by reports for items without a category."""
    return Category(name=UNCATEGORIZED_NAME, color=UNCATEGORIZED_COLOR)


class CategoryDefinition(BaseModel):
    """One entry of config/categories.yml."""

    name: str = Field(min_length=1)
    color: str | None = None


class CategoryConfig(BaseModel):
    """Root of config/categories.yml."""

    categories: list[CategoryDefinition] = Field(default_factory=list)

    def find(self, name: str) -> CategoryDefinition | None:
        for definition in self.categories:
            if definition.name == name:
                return definition
        return None

    def to_categories(self) -> list[Category]:
        """Materialize configured definitions as Category entities numbered from 1."""
        result = []
        for index, definition in enumerate(self.categories, start=1):
            category = Category.create(definition.name, definition.color)
            category.assign_id(index)
            result.append(category)
        return result


__all__ = ["Category", "CategoryConfig", "CategoryDefinition", "uncategorized"]
