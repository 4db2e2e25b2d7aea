"""
Identity semantics shared by every persisted entity.

Entities compare by their persistence-assigned identity. An entity whose
identity has not been assigned yet is equal only to itself, so two distinct
unsaved instances are never mistaken for one another.

Identity is assigned once, through ``assign_id``, by the repository that
saves the entity (or by tests standing in for one).
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class Entity(BaseModel):
    """Base model carrying a nullable surrogate key."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: int | None = None

    def assign_id(self, entity_id: int) -> None:
        """Assign the persistence identity.

        Re-assigning the same value is a no-op; changing an existing identity
        is refused.
        """
        if entity_id is None:
            raise ValueError("Entity id must not be None.")
        if self.id is not None and self.id != entity_id:
            raise ValueError(
                f"{type(self).__name__} already has id {self.id}; cannot reassign to {entity_id}"
            )
        self.id = entity_id

    @property
    def is_persisted(self) -> bool:
        return self.id is not None

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if type(self) is not type(other):
            return False
        return self.id is not None and self.id == other.id  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        # Unsaved entities hash by object identity; saved ones by type and key.
        if self.id is None:
            return object.__hash__(self)
        return hash((type(self).__name__, self.id))


__all__ = ["Entity"]
