"""
MerchantCategoryRule: a per-user, learned merchant -> category mapping.

Each time a user accepts a category for a merchant the rule is confirmed;
picking a different category overrides it (the new category starts over
with one confirmation). Importing an item for a known merchant applies the
rule, which only counts the application.

Two numbers come out of the counters and are kept apart:
- the confidence score, ``confirmed / (confirmed + overridden)``, which is
  informational;
- the auto-apply flag, a cached decision of ``AutoApplyPolicy`` re-derived on
  every confirmation and override.
"""

from __future__ import annotations

import logging
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr

from fintrack.config import AUTO_APPLY_THRESHOLD
from fintrack.errors import require, require_text
from fintrack.model.category import Category
from fintrack.model.entity import Entity
from fintrack.model.participant import User

logger = logging.getLogger(__name__)


class AutoApplyPolicy(BaseModel):
    """Decides whether a rule's counters justify applying it without asking."""

    model_config = ConfigDict(frozen=True)

    min_confirmations: int = Field(default=AUTO_APPLY_THRESHOLD, ge=1)

    @staticmethod
    def confidence(times_confirmed: int, times_overridden: int) -> float:
        total = times_confirmed + times_overridden
        if total == 0:
            return 0.0
        return times_confirmed / total

    def allows(self, times_confirmed: int, times_overridden: int) -> bool:
        return (
            times_confirmed >= self.min_confirmations
            and times_confirmed - times_overridden >= 0
        )


DEFAULT_POLICY = AutoApplyPolicy()


class MerchantCategoryRule(Entity):
    user: User = Field(repr=False)
    merchant_key: str
    original_description: str | None = None
    category: Category
    times_confirmed: int = 0
    times_overridden: int = 0
    times_applied: int = 0
    auto_apply: bool = False
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    _policy: AutoApplyPolicy = PrivateAttr(default=DEFAULT_POLICY)

    @classmethod
    def create(
        cls,
        user: User,
        merchant_key: str,
        original_description: str | None,
        category: Category,
        policy: AutoApplyPolicy | None = None,
    ) -> MerchantCategoryRule:
        """Create a rule; creation itself counts as the first confirmation."""
        require(user, "User must not be null.")
        require_text(merchant_key, "Merchant key must not be blank.")
        require(category, "Category must not be null.")

        rule = cls(
            user=user,
            merchant_key=merchant_key.strip(),
            original_description=original_description,
            category=category,
            times_confirmed=1,
        )
        if policy is not None:
            rule._policy = policy
        rule._rederive_auto_apply()
        return rule

    @property
    def policy(self) -> AutoApplyPolicy:
        return self._policy

    def confidence_score(self) -> float:
        return self._policy.confidence(self.times_confirmed, self.times_overridden)

    def record_confirmation(self) -> None:
        self.times_confirmed += 1
        self._rederive_auto_apply()
        self.updated_at = datetime.now()

    def record_override(self, new_category: Category) -> None:
        require(new_category, "New category must not be null.")
        self.category = new_category
        self.times_confirmed = 1
        self.times_overridden += 1
        self._rederive_auto_apply()
        self.updated_at = datetime.now()

    def record_application(self) -> None:
        self.times_applied += 1
        self.updated_at = datetime.now()

    def should_auto_apply(self) -> bool:
        expected = self._policy.allows(self.times_confirmed, self.times_overridden)
        if expected != self.auto_apply:
            logger.debug(
                "Auto-apply flag of rule %s out of sync with counters; re-deriving",
                self.merchant_key,
            )
            self.auto_apply = expected
        return self.auto_apply

    def _rederive_auto_apply(self) -> None:
        self.auto_apply = self._policy.allows(self.times_confirmed, self.times_overridden)


__all__ = ["AutoApplyPolicy", "DEFAULT_POLICY", "MerchantCategoryRule"]
