"""
Merchant categorization service - learns merchant -> category rules per user.

Every time a user categorizes an item by hand the rule for that item's
merchant is created, confirmed or overridden. When items are imported the
rules are applied: a rule the policy trusts sets the category itself
(AUTO_RULE); any other rule only offers its category as a suggestion.

NO IMPORTS FROM:
- rich (console, table, prompt)
- typer

All dependencies are injected. All functions return data structures.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from fintrack.errors import require
from fintrack.model.category import Category
from fintrack.model.events import MerchantRuleApplied, MerchantRuleLearned, ref
from fintrack.model.invoice_item import CategorizationSource, InvoiceItem
from fintrack.model.merchant_rule import AutoApplyPolicy, MerchantCategoryRule
from fintrack.model.participant import User
from fintrack.services.merchant_normalization_service import MerchantNormalizationService
from fintrack.storage.event_store import EventStore
from fintrack.storage.repositories import MerchantRuleRepository

logger = logging.getLogger(__name__)


@dataclass
class CategorizationResult:
    """Outcome of looking up a rule for one item."""

    applied: bool
    rule: MerchantCategoryRule | None = None
    source: CategorizationSource | None = None

    @classmethod
    def not_applied(cls) -> CategorizationResult:
        return cls(applied=False)

    @classmethod
    def auto_applied(cls, rule: MerchantCategoryRule) -> CategorizationResult:
        return cls(applied=True, rule=rule, source=CategorizationSource.AUTO_RULE)

    @classmethod
    def suggested(cls, rule: MerchantCategoryRule) -> CategorizationResult:
        return cls(applied=True, rule=rule, source=CategorizationSource.SUGGESTED)

    @property
    def suggested_category(self) -> Category | None:
        return self.rule.category if self.rule is not None else None


def _user_ref(user: User) -> str:
    return ref(user.id) or user.email


class MerchantCategorizationService:
    """
    Applies and learns merchant category rules.

    Responsibilities:
    - Normalize item descriptions to merchant keys
    - Auto-apply or suggest a category from the user's rule
    - Create, confirm or override rules from manual categorizations

    Does NOT:
    - Decide which categories exist (see the category config)
    - Save invoice items (the caller owns the invoice aggregate)
    """

    def __init__(
        self,
        rule_repository: MerchantRuleRepository,
        normalization_service: MerchantNormalizationService | None = None,
        policy: AutoApplyPolicy | None = None,
        event_store: EventStore | None = None,
    ):
        """
        Args:
            rule_repository: Where rules are looked up and saved
            normalization_service: Description -> merchant key (default instance if omitted)
            policy: Auto-apply policy given to newly created rules
            event_store: Optional journal for MerchantRuleLearned/Applied events
        """
        self._rules = rule_repository
        self._normalizer = normalization_service or MerchantNormalizationService()
        self._policy = policy
        self._event_store = event_store

    def normalize_merchant_key(self, description: str | None) -> str | None:
        return self._normalizer.normalize(description)

    def find_rule(self, user: User, merchant_key: str) -> MerchantCategoryRule | None:
        return self._rules.find_by_user_and_key(user, merchant_key)

    def user_rules(self, user: User) -> list[MerchantCategoryRule]:
        return self._rules.find_by_user(user)

    def apply_rule(self, item: InvoiceItem, user: User) -> CategorizationResult:
        """Look up the rule for ``item``'s merchant and auto-apply or suggest it.

        The item always receives its merchant key when one can be derived.
        """
        require(item, "Item must not be null.")
        require(user, "User must not be null.")

        merchant_key = self._normalizer.normalize(item.description)
        if merchant_key is None:
            logger.debug("Could not normalize description: %s", item.description)
            return CategorizationResult.not_applied()

        item.assign_merchant_key(merchant_key)

        rule = self._rules.find_by_user_and_key(user, merchant_key)
        if rule is None:
            logger.debug("No rule found for merchant key: %s", merchant_key)
            return CategorizationResult.not_applied()

        if not rule.should_auto_apply():
            logger.debug(
                "Suggesting category '%s' for item '%s' (rule not yet auto-apply)",
                rule.category.name,
                item.description,
            )
            return CategorizationResult.suggested(rule)

        item.update_category(rule.category, CategorizationSource.AUTO_RULE)
        rule.record_application()
        self._rules.save(rule)
        logger.info(
            "Auto-applied category '%s' to item '%s' (rule: %s)",
            rule.category.name,
            item.description,
            rule.id,
        )

        if self._event_store:
            self._event_store.append_event(
                MerchantRuleApplied(
                    user_id=_user_ref(user),
                    merchant_key=merchant_key,
                    category=rule.category.name,
                    item_description=item.description,
                    times_applied=rule.times_applied,
                )
            )
        return CategorizationResult.auto_applied(rule)

    def record_manual_categorization(
        self,
        item: InvoiceItem,
        category: Category,
        user: User,
    ) -> MerchantCategoryRule | None:
        """Learn from the user choosing ``category`` for ``item``.

        Returns the created or updated rule, or None when the description has
        no merchant key. The item's own category is not changed here.
        """
        require(item, "Item must not be null.")
        require(category, "Category must not be null.")
        require(user, "User must not be null.")

        merchant_key = item.merchant_key or self._normalizer.normalize(item.description)
        if merchant_key is None:
            logger.debug("Could not normalize description for rule creation: %s", item.description)
            return None

        item.assign_merchant_key(merchant_key)

        rule = self._rules.find_by_user_and_key(user, merchant_key)
        previous = None
        if rule is None:
            rule = MerchantCategoryRule.create(
                user, merchant_key, item.description, category, policy=self._policy
            )
            action = "created"
            logger.info(
                "Created new categorization rule: %s -> %s (user: %s)",
                merchant_key,
                category.name,
                user.email,
            )
        elif rule.category == category:
            rule.record_confirmation()
            action = "confirmed"
            logger.info(
                "Confirmed categorization rule: %s -> %s (confirmations: %d)",
                merchant_key,
                category.name,
                rule.times_confirmed,
            )
        else:
            previous = rule.category
            rule.record_override(category)
            action = "overridden"
            logger.info(
                "Overrode categorization rule: %s from '%s' to '%s' (overrides: %d)",
                merchant_key,
                previous.name,
                category.name,
                rule.times_overridden,
            )

        self._rules.save(rule)

        if self._event_store:
            self._event_store.append_event(
                MerchantRuleLearned(
                    user_id=_user_ref(user),
                    merchant_key=merchant_key,
                    action=action,
                    category=category.name,
                    previous_category=previous.name if previous is not None else None,
                    times_confirmed=rule.times_confirmed,
                    times_overridden=rule.times_overridden,
                    auto_apply=rule.auto_apply,
                    confidence=rule.confidence_score(),
                )
            )
        return rule

    def apply_rules_to_items(self, items: list[InvoiceItem], user: User) -> int:
        """Apply rules to the uncategorized ``items``; returns how many were auto-categorized."""
        categorized = 0
        for item in items:
            if item.category is not None:
                continue
            result = self.apply_rule(item, user)
            if result.applied and result.source is CategorizationSource.AUTO_RULE:
                categorized += 1

        logger.info(
            "Auto-categorized %d of %d items for user %s", categorized, len(items), user.email
        )
        return categorized


__all__ = ["CategorizationResult", "MerchantCategorizationService"]
