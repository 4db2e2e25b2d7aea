"""
Expense sharing service - splits invoice items among participants.

A distribution is a list of allocations (participant + percentage). It is
validated as a whole before the item is touched:

- at least one allocation, each participant at most once
- every percentage within [0, 1]
- percentages summing to 1.0 within PERCENTAGE_SUM_TOLERANCE
- resulting amounts never exceeding the item amount

Amounts are rounded to cents for every participant except the last, who
absorbs the rounding difference so the shares add up to the item amount
exactly.

Payments of shares are tracked here too. A share may be marked paid or
unpaid by the participant holding it or by the owner of the card it was
charged to.

NO IMPORTS FROM:
- rich (console, table, prompt)
- typer
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Sequence

from fintrack.config import PERCENTAGE_SUM_TOLERANCE
from fintrack.errors import (
    AccessDenied,
    CrossAggregateConflict,
    DomainRuleViolation,
    PreconditionViolation,
    require,
)
from fintrack.model.events import ItemSharePaymentChanged, ItemSharesDistributed, ShareAllocation, ref
from fintrack.model.invoice import BillingMonth
from fintrack.model.invoice_item import InvoiceItem
from fintrack.model.item_share import ItemShare, PaymentMethod, validate_percentage
from fintrack.model.money import ONE, ZERO, floor_money, to_money, to_percentage
from fintrack.model.participant import Participant, TrustedContact, User
from fintrack.storage.event_store import EventStore
from fintrack.storage.repositories import ItemShareRepository

logger = logging.getLogger(__name__)


@dataclass
class Allocation:
    """One participant line of a requested distribution.

    ``amount`` pins the participant's amount instead of deriving it from the
    percentage; the last allocation's amount is always the remainder.
    """

    participant: Participant
    percentage: Decimal
    responsible: bool = False
    amount: Decimal | None = None


def percentages_from_amounts(amounts: Sequence) -> list[Decimal]:
    """Turn raw participant amounts into percentages that sum to exactly 1.

    Every participant but the last gets ``amount / total`` rounded to four
    places; the last gets ``1 - sum(others)``.
    """
    if not amounts:
        raise DomainRuleViolation("At least one amount is required.")
    values = [to_money(a) for a in amounts]
    if any(v < 0 for v in values):
        raise DomainRuleViolation("Participant amounts must not be negative.")
    total = sum(values, ZERO)
    if total == 0:
        raise DomainRuleViolation("Participant amounts must not all be zero.")

    percentages = [to_percentage(v / total) for v in values[:-1]]
    percentages.append(ONE - sum(percentages, Decimal("0")))
    return percentages


def divide_equally(item_amount, participant_count: int) -> list[Decimal]:
    """Split ``item_amount`` into ``participant_count`` cent amounts.

    All but the last get the amount divided and truncated to the cent; the
    last gets what is left, so the amounts always add up to ``item_amount``.
    """
    require(item_amount, "Item amount must not be null.")
    if participant_count < 1:
        raise DomainRuleViolation("At least one participant is required.")
    amount = to_money(item_amount)
    base = floor_money(amount / participant_count)
    return [base] * (participant_count - 1) + [amount - base * (participant_count - 1)]


def participant_ref(participant: Participant) -> str:
    """``user:<id>`` or ``contact:<id>``, as written to the journal."""
    kind = "contact" if isinstance(participant, TrustedContact) else "user"
    return f"{kind}:{ref(participant.id) or participant.email}"


class ExpenseSharingService:
    """
    Commits share distributions and tracks share payments.

    Responsibilities:
    - Validate a distribution as a whole, then replace an item's shares
    - Derive distributions from amounts or an equal split
    - Mark shares paid/unpaid on behalf of an acting user
    - Re-derive share amounts after an item amount changed
    """

    def __init__(
        self,
        share_repository: ItemShareRepository,
        event_store: EventStore | None = None,
    ):
        self._shares = share_repository
        self._event_store = event_store

    # Distributions

    def validate_distribution(self, allocations: Sequence[Allocation]) -> list[Decimal]:
        """Validate the shape of a distribution; returns the checked percentages."""
        if not allocations:
            raise DomainRuleViolation("Shares cannot be null or empty.")

        percentages = []
        seen = []
        for allocation in allocations:
            require(allocation.participant, "Share participant must not be null.")
            if not isinstance(allocation.participant, (User, TrustedContact)):
                raise PreconditionViolation(f"Unsupported participant: {allocation.participant!r}")
            if allocation.participant in seen:
                raise DomainRuleViolation(
                    f"Participant {allocation.participant.name} appears more than once."
                )
            seen.append(allocation.participant)
            percentages.append(validate_percentage(allocation.percentage))

        total = sum(percentages, Decimal("0"))
        if abs(total - ONE) > PERCENTAGE_SUM_TOLERANCE:
            raise DomainRuleViolation(
                f"Sum of share percentages must equal 1.0 (100%). Current sum: {total}"
            )
        return percentages

    def commit_distribution(
        self, item: InvoiceItem, allocations: Sequence[Allocation]
    ) -> list[ItemShare]:
        """Replace ``item``'s shares with ``allocations``.

        Nothing is changed when validation fails.
        """
        require(item, "Item must not be null.")
        percentages = self.validate_distribution(allocations)
        amounts = self._amounts_for(item, allocations, percentages)

        shares = [
            self._build_share(item, allocation, percentage, amount)
            for allocation, percentage, amount in zip(allocations, percentages, amounts)
        ]

        self._detach_all(item)
        created = []
        for share in shares:
            item.add_share(share)
            created.append(self._shares.save(share))

        logger.info(
            "Distributed item '%s' (%s) among %d participants",
            item.description,
            item.amount,
            len(created),
        )
        self._record_distribution(item)
        return created

    def distribute_by_amounts(
        self, item: InvoiceItem, participant_amounts: Sequence[tuple[Participant, object]]
    ) -> list[ItemShare]:
        """Distribute ``item`` from the amount each participant should carry.

        Participants entered with a zero amount are left out. Percentages are
        taken relative to the entered total, so a total below the item amount
        is scaled up to the whole item.
        """
        require(item, "Item must not be null.")
        if not participant_amounts:
            raise DomainRuleViolation("Shares cannot be null or empty.")

        total = sum((to_money(amount) for _, amount in participant_amounts), ZERO)
        participant_amounts = [(p, a) for p, a in participant_amounts if to_money(a) != 0]
        if not participant_amounts:
            raise DomainRuleViolation("At least one participant must carry a non-zero amount.")
        amounts = [to_money(amount) for _, amount in participant_amounts]
        if total > abs(item.amount):
            raise CrossAggregateConflict(
                f"Total shared ({total}) exceeds the item amount ({abs(item.amount)})."
            )

        percentages = percentages_from_amounts(amounts)
        # Amounts covering the whole item are kept as entered.
        pinned = total == abs(item.amount) and item.amount >= 0
        allocations = [
            Allocation(
                participant=participant,
                percentage=percentage,
                amount=amount if pinned else None,
            )
            for (participant, _), percentage, amount in zip(participant_amounts, percentages, amounts)
        ]
        return self.commit_distribution(item, allocations)

    def distribute_equally(
        self, item: InvoiceItem, participants: Sequence[Participant]
    ) -> list[ItemShare]:
        """Split ``item`` evenly; the last participant takes the leftover cents."""
        require(item, "Item must not be null.")
        if not participants:
            raise DomainRuleViolation("At least one participant is required.")

        amounts = divide_equally(item.amount, len(participants))
        if item.amount == 0:
            percentages = divide_equally(ONE, len(participants))
        else:
            percentages = percentages_from_amounts([abs(a) for a in amounts])
        allocations = [
            Allocation(participant=participant, percentage=percentage, amount=amount)
            for participant, percentage, amount in zip(participants, percentages, amounts)
        ]
        return self.commit_distribution(item, allocations)

    def remove_shares(self, item: InvoiceItem) -> None:
        require(item, "Item must not be null.")
        self._detach_all(item)
        self._record_distribution(item)

    def recalculate_shares(self, item: InvoiceItem) -> list[ItemShare]:
        """Re-derive share amounts from their percentages against the current item amount.

        Payment state is kept. The last share absorbs rounding.
        """
        require(item, "Item must not be null.")
        shares = item.shares
        if not shares:
            return []

        allocated = ZERO
        for index, share in enumerate(shares):
            if index < len(shares) - 1:
                amount = to_money(item.amount * share.percentage)
                allocated += amount
            else:
                amount = to_money(item.amount - allocated)
            if share.amount != amount:
                share.amount = amount
                share.updated_at = datetime.now()
            self._shares.save(share)

        self._record_distribution(item)
        return shares

    def recalculate_all_shares(self) -> int:
        """Recalculate every item that has shares; returns the number of items."""
        items = []
        for share in self._shares.find_all():
            item = share.invoice_item
            if item is not None and all(item is not seen for seen in items):
                items.append(item)
        for item in items:
            self.recalculate_shares(item)
        return len(items)

    # Queries

    def shares_for_item(self, item: InvoiceItem) -> list[ItemShare]:
        return self._shares.find_by_item(item)

    def shares_for_participant(
        self, participant: Participant, month: BillingMonth | None = None
    ) -> list[ItemShare]:
        """Shares held by ``participant``, optionally limited to one billing month."""
        shares = self._shares.find_by_participant(participant)
        if month is None:
            return shares
        return [
            share
            for share in shares
            if share.invoice_item is not None
            and share.invoice_item.invoice is not None
            and share.invoice_item.invoice.month == month
        ]

    def unpaid_total_for_participant(self, participant: Participant) -> Decimal:
        return to_money(
            sum((s.amount for s in self.shares_for_participant(participant) if not s.paid), ZERO)
        )

    # Payments

    def mark_share_as_paid(
        self,
        share_id: int,
        payment_method: str | PaymentMethod,
        paid_at: datetime | None,
        acting_user: User,
    ) -> ItemShare:
        share = self._shares.get(share_id)
        self._check_access(share, acting_user)
        share.mark_as_paid(payment_method, paid_at if paid_at is not None else datetime.now())
        self._shares.save(share)
        logger.info("Share %s marked as paid via %s", share.id, share.payment_method)
        self._record_payment(share, acting_user)
        return share

    def mark_share_as_unpaid(self, share_id: int, acting_user: User) -> ItemShare:
        share = self._shares.get(share_id)
        self._check_access(share, acting_user)
        share.mark_as_unpaid()
        self._shares.save(share)
        logger.info("Share %s marked as unpaid", share.id)
        self._record_payment(share, acting_user)
        return share

    def mark_shares_as_paid(
        self,
        share_ids: Sequence[int],
        payment_method: str | PaymentMethod,
        paid_at: datetime | None,
        acting_user: User,
    ) -> list[ItemShare]:
        """Mark several shares paid at once.

        Shares the acting user may not touch, shares already paid and unknown
        ids are skipped, so existing payment details are never overwritten.
        """
        require(acting_user, "Acting user must not be null.")
        if not share_ids:
            return []
        when = paid_at if paid_at is not None else datetime.now()

        updated = []
        for share_id in share_ids:
            share = self._shares.find_by_id(share_id)
            if share is None:
                logger.debug("Skipping unknown share %s", share_id)
                continue
            if not self._may_update(share, acting_user):
                logger.debug("Skipping share %s: not accessible to %s", share_id, acting_user.email)
                continue
            if share.is_paid():
                logger.debug("Skipping share %s: already paid", share_id)
                continue
            share.mark_as_paid(payment_method, when)
            self._shares.save(share)
            self._record_payment(share, acting_user)
            updated.append(share)

        logger.info("Marked %d of %d shares as paid", len(updated), len(share_ids))
        return updated

    # Internals

    def _amounts_for(
        self,
        item: InvoiceItem,
        allocations: Sequence[Allocation],
        percentages: list[Decimal],
    ) -> list[Decimal]:
        amounts = []
        for allocation, percentage in zip(allocations[:-1], percentages[:-1]):
            if allocation.amount is not None:
                amounts.append(to_money(allocation.amount))
            else:
                amounts.append(to_money(item.amount * percentage))
        last = to_money(item.amount - sum(amounts, ZERO))
        amounts.append(last)

        if (item.amount >= 0 and last < 0) or (item.amount < 0 and last > 0):
            raise CrossAggregateConflict(
                f"Share amounts ({sum(amounts[:-1], ZERO)}) exceed the item amount ({item.amount})."
            )
        return amounts

    def _build_share(
        self,
        item: InvoiceItem,
        allocation: Allocation,
        percentage: Decimal,
        amount: Decimal,
    ) -> ItemShare:
        participant = allocation.participant
        if isinstance(participant, TrustedContact):
            return ItemShare.for_contact(participant, item, percentage, amount, allocation.responsible)
        if isinstance(participant, User):
            return ItemShare.for_user(participant, item, percentage, amount, allocation.responsible)
        raise PreconditionViolation(f"Unsupported participant: {participant!r}")

    def _detach_all(self, item: InvoiceItem) -> None:
        for share in item.shares:
            item.remove_share(share)
            self._shares.delete(share)

    def _may_update(self, share: ItemShare, acting_user: User) -> bool:
        if share.is_held_by(acting_user):
            return True
        item = share.invoice_item
        invoice = item.invoice if item is not None else None
        return invoice is not None and invoice.credit_card.owner == acting_user

    def _check_access(self, share: ItemShare, acting_user: User) -> None:
        require(acting_user, "Acting user must not be null.")
        if not self._may_update(share, acting_user):
            raise AccessDenied("Share does not belong to the specified user.")

    def _record_distribution(self, item: InvoiceItem) -> None:
        if not self._event_store:
            return
        self._event_store.append_event(
            ItemSharesDistributed(
                item_id=ref(item.id),
                item_amount=item.amount,
                allocations=[
                    ShareAllocation(
                        participant=participant_ref(share.participant),
                        percentage=share.percentage,
                        amount=share.amount,
                        responsible=share.responsible,
                    )
                    for share in item.shares
                ],
            )
        )

    def _record_payment(self, share: ItemShare, acting_user: User) -> None:
        if not self._event_store:
            return
        self._event_store.append_event(
            ItemSharePaymentChanged(
                share_id=ref(share.id),
                paid=share.paid,
                payment_method=share.payment_method,
                paid_at=share.paid_at,
                acting_user_id=ref(acting_user.id),
            )
        )


__all__ = [
    "Allocation",
    "ExpenseSharingService",
    "divide_equally",
    "participant_ref",
    "percentages_from_amounts",
]
