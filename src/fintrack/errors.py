"""
Error taxonomy for the FinTrack domain engine.

Every failure is raised synchronously before any state is mutated, so a
failed operation leaves the aggregate exactly as it was. Nothing here is
retried internally; callers decide whether to re-prompt.

All errors derive from ValueError so code that already guards domain calls
with ``except ValueError`` keeps working.
"""

from __future__ import annotations


class FinTrackError(ValueError):
    """Base class for all domain failures."""


class PreconditionViolation(FinTrackError):
    """A required argument was missing (None)."""


class DomainRuleViolation(FinTrackError):
    """A value was present but semantically invalid."""


class PercentageOutOfRange(DomainRuleViolation):
    """A share percentage fell outside [0, 1]."""


class CrossAggregateConflict(FinTrackError):
    """A change would break an invariant spanning two aggregates.

    Examples: a share distribution whose total exceeds the item amount, or a
    payment that would push an invoice above its total.
    """


class NotFoundError(FinTrackError):
    """A referenced entity does not exist in the repository."""


class AccessDenied(FinTrackError):
    """The acting user is neither owner of nor participant in the entity."""


def require(value, message: str):
    """Return ``value`` or raise PreconditionViolation when it is None."""
    if value is None:
        raise PreconditionViolation(message)
    return value


def require_text(value: str | None, message: str) -> str:
    """Return ``value`` when it is a non-blank string.

    None is a precondition violation; a blank string is a rule violation.
    """
    if value is None:
        raise PreconditionViolation(message)
    if not value.strip():
        raise DomainRuleViolation(message)
    return value


__all__ = [
    "AccessDenied",
    "CrossAggregateConflict",
    "DomainRuleViolation",
    "FinTrackError",
    "NotFoundError",
    "PercentageOutOfRange",
    "PreconditionViolation",
    "require",
    "require_text",
]
