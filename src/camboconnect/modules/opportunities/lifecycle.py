"""
Opportunity Lifecycle Rules

The lifecycle job brings every opportunity's ``status``, ``is_popular`` and
``is_new`` in line with the current time and its visit counter. It is five
bulk conditional updates, always run in this order and never short-circuited:

1. Activate:           OPENING_SOON and start_date <= now         -> ACTIVE
2. Mark closing soon:  ACTIVE and now < deadline <= now + 3 days  -> CLOSING_SOON
3. Close:              ACTIVE/CLOSING_SOON and deadline <= now    -> CLOSED
4. Mark popular:       visit_count >= 300 and not is_popular      -> is_popular = True
5. Clear new flag:     created_at < now - 7 days and is_new       -> is_new = False

Every rule only moves a record forward (status along
OPENING_SOON -> ACTIVE -> CLOSING_SOON -> CLOSED, flags towards their terminal
value) and no rule's output matches its own predicate, so a second run with the
same ``now`` changes nothing. Step 3 sees the output of step 1, so a record
activated in a run whose deadline has already passed is closed in that same run.

Each rule carries its predicate twice: as SQL criteria for the database store
and as a Python check for in-memory records. Both must stay equivalent.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Protocol

from sqlalchemy import ColumnElement

from .models import Opportunity, OpportunityStatus

CLOSING_SOON_WINDOW = timedelta(days=3)
NEW_OPPORTUNITY_MAX_AGE = timedelta(days=7)
POPULAR_VISIT_THRESHOLD = 300


@dataclass(frozen=True)
class LifecycleRule:
    """
    One "set ``values`` where predicate(now)" update.

    Attributes:
        key: Summary field that receives the affected count
        values: Field patch applied to matching records
        conditions: Builds the SQL criteria for a given ``now``
        matches: Evaluates the same predicate against one in-memory record
    """

    key: str
    values: dict[str, Any]
    conditions: Callable[[datetime], list[ColumnElement[bool]]]
    matches: Callable[[Any, datetime], bool]


ACTIVATE = LifecycleRule(
    key="active",
    values={"status": OpportunityStatus.ACTIVE},
    conditions=lambda now: [
        Opportunity.status == OpportunityStatus.OPENING_SOON,
        Opportunity.start_date <= now,
    ],
    matches=lambda opp, now: (
        opp.status == OpportunityStatus.OPENING_SOON
        and opp.start_date is not None
        and opp.start_date <= now
    ),
)

MARK_CLOSING_SOON = LifecycleRule(
    key="closing_soon",
    values={"status": OpportunityStatus.CLOSING_SOON},
    conditions=lambda now: [
        Opportunity.status == OpportunityStatus.ACTIVE,
        Opportunity.deadline > now,
        Opportunity.deadline <= now + CLOSING_SOON_WINDOW,
    ],
    matches=lambda opp, now: (
        opp.status == OpportunityStatus.ACTIVE
        and now < opp.deadline <= now + CLOSING_SOON_WINDOW
    ),
)

CLOSE = LifecycleRule(
    key="closed",
    values={"status": OpportunityStatus.CLOSED},
    conditions=lambda now: [
        Opportunity.status.in_([OpportunityStatus.ACTIVE, OpportunityStatus.CLOSING_SOON]),
        Opportunity.deadline <= now,
    ],
    matches=lambda opp, now: (
        opp.status in (OpportunityStatus.ACTIVE, OpportunityStatus.CLOSING_SOON)
        and opp.deadline <= now
    ),
)

MARK_POPULAR = LifecycleRule(
    key="popular",
    values={"is_popular": True},
    conditions=lambda now: [
        Opportunity.visit_count >= POPULAR_VISIT_THRESHOLD,
        Opportunity.is_popular.is_(False),
    ],
    matches=lambda opp, now: opp.visit_count >= POPULAR_VISIT_THRESHOLD and not opp.is_popular,
)

CLEAR_NEW = LifecycleRule(
    key="not_new",
    values={"is_new": False},
    conditions=lambda now: [
        Opportunity.created_at < now - NEW_OPPORTUNITY_MAX_AGE,
        Opportunity.is_new.is_(True),
    ],
    matches=lambda opp, now: opp.is_new and opp.created_at < now - NEW_OPPORTUNITY_MAX_AGE,
)

# Order matters: CLOSE must observe the effect of ACTIVATE.
LIFECYCLE_RULES: tuple[LifecycleRule, ...] = (
    ACTIVATE,
    MARK_CLOSING_SOON,
    CLOSE,
    MARK_POPULAR,
    CLEAR_NEW,
)


@dataclass
class LifecycleSummary:
    """Records affected per step in one lifecycle run."""

    timestamp: datetime
    active: int = 0
    closing_soon: int = 0
    closed: int = 0
    popular: int = 0
    not_new: int = 0

    @property
    def total(self) -> int:
        return self.active + self.closing_soon + self.closed + self.popular + self.not_new

    def counts(self) -> dict[str, int]:
        return {rule.key: getattr(self, rule.key) for rule in LIFECYCLE_RULES}


class OpportunityStore(Protocol):
    """Anything that can apply a lifecycle rule as one conditional bulk update."""

    async def update_where(self, rule: LifecycleRule, now: datetime) -> int:
        """Apply ``rule.values`` to every record matching the rule at ``now``; return the count."""
        ...


class InMemoryOpportunityStore:
    """
    Applies lifecycle rules to a list of records held in memory.

    Records can be ORM instances or any object exposing the opportunity fields.
    Matching is evaluated for all records before any is written, the same way a
    single UPDATE statement behaves.
    """

    def __init__(self, records: Iterable[Any]):
        self.records = list(records)

    async def update_where(self, rule: LifecycleRule, now: datetime) -> int:
        matched = [record for record in self.records if rule.matches(record, now)]
        for record in matched:
            for field, value in rule.values.items():
                setattr(record, field, value)
        return len(matched)
