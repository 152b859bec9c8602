"""Split a required periodic amount across goal members.

Two separate tolerances live here and must not be mixed up:

* ``ALLOCATION_EPSILON`` guards the allocation arithmetic itself (is there
  anything left to distribute, do fixed commitments overflow the total).
* ``SPLIT_WARNING_TOLERANCE`` is in percentage points and only decides when
  stored shares are far enough from 100% to tell the user about it.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
import logging
import math
from typing import Iterable, Sequence

from .schema import Goal, Member

logger = logging.getLogger(__name__)

ALLOCATION_EPSILON = 1e-6
SPLIT_WARNING_TOLERANCE = 0.5


@dataclass(frozen=True, slots=True)
class MemberAllocation:
    member: Member
    per_period: float


@dataclass(frozen=True, slots=True)
class AllocationResult:
    allocations: tuple[MemberAllocation, ...]
    total: float
    fixed_total: float
    remaining: float
    percent_sum: float
    overflow: bool = False
    overflow_amount: float = 0.0
    missing_percentages: bool = False
    unassigned_remainder: bool = False

    @property
    def has_fixed(self) -> bool:
        return any(item.member.is_fixed for item in self.allocations)

    @property
    def has_percent(self) -> bool:
        return any(not item.member.is_fixed for item in self.allocations)

    @property
    def percent_sum_off_target(self) -> bool:
        """Stored percent shares are noticeably away from 100%."""
        if not self.has_percent or self.percent_sum <= ALLOCATION_EPSILON:
            return False
        return abs(self.percent_sum - 100.0) > SPLIT_WARNING_TOLERANCE

    def per_period_for(self, user_id: str) -> float | None:
        for item in self.allocations:
            if item.member.user_id == user_id:
                return item.per_period
        return None


def _has_remainder(remaining: float) -> bool:
    return remaining > ALLOCATION_EPSILON if math.isfinite(remaining) else True


def compute_member_allocations(total: float, members: Iterable[Member]) -> AllocationResult:
    """Compute each member's per-period contribution toward ``total``.

    Fixed members pay their amount; percent members share whatever is left in
    proportion to their stored percentages. Never raises: overflow and
    degenerate splits are reported through flags on the result.
    """
    members = list(members)
    percent_indexes = [idx for idx, member in enumerate(members) if not member.is_fixed]

    fixed_total = sum(member.fixed_amount or 0.0 for member in members if member.is_fixed)
    remaining = total - fixed_total

    overflow = False
    overflow_amount = 0.0
    if math.isfinite(total) and remaining < -ALLOCATION_EPSILON:
        overflow = True
        overflow_amount = fixed_total - total
        remaining = 0.0
        logger.debug("Fixed contributions %.2f exceed required %.2f", fixed_total, total)

    percent_sum = sum(members[idx].split_percent or 0.0 for idx in percent_indexes)

    missing_percentages = False
    unassigned_remainder = False
    shares: dict[int, float] = {}
    if percent_indexes:
        if percent_sum > ALLOCATION_EPSILON:
            for idx in percent_indexes:
                shares[idx] = remaining * ((members[idx].split_percent or 0.0) / percent_sum)
        elif _has_remainder(remaining):
            missing_percentages = True
    elif _has_remainder(remaining):
        unassigned_remainder = True

    allocations = tuple(
        MemberAllocation(
            member=member,
            per_period=member.fixed_amount if member.is_fixed else shares.get(idx, 0.0),
        )
        for idx, member in enumerate(members)
    )
    return AllocationResult(
        allocations=allocations,
        total=total,
        fixed_total=fixed_total,
        remaining=remaining,
        percent_sum=percent_sum,
        overflow=overflow,
        overflow_amount=overflow_amount,
        missing_percentages=missing_percentages,
        unassigned_remainder=unassigned_remainder,
    )


def rebalance_percentages(members: Sequence[Member]) -> list[Member]:
    """Return a copy of ``members`` whose percent shares sum to 100.

    Fixed-amount members are left alone. Collaborators keep their shares
    unless they exceed 100 in total, in which case they are scaled down
    proportionally; the owner absorbs whatever is left. Without a
    percent-based owner the list is returned unchanged.
    """
    rebalanced = list(members)
    percent_indexes = [idx for idx, member in enumerate(rebalanced) if not member.is_fixed]
    owner_idx = next((idx for idx in percent_indexes if rebalanced[idx].is_owner), None)
    if owner_idx is None:
        return rebalanced

    collaborator_indexes = [idx for idx in percent_indexes if not rebalanced[idx].is_owner]
    if not collaborator_indexes:
        rebalanced[owner_idx] = rebalanced[owner_idx].with_percent(100.0)
        return rebalanced

    collaborator_total = sum(rebalanced[idx].split_percent or 0.0 for idx in collaborator_indexes)
    if collaborator_total > 100.0:
        scale = 100.0 / collaborator_total
        logger.debug("Scaling collaborator shares by %.6f (total %.4f%%)", scale, collaborator_total)
        for idx in collaborator_indexes:
            rebalanced[idx] = rebalanced[idx].with_percent((rebalanced[idx].split_percent or 0.0) * scale)

    adjusted_total = sum(rebalanced[idx].split_percent or 0.0 for idx in collaborator_indexes)
    rebalanced[owner_idx] = rebalanced[owner_idx].with_percent(max(0.0, 100.0 - adjusted_total))
    return rebalanced


def rebalance_goal(goal: Goal) -> Goal:
    """Return ``goal`` with its member list rebalanced."""
    return replace(goal, members=tuple(rebalance_percentages(goal.members)))
