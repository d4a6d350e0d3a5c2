"""Capacity accounting for opportunities.

Remaining spots are always derived from a live count of RSVPs that hold a
slot. Nothing here caches a count; callers pass one they just queried.
"""

from typing import Optional

from ..models.enums import OpportunityStatus, RSVPStatus

# RSVP statuses that hold a slot on the opportunity
OCCUPYING_STATUSES = frozenset(
    {
        RSVPStatus.PENDING.value,
        RSVPStatus.CONFIRMED.value,
        RSVPStatus.ATTENDED.value,
    }
)


def occupies_slot(status: Optional[str]) -> bool:
    return status in OCCUPYING_STATUSES


def spots_remaining(opportunity, confirmed_count: int) -> Optional[int]:
    """Spots left, or None when the opportunity has no capacity limit"""
    if opportunity.max_volunteers is None:
        return None
    return max(0, opportunity.max_volunteers - confirmed_count)


def is_full(opportunity, confirmed_count: int) -> bool:
    if opportunity.max_volunteers is None:
        return False
    return spots_remaining(opportunity, confirmed_count) == 0


def derived_status(opportunity, confirmed_count: int) -> str:
    """Status after a capacity change; only open and full move between each other"""
    if opportunity.status not in (
        OpportunityStatus.OPEN.value,
        OpportunityStatus.FULL.value,
    ):
        return opportunity.status
    if is_full(opportunity, confirmed_count):
        return OpportunityStatus.FULL.value
    return OpportunityStatus.OPEN.value
