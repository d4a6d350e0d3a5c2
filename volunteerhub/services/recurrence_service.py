from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from ..models.enums import OpportunityStatus, RecurrenceFrequency
from ..utils.constants import AppConstants
from ..utils.date_helpers import DateHelpers


class RecurrenceError(Exception):
    """Base exception for recurrence expansion errors"""

    pass


class InvalidRuleError(RecurrenceError):
    """Recurrence rule is malformed"""

    pass


class InvalidWindowError(RecurrenceError):
    """Start/end window produces no valid occurrence"""

    pass


class RecurrenceTooLargeError(RecurrenceError):
    """Rule would generate more occurrences than allowed"""

    pass


@dataclass(frozen=True)
class RecurrenceRule:
    """Every `interval` days/weeks/months, stopped by end_date or count"""

    frequency: RecurrenceFrequency
    interval: int = 1
    end_date: Optional[date] = None
    count: Optional[int] = None

    def __post_init__(self):
        # The last occurrence is matched by calendar day
        if isinstance(self.end_date, datetime):
            object.__setattr__(self, "end_date", self.end_date.date())

    def validate(self) -> None:
        try:
            RecurrenceFrequency(self.frequency)
        except ValueError:
            raise InvalidRuleError(f"Unsupported frequency: {self.frequency}")

        if not isinstance(self.interval, int) or self.interval < 1:
            raise InvalidRuleError("Interval must be a positive integer")

        if (self.end_date is None) == (self.count is None):
            raise InvalidRuleError("Exactly one of end_date or count must be set")

        if self.count is not None and self.count < 1:
            raise InvalidRuleError("Count must be at least 1")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "frequency": RecurrenceFrequency(self.frequency).value,
            "interval": self.interval,
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "count": self.count,
        }


@dataclass
class OpportunityDraft:
    """Unsaved opportunity instance"""

    title: str
    start_date: datetime
    end_date: datetime
    created_by: int
    description: str = ""
    location: str = ""
    max_volunteers: Optional[int] = None
    status: str = OpportunityStatus.OPEN.value
    is_recurring: bool = False
    recurrence_pattern: Optional[Dict[str, Any]] = field(default=None)

    @property
    def duration(self):
        return self.end_date - self.start_date


def expand(base: OpportunityDraft, rule: RecurrenceRule) -> List[OpportunityDraft]:
    """Expand `base` (the first occurrence) into every occurrence of `rule`.

    The first element is `base`'s window unchanged. Each later occurrence is
    offset from the first one, never from its predecessor, and keeps the
    first occurrence's duration. An occurrence starting on `rule.end_date`
    is included.
    """

    rule.validate()

    if base.end_date <= base.start_date:
        raise InvalidWindowError("End date must be after start date")

    if rule.end_date is not None and rule.end_date < base.start_date.date():
        raise InvalidWindowError(
            "Recurrence end date is before the first occurrence"
        )

    limit = AppConstants.MAX_RECURRENCE_OCCURRENCES
    if rule.count is not None and rule.count > limit:
        raise RecurrenceTooLargeError(
            f"Recurrence would create {rule.count} occurrences (max {limit})"
        )

    frequency = RecurrenceFrequency(rule.frequency)
    duration = base.duration
    pattern = rule.to_dict()

    occurrences: List[OpportunityDraft] = []
    step = 0
    while True:
        if rule.count is not None and len(occurrences) >= rule.count:
            break

        start = DateHelpers.shift(base.start_date, frequency, step * rule.interval)
        if rule.end_date is not None and start.date() > rule.end_date:
            break

        if len(occurrences) >= limit:
            raise RecurrenceTooLargeError(
                f"Recurrence would create more than {limit} occurrences"
            )

        occurrences.append(
            replace(
                base,
                start_date=start,
                end_date=start + duration,
                is_recurring=True,
                recurrence_pattern=pattern,
            )
        )
        step += 1

    return occurrences
