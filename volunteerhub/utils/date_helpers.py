from datetime import datetime, timedelta, timezone
from typing import Optional
from dateutil.relativedelta import relativedelta

from ..models.enums import RecurrenceFrequency


class DateHelpers:
    @staticmethod
    def shift(
        start_date: datetime, frequency: RecurrenceFrequency, steps: int
    ) -> datetime:
        """Move start_date forward by `steps` units of frequency.

        Monthly shifts are taken from start_date itself, so a day-of-month
        missing in the target month clamps to that month's last day without
        drifting on later months (Jan 31 -> Feb 28 -> Mar 31).
        """

        if frequency == RecurrenceFrequency.DAILY:
            return start_date + timedelta(days=steps)
        elif frequency == RecurrenceFrequency.WEEKLY:
            return start_date + timedelta(weeks=steps)
        elif frequency == RecurrenceFrequency.MONTHLY:
            return start_date + relativedelta(months=steps)
        else:
            raise ValueError(f"Unsupported recurrence frequency: {frequency}")

    @staticmethod
    def to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
        """Normalize an aware datetime to naive UTC, as stored in the database"""
        if value is None or value.tzinfo is None:
            return value
        return value.astimezone(timezone.utc).replace(tzinfo=None)

    @staticmethod
    def is_in_past(target_date: datetime) -> bool:
        return target_date <= datetime.utcnow()
