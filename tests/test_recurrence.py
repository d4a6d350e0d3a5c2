from datetime import date, datetime, timedelta

import pytest

from volunteerhub.models.enums import RecurrenceFrequency
from volunteerhub.services.recurrence_service import (
    InvalidRuleError,
    InvalidWindowError,
    OpportunityDraft,
    RecurrenceRule,
    RecurrenceTooLargeError,
    expand,
)


def draft(start, hours=2):
    return OpportunityDraft(
        title="Park cleanup",
        start_date=start,
        end_date=start + timedelta(hours=hours),
        created_by=1,
        max_volunteers=10,
    )


def starts(occurrences):
    return [o.start_date for o in occurrences]


class TestExpand:
    def test_count_weekly(self):
        base = draft(datetime(2024, 1, 1, 10, 0))
        rule = RecurrenceRule(RecurrenceFrequency.WEEKLY, count=3)

        result = expand(base, rule)

        assert starts(result) == [
            datetime(2024, 1, 1, 10, 0),
            datetime(2024, 1, 8, 10, 0),
            datetime(2024, 1, 15, 10, 0),
        ]

    def test_end_date_is_inclusive(self):
        base = draft(datetime(2024, 1, 1, 10, 0))
        rule = RecurrenceRule(RecurrenceFrequency.WEEKLY, end_date=date(2024, 1, 22))

        result = expand(base, rule)

        assert len(result) == 4
        assert result[-1].start_date == datetime(2024, 1, 22, 10, 0)

    def test_daily_with_interval(self):
        base = draft(datetime(2024, 3, 1, 9, 0))
        rule = RecurrenceRule(RecurrenceFrequency.DAILY, interval=2, count=3)

        assert starts(expand(base, rule)) == [
            datetime(2024, 3, 1, 9, 0),
            datetime(2024, 3, 3, 9, 0),
            datetime(2024, 3, 5, 9, 0),
        ]

    def test_monthly_clamps_without_drift(self):
        base = draft(datetime(2024, 1, 31, 18, 0))
        rule = RecurrenceRule(RecurrenceFrequency.MONTHLY, count=4)

        assert starts(expand(base, rule)) == [
            datetime(2024, 1, 31, 18, 0),
            datetime(2024, 2, 29, 18, 0),
            datetime(2024, 3, 31, 18, 0),
            datetime(2024, 4, 30, 18, 0),
        ]

    def test_monthly_clamp_non_leap_year(self):
        base = draft(datetime(2023, 1, 31, 18, 0))
        rule = RecurrenceRule(RecurrenceFrequency.MONTHLY, count=2)

        assert starts(expand(base, rule))[1] == datetime(2023, 2, 28, 18, 0)

    def test_every_occurrence_keeps_duration_and_fields(self):
        base = draft(datetime(2024, 1, 1, 10, 0), hours=3)
        rule = RecurrenceRule(RecurrenceFrequency.WEEKLY, count=5)

        result = expand(base, rule)

        for occurrence in result:
            assert occurrence.end_date - occurrence.start_date == timedelta(hours=3)
            assert occurrence.title == "Park cleanup"
            assert occurrence.max_volunteers == 10
            assert occurrence.is_recurring is True
            assert occurrence.recurrence_pattern == {
                "frequency": "weekly",
                "interval": 1,
                "end_date": None,
                "count": 5,
            }

    def test_end_date_given_as_datetime(self):
        base = draft(datetime(2024, 1, 1, 10, 0))
        rule = RecurrenceRule(
            RecurrenceFrequency.WEEKLY, end_date=datetime(2024, 1, 15, 8, 0)
        )

        result = expand(base, rule)

        # Matched by day, so the 10:00 occurrence on the 15th is kept
        assert result[-1].start_date == datetime(2024, 1, 15, 10, 0)
        assert rule.to_dict()["end_date"] == "2024-01-15"

    def test_base_draft_is_not_modified(self):
        base = draft(datetime(2024, 1, 1, 10, 0))
        expand(base, RecurrenceRule(RecurrenceFrequency.DAILY, count=2))

        assert base.is_recurring is False
        assert base.recurrence_pattern is None


class TestRuleValidation:
    @pytest.mark.parametrize(
        "rule",
        [
            RecurrenceRule("yearly", count=2),
            RecurrenceRule(RecurrenceFrequency.DAILY, interval=0, count=2),
            RecurrenceRule(RecurrenceFrequency.DAILY, interval=-1, count=2),
            RecurrenceRule(RecurrenceFrequency.DAILY),
            RecurrenceRule(
                RecurrenceFrequency.DAILY, count=2, end_date=date(2024, 2, 1)
            ),
            RecurrenceRule(RecurrenceFrequency.DAILY, count=0),
        ],
    )
    def test_invalid_rules(self, rule):
        with pytest.raises(InvalidRuleError):
            expand(draft(datetime(2024, 1, 1, 10, 0)), rule)

    def test_end_before_start(self):
        base = draft(datetime(2024, 1, 1, 10, 0), hours=-1)

        with pytest.raises(InvalidWindowError):
            expand(base, RecurrenceRule(RecurrenceFrequency.DAILY, count=2))

    def test_zero_length_window(self):
        base = draft(datetime(2024, 1, 1, 10, 0), hours=0)

        with pytest.raises(InvalidWindowError):
            expand(base, RecurrenceRule(RecurrenceFrequency.DAILY, count=2))

    def test_rule_ends_before_first_occurrence(self):
        base = draft(datetime(2024, 1, 10, 10, 0))
        rule = RecurrenceRule(RecurrenceFrequency.DAILY, end_date=date(2024, 1, 9))

        with pytest.raises(InvalidWindowError):
            expand(base, rule)


class TestLimits:
    def test_count_over_limit(self):
        rule = RecurrenceRule(RecurrenceFrequency.DAILY, count=366)

        with pytest.raises(RecurrenceTooLargeError):
            expand(draft(datetime(2024, 1, 1, 10, 0)), rule)

    def test_count_at_limit(self):
        rule = RecurrenceRule(RecurrenceFrequency.DAILY, count=365)

        assert len(expand(draft(datetime(2024, 1, 1, 10, 0)), rule)) == 365

    def test_end_date_over_limit(self):
        rule = RecurrenceRule(RecurrenceFrequency.DAILY, end_date=date(2026, 1, 1))

        with pytest.raises(RecurrenceTooLargeError):
            expand(draft(datetime(2024, 1, 1, 10, 0)), rule)
