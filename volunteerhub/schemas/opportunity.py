from pydantic import BaseModel, validator, Field
from typing import List, Optional
from datetime import date, datetime
from ..models.enums import OpportunityStatus, RecurrenceFrequency, RSVPStatus
from ..services.recurrence_service import RecurrenceRule
from ..utils.constants import AppConstants
from ..utils.date_helpers import DateHelpers


class RecurrencePatternIn(BaseModel):
    frequency: RecurrenceFrequency
    interval: int = 1
    end_date: Optional[date] = None
    count: Optional[int] = None

    def to_rule(self) -> RecurrenceRule:
        # Terminator/interval checks happen in the expander
        return RecurrenceRule(
            frequency=self.frequency,
            interval=self.interval,
            end_date=self.end_date,
            count=self.count,
        )


class OpportunityBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=AppConstants.MAX_TITLE_LENGTH)
    description: str = Field("", max_length=AppConstants.MAX_DESCRIPTION_LENGTH)
    location: str = Field("", max_length=AppConstants.MAX_LOCATION_LENGTH)
    max_volunteers: Optional[int] = Field(None, ge=0)


class OpportunityCreate(OpportunityBase):
    start_date: datetime
    end_date: datetime
    status: OpportunityStatus = OpportunityStatus.OPEN
    is_recurring: bool = False
    recurrence_pattern: Optional[RecurrencePatternIn] = None
    skill_ids: List[int] = Field(default_factory=list)
    interest_ids: List[int] = Field(default_factory=list)

    @validator("start_date", "end_date")
    def normalize_timezone(cls, v):
        return DateHelpers.to_naive_utc(v)


class OpportunityUpdate(BaseModel):
    title: Optional[str] = Field(
        None, min_length=1, max_length=AppConstants.MAX_TITLE_LENGTH
    )
    description: Optional[str] = Field(
        None, max_length=AppConstants.MAX_DESCRIPTION_LENGTH
    )
    location: Optional[str] = Field(None, max_length=AppConstants.MAX_LOCATION_LENGTH)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    max_volunteers: Optional[int] = Field(None, ge=0)
    status: Optional[OpportunityStatus] = None

    @validator("start_date", "end_date")
    def normalize_timezone(cls, v):
        return DateHelpers.to_naive_utc(v)

    @validator("title", "description", "location", "start_date", "end_date", "status")
    def reject_null(cls, v):
        # Omit a field to keep it; only max_volunteers can be cleared
        if v is None:
            raise ValueError("Field cannot be null")
        return v


class AttendanceUpdate(BaseModel):
    status: RSVPStatus
    notes: Optional[str] = Field(None, max_length=AppConstants.MAX_NOTES_LENGTH)
