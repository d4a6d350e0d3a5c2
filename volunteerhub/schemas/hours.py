from pydantic import BaseModel, Field, validator
from typing import Optional
from datetime import datetime
from ..utils.constants import AppConstants
from ..utils.date_helpers import DateHelpers


class HoursCreate(BaseModel):
    opportunity_id: int
    date: datetime
    hours: float = Field(..., gt=0, le=AppConstants.MAX_HOURS_PER_ENTRY)
    notes: Optional[str] = Field(None, max_length=AppConstants.MAX_NOTES_LENGTH)

    @validator("date")
    def normalize_timezone(cls, v):
        return DateHelpers.to_naive_utc(v)


class HoursUpdate(BaseModel):
    verify: bool = False
    hours: Optional[float] = Field(None, gt=0, le=AppConstants.MAX_HOURS_PER_ENTRY)
    notes: Optional[str] = Field(None, max_length=AppConstants.MAX_NOTES_LENGTH)


class HoursResponse(BaseModel):
    id: int
    volunteer_id: int
    opportunity_id: int
    date: datetime
    hours: float
    notes: Optional[str] = None
    verified_by: Optional[int] = None
    verified_at: Optional[datetime] = None

    class Config:
        from_attributes = True
