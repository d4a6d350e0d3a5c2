from .common import PaginationInfo, PaginationParams
from .opportunity import (
    RecurrencePatternIn,
    OpportunityCreate,
    OpportunityUpdate,
    AttendanceUpdate,
)
from .catalog import (
    SkillCreate,
    SkillResponse,
    InterestCreate,
    InterestResponse,
    VolunteerSkillAssign,
    VolunteerInterestAssign,
)
from .hours import HoursCreate, HoursUpdate, HoursResponse

__all__ = [
    "PaginationInfo",
    "PaginationParams",
    "RecurrencePatternIn",
    "OpportunityCreate",
    "OpportunityUpdate",
    "AttendanceUpdate",
    "SkillCreate",
    "SkillResponse",
    "InterestCreate",
    "InterestResponse",
    "VolunteerSkillAssign",
    "VolunteerInterestAssign",
    "HoursCreate",
    "HoursUpdate",
    "HoursResponse",
]
