from .user import User
from .skill import Skill, Interest, VolunteerSkill, VolunteerInterest
from .opportunity import Opportunity, OpportunityRequiredSkill, OpportunityInterest
from .rsvp import RSVP
from .volunteer_hours import VolunteerHours


__all__ = [
    "User",
    "Skill",
    "Interest",
    "VolunteerSkill",
    "VolunteerInterest",
    "Opportunity",
    "OpportunityRequiredSkill",
    "OpportunityInterest",
    "RSVP",
    "VolunteerHours",
]
