from enum import Enum


class UserRole(str, Enum):
    VOLUNTEER = "volunteer"
    STAFF = "staff"
    ADMIN = "admin"


class OpportunityStatus(str, Enum):
    OPEN = "open"
    FULL = "full"
    COMPLETED = "completed"
    CANCELED = "canceled"


class RSVPStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    DECLINED = "declined"
    ATTENDED = "attended"
    NO_SHOW = "no_show"


class RecurrenceFrequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class ProficiencyLevel(str, Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
