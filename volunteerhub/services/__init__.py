from .catalog_service import CatalogService
from .hours_service import HoursService
from .opportunity_service import OpportunityService
from .rsvp_service import RSVPService

__all__ = [
    "CatalogService",
    "HoursService",
    "OpportunityService",
    "RSVPService",
]
