from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship
from ..database import Base
from .enums import RSVPStatus


class RSVP(Base):
    __tablename__ = "volunteer_rsvps"

    # One row per volunteer per opportunity
    volunteer_id = Column(Integer, ForeignKey("users.id"), primary_key=True)
    opportunity_id = Column(Integer, ForeignKey("opportunities.id"), primary_key=True)

    status = Column(String, nullable=False, default=RSVPStatus.PENDING.value)
    rsvp_at = Column(DateTime, nullable=False)
    notes = Column(Text)

    # Relationships
    opportunity = relationship("Opportunity", viewonly=True)
    volunteer = relationship("User", viewonly=True)
