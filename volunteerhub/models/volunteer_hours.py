from sqlalchemy import Column, Integer, DateTime, ForeignKey, Text, Float
from sqlalchemy.orm import relationship
from ..database import Base


class VolunteerHours(Base):
    __tablename__ = "volunteer_hours"

    id = Column(Integer, primary_key=True, index=True)
    volunteer_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    opportunity_id = Column(Integer, ForeignKey("opportunities.id"), nullable=False)
    date = Column(DateTime, nullable=False)
    hours = Column(Float, nullable=False)
    notes = Column(Text)

    # Verification
    verified_by = Column(Integer, ForeignKey("users.id"))
    verified_at = Column(DateTime)

    # Relationships
    opportunity = relationship("Opportunity", viewonly=True)
    volunteer = relationship("User", foreign_keys=[volunteer_id], viewonly=True)
