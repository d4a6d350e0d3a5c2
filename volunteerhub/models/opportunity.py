from sqlalchemy import (
    Column,
    Integer,
    String,
    DateTime,
    ForeignKey,
    Text,
    Boolean,
    JSON,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base
from .enums import OpportunityStatus


class Opportunity(Base):
    __tablename__ = "opportunities"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False, index=True)
    description = Column(Text, nullable=False, default="")
    location = Column(String, nullable=False, default="")
    start_date = Column(DateTime, nullable=False, index=True)
    end_date = Column(DateTime, nullable=False)
    status = Column(String, nullable=False, default=OpportunityStatus.OPEN.value)
    max_volunteers = Column(Integer)  # NULL means unlimited

    created_by = Column(Integer, ForeignKey("users.id"), nullable=False)

    # Rule that generated the batch, copied onto every sibling instance
    is_recurring = Column(Boolean, nullable=False, default=False)
    recurrence_pattern = Column(JSON)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships (read-only, rows are managed by the services)
    creator = relationship("User", foreign_keys=[created_by], viewonly=True)
    required_skills = relationship(
        "Skill", secondary="opportunity_required_skills", viewonly=True
    )
    interests = relationship(
        "Interest", secondary="opportunity_interests", viewonly=True
    )


class OpportunityRequiredSkill(Base):
    __tablename__ = "opportunity_required_skills"

    opportunity_id = Column(
        Integer, ForeignKey("opportunities.id", ondelete="CASCADE"), primary_key=True
    )
    skill_id = Column(
        Integer, ForeignKey("skills.id", ondelete="CASCADE"), primary_key=True
    )


class OpportunityInterest(Base):
    __tablename__ = "opportunity_interests"

    opportunity_id = Column(
        Integer, ForeignKey("opportunities.id", ondelete="CASCADE"), primary_key=True
    )
    interest_id = Column(
        Integer, ForeignKey("interests.id", ondelete="CASCADE"), primary_key=True
    )
