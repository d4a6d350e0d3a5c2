from sqlalchemy import Column, Integer, String, Text, ForeignKey
from sqlalchemy.orm import relationship
from ..database import Base


class Skill(Base):
    __tablename__ = "skills"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, nullable=False)
    description = Column(Text)
    category = Column(String)  # Technical, Soft Skills, Safety, ...


class Interest(Base):
    __tablename__ = "interests"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, nullable=False)
    description = Column(Text)


class VolunteerSkill(Base):
    __tablename__ = "volunteer_skills"

    volunteer_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    skill_id = Column(
        Integer, ForeignKey("skills.id", ondelete="CASCADE"), primary_key=True
    )
    level = Column(String, nullable=False)  # ProficiencyLevel

    skill = relationship("Skill", viewonly=True)


class VolunteerInterest(Base):
    __tablename__ = "volunteer_interests"

    volunteer_id = Column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    interest_id = Column(
        Integer, ForeignKey("interests.id", ondelete="CASCADE"), primary_key=True
    )

    interest = relationship("Interest", viewonly=True)
