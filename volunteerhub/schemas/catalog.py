from pydantic import BaseModel, Field
from typing import Optional
from ..models.enums import ProficiencyLevel


class SkillCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    category: Optional[str] = Field(None, max_length=100)


class SkillResponse(SkillCreate):
    id: int

    class Config:
        from_attributes = True


class InterestCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)


class InterestResponse(InterestCreate):
    id: int

    class Config:
        from_attributes = True


class VolunteerSkillAssign(BaseModel):
    skill_id: int = Field(..., gt=0)
    level: ProficiencyLevel


class VolunteerInterestAssign(BaseModel):
    interest_id: int = Field(..., gt=0)
