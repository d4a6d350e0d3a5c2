# volunteerhub/routers/catalog.py - skills and interests

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session
from typing import Dict, Any
from ..database import get_db
from ..dependencies import get_current_user, require_staff
from ..models.user import User
from ..schemas.catalog import (
    SkillCreate,
    SkillResponse,
    InterestCreate,
    InterestResponse,
    VolunteerSkillAssign,
    VolunteerInterestAssign,
)
from ..services.catalog_service import CatalogService
from ..utils.router_helpers import handle_service_errors, RouterResponse

router = APIRouter(tags=["catalog"])


@router.get("/skills", response_model=Dict[str, Any])
@handle_service_errors
async def list_skills(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    skills = CatalogService(db).list_skills()
    return RouterResponse.success(
        data={"skills": [SkillResponse.model_validate(s).model_dump() for s in skills]}
    )


@router.post("/skills", response_model=Dict[str, Any], status_code=status.HTTP_201_CREATED)
@handle_service_errors
async def create_skill(
    skill_data: SkillCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    skill = CatalogService(db).create_skill(**skill_data.dict())
    return RouterResponse.created(
        data={"skill": SkillResponse.model_validate(skill).model_dump()}
    )


@router.delete("/skills/{skill_id}", response_model=Dict[str, Any])
@handle_service_errors
async def delete_skill(
    skill_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    CatalogService(db).delete_skill(skill_id)
    return RouterResponse.deleted(message="Skill deleted")


@router.get("/interests", response_model=Dict[str, Any])
@handle_service_errors
async def list_interests(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    interests = CatalogService(db).list_interests()
    return RouterResponse.success(
        data={
            "interests": [
                InterestResponse.model_validate(i).model_dump() for i in interests
            ]
        }
    )


@router.post(
    "/interests", response_model=Dict[str, Any], status_code=status.HTTP_201_CREATED
)
@handle_service_errors
async def create_interest(
    interest_data: InterestCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    interest = CatalogService(db).create_interest(**interest_data.dict())
    return RouterResponse.created(
        data={"interest": InterestResponse.model_validate(interest).model_dump()}
    )


@router.delete("/interests/{interest_id}", response_model=Dict[str, Any])
@handle_service_errors
async def delete_interest(
    interest_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    CatalogService(db).delete_interest(interest_id)
    return RouterResponse.deleted(message="Interest deleted")


# Volunteer skills / interests
@router.get("/volunteers/{volunteer_id}/skills", response_model=Dict[str, Any])
@handle_service_errors
async def get_volunteer_skills(
    volunteer_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    catalog_service = CatalogService(db)
    skills = catalog_service.get_volunteer_skills(volunteer_id)
    return RouterResponse.success(
        data={"skills": [catalog_service.serialize_volunteer_skill(s) for s in skills]}
    )


@router.post(
    "/volunteers/{volunteer_id}/skills",
    response_model=Dict[str, Any],
    status_code=status.HTTP_201_CREATED,
)
@handle_service_errors
async def assign_volunteer_skill(
    volunteer_id: int,
    assignment: VolunteerSkillAssign,
    response: Response,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    """Assign a skill, or update its level if already assigned"""
    catalog_service = CatalogService(db)
    skill, created = catalog_service.assign_skill(
        volunteer_id, assignment.skill_id, assignment.level
    )

    data = {"skill": catalog_service.serialize_volunteer_skill(skill)}
    if created:
        return RouterResponse.created(data=data, message="Skill assigned")

    response.status_code = status.HTTP_200_OK
    return RouterResponse.updated(data=data, message="Skill level updated")


@router.delete(
    "/volunteers/{volunteer_id}/skills/{skill_id}", response_model=Dict[str, Any]
)
@handle_service_errors
async def remove_volunteer_skill(
    volunteer_id: int,
    skill_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    CatalogService(db).remove_volunteer_skill(volunteer_id, skill_id)
    return RouterResponse.deleted(message="Skill removed from volunteer")


@router.get("/volunteers/{volunteer_id}/interests", response_model=Dict[str, Any])
@handle_service_errors
async def get_volunteer_interests(
    volunteer_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    catalog_service = CatalogService(db)
    interests = catalog_service.get_volunteer_interests(volunteer_id)
    return RouterResponse.success(
        data={
            "interests": [
                catalog_service.serialize_volunteer_interest(i) for i in interests
            ]
        }
    )


@router.post(
    "/volunteers/{volunteer_id}/interests",
    response_model=Dict[str, Any],
    status_code=status.HTTP_201_CREATED,
)
@handle_service_errors
async def assign_volunteer_interest(
    volunteer_id: int,
    assignment: VolunteerInterestAssign,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    catalog_service = CatalogService(db)
    interest = catalog_service.assign_interest(volunteer_id, assignment.interest_id)
    return RouterResponse.created(
        data={"interest": catalog_service.serialize_volunteer_interest(interest)},
        message="Interest assigned",
    )


@router.delete(
    "/volunteers/{volunteer_id}/interests/{interest_id}",
    response_model=Dict[str, Any],
)
@handle_service_errors
async def remove_volunteer_interest(
    volunteer_id: int,
    interest_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    CatalogService(db).remove_volunteer_interest(volunteer_id, interest_id)
    return RouterResponse.deleted(message="Interest removed from volunteer")
