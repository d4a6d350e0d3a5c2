# volunteerhub/routers/opportunities.py - staff calendar management

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Dict, Any, Optional
from datetime import datetime
from ..database import get_db
from ..dependencies import require_staff
from ..models.enums import OpportunityStatus
from ..models.user import User
from ..schemas.common import PaginationInfo, PaginationParams
from ..schemas.opportunity import OpportunityCreate, OpportunityUpdate, AttendanceUpdate
from ..services.opportunity_service import OpportunityService
from ..services.recurrence_service import OpportunityDraft, InvalidRuleError
from ..services.rsvp_service import RSVPService
from ..utils.constants import AppConstants
from ..utils.date_helpers import DateHelpers
from ..utils.router_helpers import handle_service_errors, RouterResponse

router = APIRouter(tags=["opportunities"])


@router.post("/", response_model=Dict[str, Any], status_code=status.HTTP_201_CREATED)
@handle_service_errors
async def create_opportunity(
    opportunity_data: OpportunityCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    """Create an opportunity, or every occurrence of a recurring one"""

    base = OpportunityDraft(
        title=opportunity_data.title,
        description=opportunity_data.description,
        location=opportunity_data.location,
        start_date=opportunity_data.start_date,
        end_date=opportunity_data.end_date,
        max_volunteers=opportunity_data.max_volunteers,
        status=opportunity_data.status.value,
        created_by=current_user.id,
    )

    rule = None
    if opportunity_data.recurrence_pattern is not None:
        rule = opportunity_data.recurrence_pattern.to_rule()
    elif opportunity_data.is_recurring:
        raise InvalidRuleError("Recurring opportunities need a recurrence pattern")

    opportunity_service = OpportunityService(db)
    created = opportunity_service.create_opportunities(
        base,
        rule=rule,
        skill_ids=opportunity_data.skill_ids,
        interest_ids=opportunity_data.interest_ids,
    )

    return RouterResponse.created(
        data={
            "created_instances": [
                opportunity_service.serialize(o, 0) for o in created
            ]
        },
        message=f"Created {len(created)} opportunity instance(s)",
    )


@router.get("/", response_model=Dict[str, Any])
@handle_service_errors
async def list_opportunities(
    status_filter: Optional[OpportunityStatus] = Query(None, alias="status"),
    start: Optional[datetime] = Query(None, description="Earliest start time"),
    end: Optional[datetime] = Query(None, description="Latest start time"),
    search: Optional[str] = Query(None, max_length=100),
    is_recurring: Optional[bool] = Query(None),
    page: int = Query(AppConstants.DEFAULT_PAGE, ge=1),
    page_size: int = Query(
        AppConstants.DEFAULT_PAGE_SIZE, ge=1, le=AppConstants.MAX_PAGE_SIZE
    ),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    """Calendar listing for staff"""
    pagination = PaginationParams(page=page, page_size=page_size)

    opportunity_service = OpportunityService(db)
    result = opportunity_service.list(
        status=status_filter,
        start=DateHelpers.to_naive_utc(start),
        end=DateHelpers.to_naive_utc(end),
        search=search,
        is_recurring=is_recurring,
        offset=pagination.offset,
        limit=pagination.limit,
    )

    return RouterResponse.success(
        data={
            "opportunities": [
                opportunity_service.serialize(o) for o in result["opportunities"]
            ],
            "pagination": PaginationInfo.from_total(
                result["total_count"], pagination
            ).model_dump(),
        }
    )


@router.get("/{opportunity_id}", response_model=Dict[str, Any])
@handle_service_errors
async def get_opportunity(
    opportunity_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    opportunity_service = OpportunityService(db)
    return RouterResponse.success(data=opportunity_service.get_with_spots(opportunity_id))


@router.put("/{opportunity_id}", response_model=Dict[str, Any])
@handle_service_errors
async def update_opportunity(
    opportunity_id: int,
    opportunity_updates: OpportunityUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    """Edit or reschedule a single instance"""
    opportunity_service = OpportunityService(db)
    opportunity = opportunity_service.update(
        opportunity_id, opportunity_updates.dict(exclude_unset=True)
    )

    return RouterResponse.updated(
        data={"opportunity": opportunity_service.serialize(opportunity)}
    )


@router.delete("/{opportunity_id}", response_model=Dict[str, Any])
@handle_service_errors
async def delete_opportunity(
    opportunity_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    """Delete an opportunity with its RSVPs, hours and tags"""
    OpportunityService(db).delete(opportunity_id)
    return RouterResponse.deleted(message="Opportunity deleted successfully")


# RSVP Management
@router.get("/{opportunity_id}/rsvps", response_model=Dict[str, Any])
@handle_service_errors
async def get_opportunity_rsvps(
    opportunity_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    rsvps = RSVPService(db).list_by_opportunity(opportunity_id)
    return RouterResponse.success(
        data={"rsvps": [RSVPService.serialize(r) for r in rsvps]}
    )


@router.put("/{opportunity_id}/rsvps/{volunteer_id}", response_model=Dict[str, Any])
@handle_service_errors
async def mark_attendance(
    opportunity_id: int,
    volunteer_id: int,
    attendance: AttendanceUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    """Set a volunteer's RSVP status (attended, no-show, ...)"""
    rsvp = RSVPService(db).mark_attendance(
        volunteer_id=volunteer_id,
        opportunity_id=opportunity_id,
        status=attendance.status,
        notes=attendance.notes,
    )
    return RouterResponse.updated(data={"rsvp": RSVPService.serialize(rsvp)})


# Required skills / interests
@router.post("/{opportunity_id}/skills/{skill_id}", response_model=Dict[str, Any])
@handle_service_errors
async def add_required_skill(
    opportunity_id: int,
    skill_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    OpportunityService(db).add_required_skill(opportunity_id, skill_id)
    return RouterResponse.success(message="Skill added")


@router.delete("/{opportunity_id}/skills/{skill_id}", response_model=Dict[str, Any])
@handle_service_errors
async def remove_required_skill(
    opportunity_id: int,
    skill_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    OpportunityService(db).remove_required_skill(opportunity_id, skill_id)
    return RouterResponse.deleted(message="Skill removed")


@router.post("/{opportunity_id}/interests/{interest_id}", response_model=Dict[str, Any])
@handle_service_errors
async def add_interest(
    opportunity_id: int,
    interest_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    OpportunityService(db).add_interest(opportunity_id, interest_id)
    return RouterResponse.success(message="Interest added")


@router.delete("/{opportunity_id}/interests/{interest_id}", response_model=Dict[str, Any])
@handle_service_errors
async def remove_interest(
    opportunity_id: int,
    interest_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    OpportunityService(db).remove_interest(opportunity_id, interest_id)
    return RouterResponse.deleted(message="Interest removed")
