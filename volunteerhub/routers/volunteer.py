# volunteerhub/routers/volunteer.py - volunteer self-service

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session
from typing import Dict, Any, Optional
from ..database import get_db
from ..dependencies import get_current_user, require_volunteer
from ..models.user import User
from ..schemas.common import PaginationInfo, PaginationParams
from ..services.opportunity_service import OpportunityService
from ..services.rsvp_service import RSVPService
from ..utils.constants import AppConstants
from ..utils.router_helpers import handle_service_errors, RouterResponse

router = APIRouter(tags=["volunteer"])


@router.get("/opportunities", response_model=Dict[str, Any])
@handle_service_errors
async def list_open_opportunities(
    search: Optional[str] = Query(None, max_length=100),
    page: int = Query(AppConstants.DEFAULT_PAGE, ge=1),
    page_size: int = Query(
        AppConstants.DEFAULT_PAGE_SIZE, ge=1, le=AppConstants.MAX_PAGE_SIZE
    ),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Upcoming opportunities that are open and not yet full"""
    pagination = PaginationParams(page=page, page_size=page_size)

    result = OpportunityService(db).list_open_opportunities(
        search=search, offset=pagination.offset, limit=pagination.limit
    )

    return RouterResponse.success(
        data={
            "opportunities": result["opportunities"],
            "pagination": PaginationInfo.from_total(
                result["total_count"], pagination
            ).model_dump(),
        }
    )


@router.get("/opportunities/{opportunity_id}", response_model=Dict[str, Any])
@handle_service_errors
async def get_opportunity(
    opportunity_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Opportunity details with freshly computed spots remaining"""
    return RouterResponse.success(
        data=OpportunityService(db).get_with_spots(opportunity_id)
    )


@router.get("/opportunities/{opportunity_id}/attendees", response_model=Dict[str, Any])
@handle_service_errors
async def get_attendees(
    opportunity_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_volunteer),
):
    """First names of volunteers going to an opportunity"""
    attendees = RSVPService(db).list_attendees(opportunity_id)
    return RouterResponse.success(
        data={"attendees": [{"first_name": a.first_name} for a in attendees]}
    )


@router.post("/opportunities/{opportunity_id}/rsvp", response_model=Dict[str, Any])
@handle_service_errors
async def signup(
    opportunity_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_volunteer),
):
    """RSVP to an opportunity"""
    rsvp = RSVPService(db).signup(current_user.id, opportunity_id)
    return RouterResponse.success(
        data={"rsvp": RSVPService.serialize(rsvp)},
        message="RSVP confirmed",
    )


@router.delete(
    "/opportunities/{opportunity_id}/rsvp",
    status_code=status.HTTP_204_NO_CONTENT,
    response_model=None,
)
@handle_service_errors
async def cancel(
    opportunity_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_volunteer),
):
    """Cancel an RSVP"""
    RSVPService(db).cancel(current_user.id, opportunity_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/rsvps", response_model=Dict[str, Any])
@handle_service_errors
async def get_my_rsvps(
    db: Session = Depends(get_db),
    current_user: User = Depends(require_volunteer),
):
    """Current volunteer's RSVPs"""
    rsvps = RSVPService(db).list_by_volunteer(current_user.id)

    return RouterResponse.success(
        data={
            key: [RSVPService.serialize(r, include_opportunity=True) for r in rows]
            for key, rows in rsvps.items()
        }
    )
