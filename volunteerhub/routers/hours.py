# volunteerhub/routers/hours.py - volunteer hours logging and verification

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Dict, Any, Optional
from datetime import datetime
from ..database import get_db
from ..dependencies import require_staff
from ..models.user import User
from ..schemas.hours import HoursCreate, HoursUpdate, HoursResponse
from ..services.hours_service import HoursService
from ..utils.date_helpers import DateHelpers
from ..utils.router_helpers import handle_service_errors, RouterResponse

router = APIRouter(tags=["hours"])


@router.post(
    "/volunteers/{volunteer_id}/hours",
    response_model=Dict[str, Any],
    status_code=status.HTTP_201_CREATED,
)
@handle_service_errors
async def log_hours(
    volunteer_id: int,
    hours_data: HoursCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    entry = HoursService(db).log_hours(volunteer_id=volunteer_id, **hours_data.dict())
    return RouterResponse.created(
        data={"hours": HoursResponse.model_validate(entry).model_dump()}
    )


@router.get("/volunteers/{volunteer_id}/hours", response_model=Dict[str, Any])
@handle_service_errors
async def list_hours(
    volunteer_id: int,
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
    verified: Optional[bool] = Query(None),
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    result = HoursService(db).list_volunteer_hours(
        volunteer_id=volunteer_id,
        start_date=DateHelpers.to_naive_utc(start_date),
        end_date=DateHelpers.to_naive_utc(end_date),
        verified=verified,
    )
    return RouterResponse.success(
        data={
            "records": [
                HoursResponse.model_validate(r).model_dump() for r in result["records"]
            ],
            "total_hours": result["total_hours"],
        }
    )


@router.put("/hours/{hours_id}", response_model=Dict[str, Any])
@handle_service_errors
async def update_hours(
    hours_id: int,
    hours_updates: HoursUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    """Verify hours, or edit them while unverified"""
    entry = HoursService(db).update_hours(
        hours_id,
        verified_by=current_user.id,
        verify=hours_updates.verify,
        hours=hours_updates.hours,
        notes=hours_updates.notes,
    )
    return RouterResponse.updated(
        data={"hours": HoursResponse.model_validate(entry).model_dump()}
    )


@router.delete("/hours/{hours_id}", response_model=Dict[str, Any])
@handle_service_errors
async def delete_hours(
    hours_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    HoursService(db).delete_hours(hours_id)
    return RouterResponse.deleted(message="Hours record deleted")
