from sqlalchemy.orm import Session
from sqlalchemy import and_, func
from typing import Dict, Any, Optional
from datetime import datetime
import logging

from ..models.opportunity import Opportunity
from ..models.user import User
from ..models.volunteer_hours import VolunteerHours

logger = logging.getLogger(__name__)


class HoursServiceError(Exception):
    """Base exception for volunteer hours errors"""

    pass


class HoursNotFoundError(HoursServiceError):
    """Hours record, volunteer or opportunity not found"""

    pass


class HoursLockedError(HoursServiceError):
    """Verified hours can no longer be edited"""

    pass


class HoursService:
    def __init__(self, db: Session):
        self.db = db

    def log_hours(
        self,
        volunteer_id: int,
        opportunity_id: int,
        date: datetime,
        hours: float,
        notes: Optional[str] = None,
    ) -> VolunteerHours:
        """Record unverified hours for a volunteer against an opportunity"""

        if not self.db.query(User.id).filter(User.id == volunteer_id).first():
            raise HoursNotFoundError(f"Volunteer {volunteer_id} not found")
        if not self.db.query(Opportunity.id).filter(Opportunity.id == opportunity_id).first():
            raise HoursNotFoundError(f"Opportunity {opportunity_id} not found")
        if hours <= 0:
            raise HoursServiceError("Hours must be greater than zero")

        try:
            entry = VolunteerHours(
                volunteer_id=volunteer_id,
                opportunity_id=opportunity_id,
                date=date,
                hours=hours,
                notes=notes,
            )
            self.db.add(entry)
            self.db.commit()
            self.db.refresh(entry)
            return entry

        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to log hours: {str(e)}")
            raise HoursServiceError("Failed to log hours")

    def update_hours(
        self,
        hours_id: int,
        verified_by: int,
        verify: bool = False,
        hours: Optional[float] = None,
        notes: Optional[str] = None,
    ) -> VolunteerHours:
        """Verify a record, or edit it while it is still unverified"""

        entry = self._get_or_raise(hours_id)

        if not verify and entry.verified_at is not None:
            raise HoursLockedError("Cannot edit hours that have already been verified")

        try:
            if verify:
                entry.verified_by = verified_by
                entry.verified_at = datetime.utcnow()
            else:
                if hours is not None:
                    entry.hours = hours
                if notes is not None:
                    entry.notes = notes

            self.db.commit()
            self.db.refresh(entry)
            return entry

        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to update hours: {str(e)}")
            raise HoursServiceError("Failed to update hours")

    def delete_hours(self, hours_id: int) -> None:
        entry = self._get_or_raise(hours_id)

        try:
            self.db.delete(entry)
            self.db.commit()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to delete hours: {str(e)}")
            raise HoursServiceError("Failed to delete hours")

    def list_volunteer_hours(
        self,
        volunteer_id: int,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        verified: Optional[bool] = None,
    ) -> Dict[str, Any]:
        """Hour records for a volunteer, oldest first, with their total"""

        conditions = [VolunteerHours.volunteer_id == volunteer_id]
        if start_date:
            conditions.append(VolunteerHours.date >= start_date)
        if end_date:
            conditions.append(VolunteerHours.date <= end_date)
        if verified is True:
            conditions.append(VolunteerHours.verified_at.isnot(None))
        if verified is False:
            conditions.append(VolunteerHours.verified_at.is_(None))

        records = (
            self.db.query(VolunteerHours)
            .filter(and_(*conditions))
            .order_by(VolunteerHours.date)
            .all()
        )
        total = (
            self.db.query(func.sum(VolunteerHours.hours))
            .filter(and_(*conditions))
            .scalar()
        )

        return {"records": records, "total_hours": total or 0}

    def _get_or_raise(self, hours_id: int) -> VolunteerHours:
        entry = self.db.query(VolunteerHours).filter(VolunteerHours.id == hours_id).first()
        if not entry:
            raise HoursNotFoundError("Record not found")
        return entry
