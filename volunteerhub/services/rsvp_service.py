from sqlalchemy.orm import Session
from sqlalchemy import and_
from typing import List, Dict, Any, Optional
from datetime import datetime
import logging

from ..models.opportunity import Opportunity
from ..models.rsvp import RSVP
from ..models.user import User
from ..models.enums import OpportunityStatus, RSVPStatus
from ..utils.date_helpers import DateHelpers
from . import capacity
from .opportunity_service import OpportunityService, OpportunityNotFoundError

logger = logging.getLogger(__name__)


class RSVPServiceError(Exception):
    """Base exception for RSVP service errors"""

    pass


class RSVPNotFoundError(RSVPServiceError):
    """No RSVP for this volunteer and opportunity"""

    pass


class VolunteerNotFoundError(RSVPServiceError):
    """Volunteer not found"""

    pass


class OpportunityFullError(RSVPServiceError):
    """Opportunity has no spots left"""

    pass


class OpportunityNotOpenError(RSVPServiceError):
    """Opportunity is completed or canceled"""

    pass


class OpportunityInPastError(RSVPServiceError):
    """Opportunity has already started"""

    pass


class RSVPStateError(RSVPServiceError):
    """RSVP status does not allow this change"""

    pass


class RSVPPersistenceError(RSVPServiceError):
    """Storage failure while writing an RSVP"""

    pass


# Statuses only staff can set; volunteers cannot sign up or cancel over them
STAFF_FINAL_STATUSES = (RSVPStatus.ATTENDED.value, RSVPStatus.NO_SHOW.value)

# Shown to other volunteers as going
ATTENDEE_STATUSES = (RSVPStatus.PENDING.value, RSVPStatus.CONFIRMED.value)


class RSVPService:
    def __init__(self, db: Session):
        self.db = db
        self.opportunities = OpportunityService(db)

    def signup(self, volunteer_id: int, opportunity_id: int) -> RSVP:
        """Confirm a volunteer on an opportunity, enforcing capacity.

        The opportunity row stays locked from the capacity count until the
        RSVP write commits, so two signups racing for the last spot cannot
        both succeed. Signing up again keeps the single existing row.
        """

        self._require_volunteer(volunteer_id)
        opportunity = self._lock_opportunity(opportunity_id)

        try:
            if opportunity.status not in (
                OpportunityStatus.OPEN.value,
                OpportunityStatus.FULL.value,
            ):
                raise OpportunityNotOpenError("Opportunity is not open for RSVPs")

            if DateHelpers.is_in_past(opportunity.start_date):
                raise OpportunityInPastError("Cannot RSVP to past opportunities")

            existing = self._get_rsvp(volunteer_id, opportunity_id)
            if existing and existing.status in STAFF_FINAL_STATUSES:
                raise RSVPStateError(
                    f"Attendance already recorded as '{existing.status}'"
                )

            count = self._confirmed_count(opportunity_id)
            holds_slot = existing is not None and capacity.occupies_slot(
                existing.status
            )
            if capacity.is_full(opportunity, count) and not holds_slot:
                raise OpportunityFullError("This opportunity is full")

        except RSVPServiceError:
            self.db.rollback()
            raise

        try:
            now = datetime.utcnow()
            if existing:
                existing.status = RSVPStatus.CONFIRMED.value
                existing.rsvp_at = now
                rsvp = existing
            else:
                rsvp = RSVP(
                    volunteer_id=volunteer_id,
                    opportunity_id=opportunity_id,
                    status=RSVPStatus.CONFIRMED.value,
                    rsvp_at=now,
                )
                self.db.add(rsvp)

            if not holds_slot:
                count += 1
            opportunity.status = capacity.derived_status(opportunity, count)

            self.db.commit()
            self.db.refresh(rsvp)

        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to record RSVP: {str(e)}")
            raise RSVPPersistenceError("Failed to record RSVP")

        logger.info(f"Volunteer {volunteer_id} confirmed for opportunity {opportunity_id}")
        return rsvp

    def cancel(self, volunteer_id: int, opportunity_id: int) -> None:
        """Decline the volunteer's RSVP, keeping the row for history"""

        opportunity = self._lock_opportunity(opportunity_id)
        rsvp = self._get_rsvp(volunteer_id, opportunity_id)

        if not rsvp:
            self.db.rollback()
            raise RSVPNotFoundError("RSVP not found")

        if rsvp.status in STAFF_FINAL_STATUSES:
            self.db.rollback()
            raise RSVPStateError(f"Attendance already recorded as '{rsvp.status}'")

        try:
            rsvp.status = RSVPStatus.DECLINED.value
            self.db.flush()
            opportunity.status = capacity.derived_status(
                opportunity, self._confirmed_count(opportunity_id)
            )
            self.db.commit()

        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to cancel RSVP: {str(e)}")
            raise RSVPPersistenceError("Failed to cancel RSVP")

        logger.info(f"Volunteer {volunteer_id} cancelled RSVP for opportunity {opportunity_id}")

    def mark_attendance(
        self,
        volunteer_id: int,
        opportunity_id: int,
        status: RSVPStatus,
        notes: Optional[str] = None,
    ) -> RSVP:
        """Staff-side status change; creates the RSVP if the volunteer has none"""

        status = RSVPStatus(status).value
        self._require_volunteer(volunteer_id)
        opportunity = self._lock_opportunity(opportunity_id)
        rsvp = self._get_rsvp(volunteer_id, opportunity_id)

        count = self._confirmed_count(opportunity_id)
        gains_slot = capacity.occupies_slot(status) and not (
            rsvp is not None and capacity.occupies_slot(rsvp.status)
        )
        if gains_slot and capacity.is_full(opportunity, count):
            self.db.rollback()
            raise OpportunityFullError("This opportunity is full")

        try:
            if rsvp is None:
                rsvp = RSVP(
                    volunteer_id=volunteer_id,
                    opportunity_id=opportunity_id,
                    rsvp_at=datetime.utcnow(),
                )
                self.db.add(rsvp)

            rsvp.status = status
            if notes is not None:
                rsvp.notes = notes

            self.db.flush()
            opportunity.status = capacity.derived_status(
                opportunity, self._confirmed_count(opportunity_id)
            )
            self.db.commit()
            self.db.refresh(rsvp)
            return rsvp

        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to update RSVP: {str(e)}")
            raise RSVPPersistenceError("Failed to update RSVP")

    def list_by_volunteer(self, volunteer_id: int) -> Dict[str, List[RSVP]]:
        """Upcoming RSVPs (soonest first) and every RSVP (latest first)"""

        self._require_volunteer(volunteer_id)

        rows = (
            self.db.query(RSVP)
            .join(Opportunity, RSVP.opportunity_id == Opportunity.id)
            .filter(RSVP.volunteer_id == volunteer_id)
            .order_by(Opportunity.start_date.desc())
            .all()
        )

        now = datetime.utcnow()
        upcoming = sorted(
            (r for r in rows if r.opportunity.start_date > now),
            key=lambda r: r.opportunity.start_date,
        )

        return {"upcoming": upcoming, "all": rows}

    def list_by_opportunity(self, opportunity_id: int) -> List[RSVP]:
        if not self.db.query(Opportunity.id).filter(Opportunity.id == opportunity_id).first():
            raise OpportunityNotFoundError(f"Opportunity {opportunity_id} not found")

        return (
            self.db.query(RSVP)
            .filter(RSVP.opportunity_id == opportunity_id)
            .order_by(RSVP.rsvp_at)
            .all()
        )

    def list_attendees(self, opportunity_id: int) -> List[User]:
        """Volunteers with a pending or confirmed RSVP, earliest signup first"""

        if not self.db.query(Opportunity.id).filter(Opportunity.id == opportunity_id).first():
            raise OpportunityNotFoundError(f"Opportunity {opportunity_id} not found")

        return (
            self.db.query(User)
            .join(RSVP, RSVP.volunteer_id == User.id)
            .filter(
                and_(
                    RSVP.opportunity_id == opportunity_id,
                    RSVP.status.in_(ATTENDEE_STATUSES),
                )
            )
            .order_by(RSVP.rsvp_at)
            .all()
        )

    @staticmethod
    def serialize(rsvp: RSVP, include_opportunity: bool = False) -> Dict[str, Any]:
        data = {
            "volunteer_id": rsvp.volunteer_id,
            "opportunity_id": rsvp.opportunity_id,
            "status": rsvp.status,
            "rsvp_at": rsvp.rsvp_at,
            "notes": rsvp.notes,
        }

        if rsvp.volunteer is not None:
            data["volunteer_name"] = rsvp.volunteer.name

        if include_opportunity and rsvp.opportunity is not None:
            opportunity = rsvp.opportunity
            data["opportunity"] = {
                "id": opportunity.id,
                "title": opportunity.title,
                "description": opportunity.description,
                "location": opportunity.location,
                "start_date": opportunity.start_date,
                "end_date": opportunity.end_date,
                "status": opportunity.status,
            }

        return data

    # === HELPER METHODS ===
    def _require_volunteer(self, volunteer_id: int) -> User:
        volunteer = self.db.query(User).filter(User.id == volunteer_id).first()
        if not volunteer:
            raise VolunteerNotFoundError(f"Volunteer {volunteer_id} not found")
        return volunteer

    def _lock_opportunity(self, opportunity_id: int) -> Opportunity:
        """Load the opportunity with a row lock held until commit/rollback"""
        opportunity = (
            self.db.query(Opportunity)
            .filter(Opportunity.id == opportunity_id)
            .with_for_update()
            .first()
        )
        if not opportunity:
            self.db.rollback()
            raise OpportunityNotFoundError(f"Opportunity {opportunity_id} not found")
        return opportunity

    def _get_rsvp(self, volunteer_id: int, opportunity_id: int) -> Optional[RSVP]:
        return (
            self.db.query(RSVP)
            .filter(
                and_(
                    RSVP.volunteer_id == volunteer_id,
                    RSVP.opportunity_id == opportunity_id,
                )
            )
            .first()
        )

    def _confirmed_count(self, opportunity_id: int) -> int:
        return self.opportunities.confirmed_count(opportunity_id)
