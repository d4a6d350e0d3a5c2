from sqlalchemy.orm import Session
from sqlalchemy import and_, or_, func
from typing import List, Dict, Any, Optional, Iterable
from datetime import datetime
import logging

from ..models.opportunity import (
    Opportunity,
    OpportunityRequiredSkill,
    OpportunityInterest,
)
from ..models.rsvp import RSVP
from ..models.skill import Skill, Interest
from ..models.volunteer_hours import VolunteerHours
from ..models.enums import OpportunityStatus
from . import capacity
from .recurrence_service import (
    OpportunityDraft,
    RecurrenceRule,
    InvalidWindowError,
    expand,
)

logger = logging.getLogger(__name__)


class OpportunityServiceError(Exception):
    """Base exception for opportunity service errors"""

    pass


class OpportunityNotFoundError(OpportunityServiceError):
    """Opportunity not found"""

    pass


class OpportunityConflictError(OpportunityServiceError):
    """An opportunity with the same title already starts at that time"""

    pass


class BatchCreateFailedError(OpportunityServiceError):
    """Persisting a batch of opportunities failed; nothing was saved"""

    pass


class TagNotFoundError(OpportunityServiceError):
    """Skill, interest or tag assignment not found"""

    pass


UPDATABLE_FIELDS = (
    "title",
    "description",
    "location",
    "start_date",
    "end_date",
    "max_volunteers",
    "status",
)

# max_volunteers may be cleared (unlimited); the rest are NOT NULL columns
NULLABLE_FIELDS = ("max_volunteers",)


class OpportunityService:
    def __init__(self, db: Session):
        self.db = db

    # === CREATION ===
    def create_opportunities(
        self,
        base: OpportunityDraft,
        rule: Optional[RecurrenceRule] = None,
        skill_ids: Iterable[int] = (),
        interest_ids: Iterable[int] = (),
    ) -> List[Opportunity]:
        """Create one opportunity, or every occurrence of `rule` starting at base"""

        if rule is not None:
            drafts = expand(base, rule)
        else:
            if base.end_date <= base.start_date:
                raise InvalidWindowError("End date must be after start date")
            drafts = [base]

        skill_ids = set(skill_ids)
        interest_ids = set(interest_ids)
        self._require_skills(skill_ids)
        self._require_interests(interest_ids)
        self._check_duplicates(drafts)

        return self.create_batch(drafts, skill_ids, interest_ids)

    def create_batch(
        self,
        drafts: List[OpportunityDraft],
        skill_ids: Iterable[int] = (),
        interest_ids: Iterable[int] = (),
    ) -> List[Opportunity]:
        """Persist every draft with the same tag set, all or nothing"""

        if not drafts:
            return []

        skill_ids = sorted(set(skill_ids))
        interest_ids = sorted(set(interest_ids))

        try:
            opportunities = [
                Opportunity(
                    title=draft.title,
                    description=draft.description or "",
                    location=draft.location or "",
                    start_date=draft.start_date,
                    end_date=draft.end_date,
                    max_volunteers=draft.max_volunteers,
                    status=draft.status,
                    created_by=draft.created_by,
                    is_recurring=draft.is_recurring,
                    recurrence_pattern=draft.recurrence_pattern,
                )
                for draft in drafts
            ]
            self.db.add_all(opportunities)
            self.db.flush()

            for opportunity in opportunities:
                for skill_id in skill_ids:
                    self.db.add(
                        OpportunityRequiredSkill(
                            opportunity_id=opportunity.id, skill_id=skill_id
                        )
                    )
                for interest_id in interest_ids:
                    self.db.add(
                        OpportunityInterest(
                            opportunity_id=opportunity.id, interest_id=interest_id
                        )
                    )

            self.db.commit()
            for opportunity in opportunities:
                self.db.refresh(opportunity)

        except Exception as e:
            self.db.rollback()
            logger.error(
                f"Batch of {len(drafts)} opportunities failed: {str(e)}", exc_info=True
            )
            raise BatchCreateFailedError("Failed to create opportunities")

        logger.info(
            f"Created {len(opportunities)} instance(s) of opportunity '{drafts[0].title}'"
        )
        return opportunities

    # === READ ===
    def get(self, opportunity_id: int) -> Opportunity:
        opportunity = (
            self.db.query(Opportunity).filter(Opportunity.id == opportunity_id).first()
        )
        if not opportunity:
            raise OpportunityNotFoundError(f"Opportunity {opportunity_id} not found")
        return opportunity

    def list(
        self,
        status: Optional[OpportunityStatus] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
        search: Optional[str] = None,
        created_by: Optional[int] = None,
        is_recurring: Optional[bool] = None,
        offset: int = 0,
        limit: int = 20,
    ) -> Dict[str, Any]:
        """Opportunities matching the filter, ordered by start time"""

        query = self.db.query(Opportunity)

        if status is not None:
            query = query.filter(Opportunity.status == OpportunityStatus(status).value)
        if start is not None:
            query = query.filter(Opportunity.start_date >= start)
        if end is not None:
            query = query.filter(Opportunity.start_date <= end)
        if created_by is not None:
            query = query.filter(Opportunity.created_by == created_by)
        if is_recurring is not None:
            query = query.filter(Opportunity.is_recurring == is_recurring)
        if search:
            query = query.filter(self._search_clause(search))

        total_count = query.count()
        opportunities = (
            query.order_by(Opportunity.start_date, Opportunity.id)
            .offset(offset)
            .limit(limit)
            .all()
        )

        return {"opportunities": opportunities, "total_count": total_count}

    def list_open_opportunities(
        self, search: Optional[str] = None, offset: int = 0, limit: int = 20
    ) -> Dict[str, Any]:
        """Open, upcoming opportunities that still have room"""

        query = self.db.query(Opportunity).filter(
            and_(
                Opportunity.status == OpportunityStatus.OPEN.value,
                Opportunity.start_date > datetime.utcnow(),
            )
        )
        if search:
            query = query.filter(self._search_clause(search))

        candidates = query.order_by(Opportunity.start_date, Opportunity.id).all()
        counts = self.confirmed_counts([o.id for o in candidates])

        # Full opportunities are hidden from volunteers
        available = [
            o for o in candidates if not capacity.is_full(o, counts.get(o.id, 0))
        ]

        return {
            "opportunities": [
                self.serialize(o, counts.get(o.id, 0))
                for o in available[offset : offset + limit]
            ],
            "total_count": len(available),
        }

    def get_with_spots(self, opportunity_id: int) -> Dict[str, Any]:
        """Opportunity plus spots remaining, computed from live RSVPs"""
        opportunity = self.get(opportunity_id)
        count = self.confirmed_count(opportunity_id)
        return {
            "opportunity": self.serialize(opportunity, count),
            "spots_remaining": capacity.spots_remaining(opportunity, count),
        }

    # === UPDATE / DELETE ===
    def update(self, opportunity_id: int, fields: Dict[str, Any]) -> Opportunity:
        """Apply a partial update; the resulting window must stay valid"""

        opportunity = self.get(opportunity_id)

        updates = {k: v for k, v in fields.items() if k in UPDATABLE_FIELDS}
        for field, value in updates.items():
            if value is None and field not in NULLABLE_FIELDS:
                raise OpportunityServiceError(f"{field} cannot be null")

        start = updates.get("start_date", opportunity.start_date)
        end = updates.get("end_date", opportunity.end_date)
        if end <= start:
            raise InvalidWindowError("End date must be after start date")

        if updates.get("max_volunteers") is not None and updates["max_volunteers"] < 0:
            raise OpportunityServiceError("Max volunteers cannot be negative")

        try:
            for field, value in updates.items():
                setattr(opportunity, field, value.value if hasattr(value, "value") else value)

            # A capacity change can flip open <-> full
            if "max_volunteers" in updates and "status" not in updates:
                opportunity.status = capacity.derived_status(
                    opportunity, self.confirmed_count(opportunity_id)
                )

            opportunity.updated_at = datetime.utcnow()
            self.db.commit()
            self.db.refresh(opportunity)
            return opportunity

        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to update opportunity {opportunity_id}: {str(e)}")
            raise OpportunityServiceError("Failed to update opportunity")

    def delete(self, opportunity_id: int) -> None:
        """Delete an opportunity and everything that hangs off it"""

        self.get(opportunity_id)

        try:
            # Dependents first, then the row itself, in one transaction
            for model in (
                RSVP,
                VolunteerHours,
                OpportunityRequiredSkill,
                OpportunityInterest,
            ):
                self.db.query(model).filter(
                    model.opportunity_id == opportunity_id
                ).delete(synchronize_session=False)

            self.db.query(Opportunity).filter(
                Opportunity.id == opportunity_id
            ).delete(synchronize_session=False)

            self.db.commit()
            self.db.expire_all()

        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to delete opportunity {opportunity_id}: {str(e)}")
            raise OpportunityServiceError("Failed to delete opportunity")

        logger.info(f"Deleted opportunity {opportunity_id}")

    # === TAGS ===
    def add_required_skill(self, opportunity_id: int, skill_id: int) -> None:
        self.get(opportunity_id)
        self._require_skills({skill_id})

        exists = (
            self.db.query(OpportunityRequiredSkill)
            .filter_by(opportunity_id=opportunity_id, skill_id=skill_id)
            .first()
        )
        if exists:
            return

        self.db.add(OpportunityRequiredSkill(opportunity_id=opportunity_id, skill_id=skill_id))
        self.db.commit()

    def remove_required_skill(self, opportunity_id: int, skill_id: int) -> None:
        self.get(opportunity_id)

        deleted = (
            self.db.query(OpportunityRequiredSkill)
            .filter_by(opportunity_id=opportunity_id, skill_id=skill_id)
            .delete(synchronize_session=False)
        )
        if not deleted:
            self.db.rollback()
            raise TagNotFoundError("Skill assignment not found")
        self.db.commit()

    def add_interest(self, opportunity_id: int, interest_id: int) -> None:
        self.get(opportunity_id)
        self._require_interests({interest_id})

        exists = (
            self.db.query(OpportunityInterest)
            .filter_by(opportunity_id=opportunity_id, interest_id=interest_id)
            .first()
        )
        if exists:
            return

        self.db.add(
            OpportunityInterest(opportunity_id=opportunity_id, interest_id=interest_id)
        )
        self.db.commit()

    def remove_interest(self, opportunity_id: int, interest_id: int) -> None:
        self.get(opportunity_id)

        deleted = (
            self.db.query(OpportunityInterest)
            .filter_by(opportunity_id=opportunity_id, interest_id=interest_id)
            .delete(synchronize_session=False)
        )
        if not deleted:
            self.db.rollback()
            raise TagNotFoundError("Interest assignment not found")
        self.db.commit()

    # === CAPACITY ===
    def confirmed_count(self, opportunity_id: int) -> int:
        """Live count of RSVPs holding a slot"""
        return (
            self.db.query(func.count(RSVP.volunteer_id))
            .filter(
                and_(
                    RSVP.opportunity_id == opportunity_id,
                    RSVP.status.in_(capacity.OCCUPYING_STATUSES),
                )
            )
            .scalar()
        )

    def confirmed_counts(self, opportunity_ids: List[int]) -> Dict[int, int]:
        if not opportunity_ids:
            return {}

        rows = (
            self.db.query(RSVP.opportunity_id, func.count(RSVP.volunteer_id))
            .filter(
                and_(
                    RSVP.opportunity_id.in_(opportunity_ids),
                    RSVP.status.in_(capacity.OCCUPYING_STATUSES),
                )
            )
            .group_by(RSVP.opportunity_id)
            .all()
        )
        return {opportunity_id: count for opportunity_id, count in rows}

    def serialize(
        self, opportunity: Opportunity, confirmed_count: Optional[int] = None
    ) -> Dict[str, Any]:
        if confirmed_count is None:
            confirmed_count = self.confirmed_count(opportunity.id)

        return {
            "id": opportunity.id,
            "title": opportunity.title,
            "description": opportunity.description,
            "location": opportunity.location,
            "start_date": opportunity.start_date,
            "end_date": opportunity.end_date,
            "status": opportunity.status,
            "max_volunteers": opportunity.max_volunteers,
            "created_by": opportunity.created_by,
            "is_recurring": opportunity.is_recurring,
            "recurrence_pattern": opportunity.recurrence_pattern,
            "rsvp_count": confirmed_count,
            "spots_remaining": capacity.spots_remaining(opportunity, confirmed_count),
            "is_full": capacity.is_full(opportunity, confirmed_count),
            "required_skills": [
                {"skill_id": s.id, "skill_name": s.name}
                for s in opportunity.required_skills
            ],
            "interests": [
                {"interest_id": i.id, "interest_name": i.name}
                for i in opportunity.interests
            ],
            "created_at": opportunity.created_at,
            "updated_at": opportunity.updated_at,
        }

    # === HELPER METHODS ===
    def _search_clause(self, search: str):
        pattern = f"%{search}%"
        return or_(
            Opportunity.title.ilike(pattern),
            Opportunity.description.ilike(pattern),
            Opportunity.location.ilike(pattern),
        )

    def _check_duplicates(self, drafts: List[OpportunityDraft]) -> None:
        for draft in drafts:
            existing = (
                self.db.query(Opportunity.id)
                .filter(
                    and_(
                        Opportunity.title == draft.title,
                        Opportunity.start_date == draft.start_date,
                    )
                )
                .first()
            )
            if existing:
                raise OpportunityConflictError(
                    f'An opportunity named "{draft.title}" already exists at that start time'
                )

    def _require_skills(self, skill_ids: set) -> None:
        if not skill_ids:
            return
        found = {
            row.id for row in self.db.query(Skill.id).filter(Skill.id.in_(skill_ids))
        }
        missing = skill_ids - found
        if missing:
            raise TagNotFoundError(f"Skills not found: {sorted(missing)}")

    def _require_interests(self, interest_ids: set) -> None:
        if not interest_ids:
            return
        found = {
            row.id
            for row in self.db.query(Interest.id).filter(Interest.id.in_(interest_ids))
        }
        missing = interest_ids - found
        if missing:
            raise TagNotFoundError(f"Interests not found: {sorted(missing)}")
