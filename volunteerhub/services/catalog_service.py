from sqlalchemy.orm import Session
from typing import List, Optional, Tuple
import logging

from ..models.enums import ProficiencyLevel
from ..models.skill import Skill, Interest, VolunteerSkill, VolunteerInterest
from ..models.user import User
from ..models.opportunity import OpportunityRequiredSkill, OpportunityInterest

logger = logging.getLogger(__name__)


class CatalogServiceError(Exception):
    """Base exception for skill/interest catalog errors"""

    pass


class CatalogEntryNotFoundError(CatalogServiceError):
    pass


class CatalogConflictError(CatalogServiceError):
    """Name already taken"""

    pass


class CatalogService:
    """Skills volunteers can have and interests opportunities can target"""

    def __init__(self, db: Session):
        self.db = db

    # === SKILLS ===
    def list_skills(self) -> List[Skill]:
        return self.db.query(Skill).order_by(Skill.name).all()

    def get_skill(self, skill_id: int) -> Skill:
        skill = self.db.query(Skill).filter(Skill.id == skill_id).first()
        if not skill:
            raise CatalogEntryNotFoundError("Skill not found")
        return skill

    def create_skill(
        self, name: str, description: Optional[str] = None, category: Optional[str] = None
    ) -> Skill:
        if self.db.query(Skill).filter(Skill.name == name).first():
            raise CatalogConflictError("A skill with this name already exists")

        try:
            skill = Skill(name=name, description=description, category=category)
            self.db.add(skill)
            self.db.commit()
            self.db.refresh(skill)
            return skill
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create skill: {str(e)}")
            raise CatalogServiceError("Failed to create skill")

    def delete_skill(self, skill_id: int) -> None:
        self.get_skill(skill_id)

        try:
            self.db.query(OpportunityRequiredSkill).filter(
                OpportunityRequiredSkill.skill_id == skill_id
            ).delete(synchronize_session=False)
            self.db.query(VolunteerSkill).filter(
                VolunteerSkill.skill_id == skill_id
            ).delete(synchronize_session=False)
            self.db.query(Skill).filter(Skill.id == skill_id).delete(
                synchronize_session=False
            )
            self.db.commit()
            self.db.expire_all()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to delete skill: {str(e)}")
            raise CatalogServiceError("Failed to delete skill")

    # === INTERESTS ===
    def list_interests(self) -> List[Interest]:
        return self.db.query(Interest).order_by(Interest.name).all()

    def get_interest(self, interest_id: int) -> Interest:
        interest = self.db.query(Interest).filter(Interest.id == interest_id).first()
        if not interest:
            raise CatalogEntryNotFoundError("Interest not found")
        return interest

    def create_interest(self, name: str, description: Optional[str] = None) -> Interest:
        if self.db.query(Interest).filter(Interest.name == name).first():
            raise CatalogConflictError("An interest with this name already exists")

        try:
            interest = Interest(name=name, description=description)
            self.db.add(interest)
            self.db.commit()
            self.db.refresh(interest)
            return interest
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create interest: {str(e)}")
            raise CatalogServiceError("Failed to create interest")

    def delete_interest(self, interest_id: int) -> None:
        self.get_interest(interest_id)

        try:
            self.db.query(OpportunityInterest).filter(
                OpportunityInterest.interest_id == interest_id
            ).delete(synchronize_session=False)
            self.db.query(VolunteerInterest).filter(
                VolunteerInterest.interest_id == interest_id
            ).delete(synchronize_session=False)
            self.db.query(Interest).filter(Interest.id == interest_id).delete(
                synchronize_session=False
            )
            self.db.commit()
            self.db.expire_all()
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to delete interest: {str(e)}")
            raise CatalogServiceError("Failed to delete interest")

    # === VOLUNTEER PROFILES ===
    def get_volunteer_skills(self, volunteer_id: int) -> List[VolunteerSkill]:
        self._require_volunteer(volunteer_id)
        return (
            self.db.query(VolunteerSkill)
            .join(Skill, VolunteerSkill.skill_id == Skill.id)
            .filter(VolunteerSkill.volunteer_id == volunteer_id)
            .order_by(Skill.name)
            .all()
        )

    def assign_skill(
        self, volunteer_id: int, skill_id: int, level: ProficiencyLevel
    ) -> Tuple[VolunteerSkill, bool]:
        """Give a volunteer a skill, or change the level of one they have.

        Returns the assignment and whether it was newly created.
        """

        level = ProficiencyLevel(level).value
        self._require_volunteer(volunteer_id)
        self.get_skill(skill_id)

        assignment = (
            self.db.query(VolunteerSkill)
            .filter_by(volunteer_id=volunteer_id, skill_id=skill_id)
            .first()
        )
        created = assignment is None

        try:
            if created:
                assignment = VolunteerSkill(
                    volunteer_id=volunteer_id, skill_id=skill_id, level=level
                )
                self.db.add(assignment)
            else:
                assignment.level = level

            self.db.commit()
            self.db.refresh(assignment)
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to assign skill: {str(e)}")
            raise CatalogServiceError("Failed to assign skill")

        return assignment, created

    def remove_volunteer_skill(self, volunteer_id: int, skill_id: int) -> None:
        self._require_volunteer(volunteer_id)

        deleted = (
            self.db.query(VolunteerSkill)
            .filter_by(volunteer_id=volunteer_id, skill_id=skill_id)
            .delete(synchronize_session=False)
        )
        if not deleted:
            self.db.rollback()
            raise CatalogEntryNotFoundError("Skill assignment not found")
        self.db.commit()

    def get_volunteer_interests(self, volunteer_id: int) -> List[VolunteerInterest]:
        self._require_volunteer(volunteer_id)
        return (
            self.db.query(VolunteerInterest)
            .join(Interest, VolunteerInterest.interest_id == Interest.id)
            .filter(VolunteerInterest.volunteer_id == volunteer_id)
            .order_by(Interest.name)
            .all()
        )

    def assign_interest(self, volunteer_id: int, interest_id: int) -> VolunteerInterest:
        self._require_volunteer(volunteer_id)
        self.get_interest(interest_id)

        exists = (
            self.db.query(VolunteerInterest)
            .filter_by(volunteer_id=volunteer_id, interest_id=interest_id)
            .first()
        )
        if exists:
            raise CatalogConflictError("Interest is already assigned to this volunteer")

        try:
            assignment = VolunteerInterest(
                volunteer_id=volunteer_id, interest_id=interest_id
            )
            self.db.add(assignment)
            self.db.commit()
            self.db.refresh(assignment)
            return assignment
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to assign interest: {str(e)}")
            raise CatalogServiceError("Failed to assign interest")

    def remove_volunteer_interest(self, volunteer_id: int, interest_id: int) -> None:
        self._require_volunteer(volunteer_id)

        deleted = (
            self.db.query(VolunteerInterest)
            .filter_by(volunteer_id=volunteer_id, interest_id=interest_id)
            .delete(synchronize_session=False)
        )
        if not deleted:
            self.db.rollback()
            raise CatalogEntryNotFoundError("Interest assignment not found")
        self.db.commit()

    @staticmethod
    def serialize_volunteer_skill(assignment: VolunteerSkill) -> dict:
        return {
            "skill_id": assignment.skill_id,
            "skill_name": assignment.skill.name,
            "skill_description": assignment.skill.description,
            "skill_category": assignment.skill.category,
            "level": assignment.level,
        }

    @staticmethod
    def serialize_volunteer_interest(assignment: VolunteerInterest) -> dict:
        return {
            "interest_id": assignment.interest_id,
            "interest_name": assignment.interest.name,
            "interest_description": assignment.interest.description,
        }

    def _require_volunteer(self, volunteer_id: int) -> User:
        volunteer = self.db.query(User).filter(User.id == volunteer_id).first()
        if not volunteer:
            raise CatalogEntryNotFoundError("Volunteer not found")
        return volunteer
