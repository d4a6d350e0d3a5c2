from datetime import datetime, timedelta
import threading

import pytest
from sqlalchemy.orm import sessionmaker

from volunteerhub.database import Base, create_db_engine
from volunteerhub.models import RSVP, User
from volunteerhub.models.enums import UserRole
from volunteerhub.services.recurrence_service import OpportunityDraft
from volunteerhub.services.opportunity_service import (
    OpportunityNotFoundError,
    OpportunityService,
)
from volunteerhub.services.rsvp_service import (
    OpportunityFullError,
    OpportunityInPastError,
    OpportunityNotOpenError,
    RSVPNotFoundError,
    RSVPService,
    RSVPStateError,
    VolunteerNotFoundError,
)


@pytest.fixture
def service(db):
    return RSVPService(db)


def spots(db, opportunity_id):
    return OpportunityService(db).get_with_spots(opportunity_id)["spots_remaining"]


class TestSignup:
    def test_signup_confirms(self, db, service, volunteer, make_opportunity):
        opportunity = make_opportunity(max_volunteers=3)

        rsvp = service.signup(volunteer.id, opportunity.id)

        assert rsvp.status == "confirmed"
        assert rsvp.rsvp_at is not None
        assert spots(db, opportunity.id) == 2

    def test_capacity_is_never_exceeded(self, db, service, make_user, make_opportunity):
        opportunity = make_opportunity(max_volunteers=5)
        volunteers = [make_user() for _ in range(7)]

        accepted, rejected = 0, 0
        for v in volunteers:
            try:
                service.signup(v.id, opportunity.id)
                accepted += 1
            except OpportunityFullError:
                rejected += 1

        assert (accepted, rejected) == (5, 2)
        assert spots(db, opportunity.id) == 0
        assert service.opportunities.confirmed_count(opportunity.id) == 5

        db.refresh(opportunity)
        assert opportunity.status == "full"

    def test_signup_again_keeps_one_row(self, db, service, volunteer, make_opportunity):
        opportunity = make_opportunity(max_volunteers=1)

        service.signup(volunteer.id, opportunity.id)
        # Still allowed when full: the volunteer already holds the slot
        service.signup(volunteer.id, opportunity.id)

        rows = db.query(RSVP).filter_by(opportunity_id=opportunity.id).all()
        assert len(rows) == 1
        assert rows[0].status == "confirmed"
        assert spots(db, opportunity.id) == 0

    def test_unlimited_opportunity(self, db, service, make_user, make_opportunity):
        opportunity = make_opportunity(max_volunteers=None)

        for _ in range(10):
            service.signup(make_user().id, opportunity.id)

        assert spots(db, opportunity.id) is None
        db.refresh(opportunity)
        assert opportunity.status == "open"

    def test_declined_volunteer_cannot_rejoin_when_full(
        self, service, make_user, make_opportunity
    ):
        opportunity = make_opportunity(max_volunteers=1)
        first, second = make_user(), make_user()

        service.signup(first.id, opportunity.id)
        service.cancel(first.id, opportunity.id)
        service.signup(second.id, opportunity.id)

        with pytest.raises(OpportunityFullError):
            service.signup(first.id, opportunity.id)

    def test_unknown_opportunity(self, service, volunteer):
        with pytest.raises(OpportunityNotFoundError):
            service.signup(volunteer.id, 9999)

    def test_unknown_volunteer(self, service, make_opportunity):
        opportunity = make_opportunity()

        with pytest.raises(VolunteerNotFoundError):
            service.signup(9999, opportunity.id)

    def test_past_opportunity(self, service, volunteer, make_opportunity):
        opportunity = make_opportunity(start=datetime.utcnow() - timedelta(days=1))

        with pytest.raises(OpportunityInPastError):
            service.signup(volunteer.id, opportunity.id)

    @pytest.mark.parametrize("status", ["canceled", "completed"])
    def test_closed_opportunity(self, db, service, volunteer, make_opportunity, status):
        opportunity = make_opportunity()
        OpportunityService(db).update(opportunity.id, {"status": status})

        with pytest.raises(OpportunityNotOpenError):
            service.signup(volunteer.id, opportunity.id)


class TestCancel:
    def test_cancel_frees_a_slot(self, db, service, make_user, make_opportunity):
        opportunity = make_opportunity(max_volunteers=2)
        first, second = make_user(), make_user()
        service.signup(first.id, opportunity.id)
        service.signup(second.id, opportunity.id)
        db.refresh(opportunity)
        assert opportunity.status == "full"

        service.cancel(first.id, opportunity.id)

        assert spots(db, opportunity.id) == 1
        db.refresh(opportunity)
        assert opportunity.status == "open"

        rsvp = db.query(RSVP).filter_by(volunteer_id=first.id).one()
        assert rsvp.status == "declined"

    def test_cancel_without_rsvp(self, service, volunteer, make_opportunity):
        opportunity = make_opportunity()

        with pytest.raises(RSVPNotFoundError):
            service.cancel(volunteer.id, opportunity.id)

    def test_cancel_unknown_opportunity(self, service, volunteer):
        with pytest.raises(OpportunityNotFoundError):
            service.cancel(volunteer.id, 9999)

    def test_cancel_after_attendance_recorded(self, service, volunteer, make_opportunity):
        opportunity = make_opportunity()
        service.signup(volunteer.id, opportunity.id)
        service.mark_attendance(volunteer.id, opportunity.id, "attended")

        with pytest.raises(RSVPStateError):
            service.cancel(volunteer.id, opportunity.id)


class TestMarkAttendance:
    def test_attended_still_holds_the_slot(self, db, service, volunteer, make_opportunity):
        opportunity = make_opportunity(max_volunteers=2)
        service.signup(volunteer.id, opportunity.id)

        rsvp = service.mark_attendance(
            volunteer.id, opportunity.id, "attended", notes="Stayed late"
        )

        assert rsvp.status == "attended"
        assert rsvp.notes == "Stayed late"
        assert spots(db, opportunity.id) == 1

    def test_no_show_frees_the_slot(self, db, service, volunteer, make_opportunity):
        opportunity = make_opportunity(max_volunteers=1)
        service.signup(volunteer.id, opportunity.id)

        service.mark_attendance(volunteer.id, opportunity.id, "no_show")

        assert spots(db, opportunity.id) == 1

    def test_creates_missing_rsvp(self, db, service, volunteer, make_opportunity):
        opportunity = make_opportunity()

        service.mark_attendance(volunteer.id, opportunity.id, "attended")

        assert db.query(RSVP).filter_by(volunteer_id=volunteer.id).one().status == "attended"

    def test_respects_capacity(self, service, make_user, make_opportunity):
        opportunity = make_opportunity(max_volunteers=1)
        service.signup(make_user().id, opportunity.id)

        with pytest.raises(OpportunityFullError):
            service.mark_attendance(make_user().id, opportunity.id, "confirmed")


class TestListing:
    def test_list_by_volunteer(self, service, volunteer, make_opportunity):
        now = datetime.utcnow()
        later = make_opportunity(start=now + timedelta(days=10))
        sooner = make_opportunity(start=now + timedelta(days=2))
        past = make_opportunity(start=now - timedelta(days=5))

        service.signup(volunteer.id, later.id)
        service.signup(volunteer.id, sooner.id)
        service.mark_attendance(volunteer.id, past.id, "attended")

        result = service.list_by_volunteer(volunteer.id)

        assert [r.opportunity_id for r in result["upcoming"]] == [sooner.id, later.id]
        assert [r.opportunity_id for r in result["all"]] == [
            later.id,
            sooner.id,
            past.id,
        ]

    def test_list_by_opportunity(self, service, make_user, make_opportunity):
        opportunity = make_opportunity()
        first, second = make_user(), make_user()
        service.signup(first.id, opportunity.id)
        service.signup(second.id, opportunity.id)

        rsvps = service.list_by_opportunity(opportunity.id)

        assert {r.volunteer_id for r in rsvps} == {first.id, second.id}

    def test_list_by_unknown_opportunity(self, service):
        with pytest.raises(OpportunityNotFoundError):
            service.list_by_opportunity(9999)

    def test_serialize_includes_opportunity(self, service, volunteer, make_opportunity):
        opportunity = make_opportunity()
        rsvp = service.signup(volunteer.id, opportunity.id)

        data = RSVPService.serialize(rsvp, include_opportunity=True)

        assert data["volunteer_name"] == volunteer.name
        assert data["opportunity"]["title"] == opportunity.title

    def test_list_attendees(self, db, service, make_user, make_opportunity):
        opportunity = make_opportunity()
        going = make_user(first_name="Ana")
        pending = make_user(first_name="Ben")
        left = make_user(first_name="Cy")
        service.signup(going.id, opportunity.id)
        service.mark_attendance(pending.id, opportunity.id, "pending")
        service.signup(left.id, opportunity.id)
        service.cancel(left.id, opportunity.id)

        attendees = service.list_attendees(opportunity.id)

        assert [a.first_name for a in attendees] == ["Ana", "Ben"]

    def test_list_attendees_unknown_opportunity(self, service):
        with pytest.raises(OpportunityNotFoundError):
            service.list_attendees(9999)


class TestConcurrentSignup:
    @pytest.fixture
    def Session(self, tmp_path):
        engine = create_db_engine(f"sqlite:///{tmp_path / 'signups.db'}")
        Base.metadata.create_all(bind=engine)
        yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
        engine.dispose()

    @pytest.fixture
    def last_spot(self, Session):
        """An opportunity with one spot and two volunteers who want it"""
        session = Session()
        users = [
            User(
                supabase_id=f"sb-{i}",
                email=f"race{i}@example.org",
                first_name="Racer",
                last_name=str(i),
                role=role.value,
            )
            for i, role in enumerate(
                [UserRole.STAFF, UserRole.VOLUNTEER, UserRole.VOLUNTEER]
            )
        ]
        session.add_all(users)
        session.commit()

        start = datetime.utcnow() + timedelta(days=1)
        opportunity = OpportunityService(session).create_batch(
            [
                OpportunityDraft(
                    title="Last spot",
                    start_date=start,
                    end_date=start + timedelta(hours=1),
                    created_by=users[0].id,
                    max_volunteers=1,
                )
            ]
        )[0]

        ids = opportunity.id, [users[1].id, users[2].id]
        session.close()
        return ids

    def test_two_signups_for_last_spot(self, Session, last_spot, monkeypatch):
        opportunity_id, volunteer_ids = last_spot
        barrier = threading.Barrier(2)
        count_slots = RSVPService._confirmed_count

        def count_then_wait(self, opportunity_id):
            count = count_slots(self, opportunity_id)
            # Both signups meet here unless the first one blocks the second
            try:
                barrier.wait(timeout=1)
            except threading.BrokenBarrierError:
                pass
            return count

        monkeypatch.setattr(RSVPService, "_confirmed_count", count_then_wait)

        outcomes = []

        def sign_up(volunteer_id):
            session = Session()
            try:
                RSVPService(session).signup(volunteer_id, opportunity_id)
                outcomes.append("confirmed")
            except OpportunityFullError:
                outcomes.append("full")
            except Exception as e:
                outcomes.append(type(e).__name__)
            finally:
                session.close()

        threads = [threading.Thread(target=sign_up, args=(v,)) for v in volunteer_ids]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=30)

        assert sorted(outcomes) == ["confirmed", "full"]

        session = Session()
        try:
            confirmed = (
                session.query(RSVP)
                .filter_by(opportunity_id=opportunity_id, status="confirmed")
                .count()
            )
        finally:
            session.close()
        assert confirmed == 1
