from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from volunteerhub.database import Base, configure_sqlite, get_db
from volunteerhub.dependencies import get_current_user
from volunteerhub.main import app
from volunteerhub.models import User
from volunteerhub.models.enums import UserRole
from volunteerhub.services.opportunity_service import OpportunityService
from volunteerhub.services.recurrence_service import OpportunityDraft


@pytest.fixture
def engine():
    engine = configure_sqlite(
        create_engine(
            "sqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    )

    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    yield session
    session.close()


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make_user(role=UserRole.VOLUNTEER, first_name="Vol"):
        counter["n"] += 1
        user = User(
            supabase_id=f"sb-{counter['n']}",
            email=f"user{counter['n']}@example.org",
            first_name=first_name,
            last_name=str(counter["n"]),
            role=UserRole(role).value,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def staff(make_user):
    return make_user(UserRole.STAFF, first_name="Staff")


@pytest.fixture
def volunteer(make_user):
    return make_user()


@pytest.fixture
def make_opportunity(db, staff):
    counter = {"n": 0}

    def _make_opportunity(start=None, hours=2, **overrides):
        counter["n"] += 1
        start = start or datetime.utcnow().replace(microsecond=0) + timedelta(days=7)
        values = dict(
            title=f"Food bank shift {counter['n']}",
            start_date=start,
            end_date=start + timedelta(hours=hours),
            created_by=staff.id,
            location="Community hall",
        )
        values.update(overrides)
        return OpportunityService(db).create_batch([OpportunityDraft(**values)])[0]

    return _make_opportunity


class CurrentUser:
    user = None


@pytest.fixture
def current_user():
    return CurrentUser()


@pytest.fixture
def client(db, current_user):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user] = lambda: current_user.user

    # No context manager: startup would create tables on the configured database
    yield TestClient(app)

    app.dependency_overrides.clear()
