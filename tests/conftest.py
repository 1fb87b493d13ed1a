import pytest
from datetime import datetime
from typing import Generator
from uuid import uuid4

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

import clinic_scheduler.models  # noqa: F401
from clinic_scheduler.main import app
from clinic_scheduler.infrastructure.database import get_db, Base, enable_sqlite_foreign_keys
from clinic_scheduler.core.security import create_access_token, get_password_hash
from clinic_scheduler.domain.appointments.models import Appointment, AppointmentStatus
from clinic_scheduler.domain.users.models import User, UserRole
from clinic_scheduler.domain.workplaces.models import Workplace


# In-memory database shared by every connection of the test engine
test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
enable_sqlite_foreign_keys(test_engine)

TestSessionLocal = sessionmaker(
    bind=test_engine, autocommit=False, autoflush=False, expire_on_commit=False
)

TEST_PASSWORD = "password123"


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """Create a fresh database for each test."""
    Base.metadata.create_all(bind=test_engine)
    session = TestSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """Create a test client with database dependency override."""

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def make_user(db_session: Session):
    """Factory for users of any role."""

    def _make_user(
        role: UserRole = UserRole.PATIENT,
        first_name: str = "Test",
        last_name: str = "User",
        email: str = None,
        is_active: bool = True
    ) -> User:
        user = User(
            email=email or f"{role.value}-{uuid4().hex[:8]}@clinic.com",
            password_hash=get_password_hash(TEST_PASSWORD),
            first_name=first_name,
            last_name=last_name,
            role=role,
            is_active=is_active
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture(scope="function")
def patient(make_user) -> User:
    return make_user(UserRole.PATIENT, "John", "Doe", email="john.doe@clinic.com")


@pytest.fixture(scope="function")
def other_patient(make_user) -> User:
    return make_user(UserRole.PATIENT, "Mary", "Major")


@pytest.fixture(scope="function")
def doctor(make_user) -> User:
    return make_user(UserRole.DOCTOR, "Gregory", "House", email="house@clinic.com")


@pytest.fixture(scope="function")
def other_doctor(make_user) -> User:
    return make_user(UserRole.DOCTOR, "Lisa", "Cuddy")


@pytest.fixture(scope="function")
def admin(make_user) -> User:
    return make_user(UserRole.ADMIN, "Ada", "Admin", email="admin@clinic.com")


@pytest.fixture(scope="function")
def workplace(db_session: Session) -> Workplace:
    room = Workplace(name="Cabinet 101", type="cabinet", location="First floor")
    db_session.add(room)
    db_session.commit()
    db_session.refresh(room)
    return room


@pytest.fixture(scope="function")
def make_appointment(db_session: Session):
    """Insert an appointment directly, bypassing the service checks."""

    def _make_appointment(
        patient: User,
        doctor: User,
        start_time: datetime,
        end_time: datetime,
        status: AppointmentStatus = AppointmentStatus.SCHEDULED
    ) -> Appointment:
        appointment = Appointment(
            patient_id=patient.id,
            doctor_id=doctor.id,
            start_time=start_time,
            end_time=end_time,
            status=status
        )
        db_session.add(appointment)
        db_session.commit()
        db_session.refresh(appointment)
        return appointment

    return _make_appointment


@pytest.fixture(scope="function")
def auth_headers():
    """Build bearer headers for a user."""

    def _auth_headers(user: User) -> dict:
        return {"Authorization": f"Bearer {create_access_token(str(user.id))}"}

    return _auth_headers
