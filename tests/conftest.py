import os
import sys
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Set testing environment variables before the app reads its settings
os.environ["TESTING"] = "1"
os.environ["TEST_DATABASE_URL"] = "sqlite:///./test.db"

from app.main import app  # noqa: E402
from app.core.database import Base, SessionLocal, engine  # noqa: E402
from app.core.security import UserRole, create_access_token  # noqa: E402
from app.models.user import User  # noqa: E402


@pytest.fixture(scope="function")
def test_db():
    # Create tables
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db(test_db):
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(test_db):
    with TestClient(app, base_url="http://testserver") as test_client:
        yield test_client


def make_user(db, name, phone_number, role):
    user = User(name=name, phone_number=phone_number, role=role)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def auth_headers(user):
    token = create_access_token(user.id, user.role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def doctor(db):
    return make_user(db, "Dr. Meera Rao", "9000000001", UserRole.DOCTOR)


@pytest.fixture
def other_doctor(db):
    return make_user(db, "Dr. Arjun Das", "9000000002", UserRole.DOCTOR)


@pytest.fixture
def patient(db):
    return make_user(db, "Asha Verma", "9000000011", UserRole.PATIENT)


@pytest.fixture
def second_patient(db):
    return make_user(db, "Ravi Kumar", "9000000012", UserRole.PATIENT)


@pytest.fixture
def third_patient(db):
    return make_user(db, "Nina Shah", "9000000013", UserRole.PATIENT)
