"""
Shared test setup: in-memory database, dependency override and user helpers
"""

import os

# Must be set before the application modules read their configuration
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SECRET_KEY"] = "test-secret-key"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from order_tracker.database import Base, get_db
from order_tracker.auth.auth_handler import auth_handler
from order_tracker.models.user import User
from order_tracker.utils.enums import Role
from main import app

SQLALCHEMY_DATABASE_URL = "sqlite://"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

def override_get_db():
    try:
        db = TestingSessionLocal()
        yield db
    finally:
        db.close()

app.dependency_overrides[get_db] = override_get_db

TEST_PASSWORD = "TestPass123!"

@pytest.fixture(autouse=True)
def setup_database():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)

@pytest.fixture
def db_session(setup_database):
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()

@pytest.fixture
def client():
    return TestClient(app)

@pytest.fixture
def make_user(db_session):
    """Factory creating a persisted user with the given role"""
    counter = {"n": 0}

    def _make_user(role: Role = Role.CUSTOMER, email: str = None) -> User:
        counter["n"] += 1
        user = User(
            email=email or f"{role.value}{counter['n']}@example.com",
            full_name=f"Test {role.value.replace('_', ' ').title()}",
            phone="+250788000000",
            role=role.value,
            hashed_password=auth_handler.get_password_hash(TEST_PASSWORD),
            is_active=True,
            is_verified=True,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user

def _auth_headers(user: User) -> dict:
    token = auth_handler.create_access_token({"sub": user.id, "role": user.role, "email": user.email})
    return {"Authorization": f"Bearer {token}"}

@pytest.fixture
def auth_headers():
    """Bearer header for a user, as issued by the login endpoint"""
    return _auth_headers

@pytest.fixture
def customer(make_user):
    return make_user(Role.CUSTOMER)

@pytest.fixture
def processor(make_user):
    return make_user(Role.ORDER_PROCESSOR)

@pytest.fixture
def admin(make_user):
    return make_user(Role.ADMIN)
