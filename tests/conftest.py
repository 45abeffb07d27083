import os
import sys
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("DATABASE_URL", "sqlite:///./test.db")
os.environ.setdefault("LOG_DIR", "logs")

import uuid

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

import main
from app.core.config import settings
from app.core.constants import RoleEnum
from app.core.database import Base, get_db
from app.core.security import get_password_hash
from app.crud.user import user as crud_user
from app.crud.user_role import user_role as crud_user_role
from app.utils import deps as deps_utils

# Register every table with Base.metadata
from app.models import (  # noqa: F401
    user, user_role, course, module, lesson, quiz, question, enrollment,
    lesson_progress, quiz_attempt, question_response, site_setting, token_denylist,
)

test_db_url = settings.TEST_DATABASE_URL or "sqlite:///./test.db"
TEST_PASSWORD = "testpass123"

@pytest.fixture(scope="session")
def database_engine():
    if test_db_url.startswith("sqlite"):
        engine = create_engine(test_db_url, connect_args={"check_same_thread": False})
    else:
        engine = create_engine(test_db_url)
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()
    if test_db_url.startswith("sqlite") and os.path.exists("./test.db"):
        os.remove("./test.db")

@pytest.fixture(scope="function")
def db_session(database_engine):
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=database_engine)
    db = SessionLocal()
    try:
        yield db
    finally:
        db.rollback()
        # Tests commit through the API, so wipe rows instead of relying on a rollback
        for table in reversed(Base.metadata.sorted_tables):
            db.execute(table.delete())
        db.commit()
        db.close()

@pytest.fixture(scope="function")
def client(db_session):
    def _get_db():
        yield db_session

    def _get_transactional_db():
        try:
            yield db_session
            db_session.commit()
        except Exception:
            db_session.rollback()
            raise

    main.app.dependency_overrides[get_db] = _get_db
    main.app.dependency_overrides[deps_utils.get_db] = _get_db
    main.app.dependency_overrides[deps_utils.get_transactional_db] = _get_transactional_db
    with TestClient(main.app) as test_client:
        yield test_client
    main.app.dependency_overrides.clear()

@pytest.fixture
def user_factory(db_session):
    """Create an active user with the given role directly in the database."""
    def _user_factory(role: RoleEnum = RoleEnum.STUDENT, email: str = None, password: str = TEST_PASSWORD, **profile):
        email = email or f"{role.value}-{uuid.uuid4().hex[:8]}@test.com"
        user_data = {
            "full_name": profile.pop("full_name", f"Test {role.value.title()}"),
            "email": email,
            "hashed_password": get_password_hash(password),
            "is_active": profile.pop("is_active", True),
            **profile,
        }
        new_user = crud_user.create(db_session, obj_in=user_data)
        crud_user_role.set_role(db_session, user_id=new_user.id, role=role)
        db_session.refresh(new_user)
        return new_user
    return _user_factory

@pytest.fixture
def login(client):
    def _login(email: str, password: str = TEST_PASSWORD) -> str:
        response = client.post("/auth/login", json={"email": email, "password": password})
        body = response.json()
        token = (body.get("data") or {}).get("token", {}).get("access_token")
        assert token, f"Login failed or token missing: {body}"
        return token
    return _login

@pytest.fixture
def token_for_role(user_factory, login):
    """Create a user of the given role and return (user, auth headers)."""
    def _create_token_for_role(role: RoleEnum, **profile):
        new_user = user_factory(role=role, **profile)
        token = login(new_user.email)
        return new_user, {"Authorization": f"Bearer {token}"}
    return _create_token_for_role

@pytest.fixture
def admin(token_for_role):
    return token_for_role(RoleEnum.ADMIN)

@pytest.fixture
def faculty(token_for_role):
    return token_for_role(RoleEnum.FACULTY, faculty_id="FAC-001")

@pytest.fixture
def student(token_for_role):
    return token_for_role(RoleEnum.STUDENT, regno="REG-001", year="1st Year", section="A", dept="CSE")

@pytest.fixture
def admin_headers(admin):
    return admin[1]

@pytest.fixture
def faculty_headers(faculty):
    return faculty[1]

@pytest.fixture
def student_headers(student):
    return student[1]
