import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
os.environ.setdefault("TESTING", "true")

import pytest
from datetime import datetime
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

import examcore.models.base  # noqa: F401
from examcore.core.clock import ManualClock
from examcore.core.config import settings
from examcore.core.constants import QuestionTypeEnum, RoleLevelEnum
from examcore.core.database import Base, enable_sqlite_savepoints
from examcore.core.locks import KeyedLock
from examcore.models.question import Question, QuestionOption
from examcore.models.role import Role
from examcore.models.survey import Survey, SurveySection, SurveyAssignment
from examcore.models.user import User
from examcore.schemas.test_session import SessionSettings
from examcore.services.certificate import CertificateService
from examcore.services.hierarchy import RoleHierarchyResolver
from examcore.services.test_session import TestSessionService
from examcore.utils import deps as deps_utils


@pytest.fixture(scope="function")
def database_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_savepoints(engine)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()

@pytest.fixture(scope="function")
def db_session(database_engine):
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=database_engine)
    db = SessionLocal()
    try:
        yield db
    finally:
        db.rollback()
        db.close()

@pytest.fixture
def clock():
    return ManualClock(datetime(2025, 3, 3, 9, 0, 0))

@pytest.fixture
def session_settings():
    return SessionSettings()

@pytest.fixture
def certificate_service(clock):
    return CertificateService(clock=clock)

@pytest.fixture
def session_service(clock, certificate_service, session_settings):
    return TestSessionService(
        clock=clock,
        certificates=certificate_service,
        locks=KeyedLock(),
        session_settings=session_settings,
    )

@pytest.fixture
def resolver():
    return RoleHierarchyResolver(ttl_seconds=0, max_depth=16, supervisor_max_level=4)

@pytest.fixture(scope="function")
def client(db_session, session_service, certificate_service, resolver):
    import main
    main.app.dependency_overrides[deps_utils.get_db] = lambda: db_session
    main.app.dependency_overrides[deps_utils.get_session_service] = lambda: session_service
    main.app.dependency_overrides[deps_utils.get_certificate_service] = lambda: certificate_service
    main.app.dependency_overrides[deps_utils.get_hierarchy_resolver] = lambda: resolver
    with TestClient(main.app) as test_client:
        yield test_client
    main.app.dependency_overrides.clear()


@pytest.fixture
def make_role(db_session):
    def _make_role(level: RoleLevelEnum) -> Role:
        role = db_session.query(Role).filter(Role.level == int(level)).first()
        if not role:
            role = Role(name=level.name.lower(), level=int(level), is_active=True)
            db_session.add(role)
            db_session.commit()
        return role
    return _make_role

@pytest.fixture
def make_user(db_session, make_role):
    counter = {"n": 0}

    def _make_user(level: RoleLevelEnum = RoleLevelEnum.ENUMERATOR, parent: User = None, **fields) -> User:
        counter["n"] += 1
        role = make_role(level)
        user = User(
            email=f"{level.name.lower()}{counter['n']}@census.org",
            name=f"{level.name.title()} {counter['n']}",
            role_id=role.id,
            parent_id=parent.id if parent else None,
            is_active=True,
            **fields,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user
    return _make_user

@pytest.fixture
def make_survey(db_session):
    """Survey with `sections` sections of `per_section` single-choice questions; option order 1 is correct."""
    def _make_survey(
        sections: int = 3,
        per_section: int = 10,
        duration: int = 35,
        passing_score: int = 70,
        max_attempts: int = 3,
        code: str = "EMP",
        certificate_validity_days: int = 365,
        is_active: bool = True,
    ) -> Survey:
        survey = Survey(
            title=f"{code} readiness test",
            code=code,
            duration=duration,
            total_questions=sections * per_section,
            passing_score=passing_score,
            max_attempts=max_attempts,
            certificate_validity_days=certificate_validity_days,
            is_active=is_active,
        )
        for s in range(sections):
            section = SurveySection(title=f"Section {s + 1}", section_order=s + 1, questions_count=per_section)
            for q in range(per_section):
                question = Question(
                    text=f"Question {s + 1}.{q + 1}",
                    question_type=QuestionTypeEnum.SINGLE_CHOICE,
                    points=1,
                    question_order=q + 1,
                )
                question.options = [
                    QuestionOption(text=f"Option {o + 1}", is_correct=(o == 0), option_order=o + 1)
                    for o in range(4)
                ]
                section.questions.append(question)
            survey.sections.append(section)
        db_session.add(survey)
        db_session.commit()
        db_session.refresh(survey)
        return survey
    return _make_survey

@pytest.fixture
def assign(db_session):
    def _assign(survey: Survey, **target) -> SurveyAssignment:
        assignment = SurveyAssignment(survey_id=survey.id, is_active=True, **target)
        db_session.add(assignment)
        db_session.commit()
        return assignment
    return _assign

@pytest.fixture
def token_for():
    def _token_for(user: User) -> str:
        return jwt.encode(
            {"user_id": user.id, "role_id": user.role_id},
            settings.SECRET_KEY,
            algorithm=settings.TOKEN_ALGORITHM,
        )
    return _token_for

@pytest.fixture
def auth_headers(token_for):
    def _auth_headers(user: User) -> dict:
        return {"Authorization": f"Bearer {token_for(user)}"}
    return _auth_headers

@pytest.fixture
def questions_of():
    def _questions_of(survey: Survey):
        """(question, correct option id, a wrong option id) for every question, in survey order."""
        rows = []
        for section in survey.sections:
            for question in section.questions:
                correct = next(o.id for o in question.options if o.is_correct)
                wrong = next(o.id for o in question.options if not o.is_correct)
                rows.append((question, correct, wrong))
        return rows
    return _questions_of
