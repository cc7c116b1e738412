import os
import tempfile
import uuid
from datetime import date

# Point the app at a throwaway SQLite file before anything imports settings
_TMP_DIR = tempfile.mkdtemp(prefix="facultrack-tests-")
os.environ["FACULTRACK_DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'test.db')}"
os.environ["FACULTRACK_SCHEDULER_ENABLED"] = "false"
os.environ["FACULTRACK_NOTIFICATION_RETRY_BACKOFF_SECONDS"] = "0"
os.environ.pop("FACULTRACK_NOTIFICATION_URL", None)
os.environ.pop("FACULTRACK_SCHEDULER_TOKEN", None)

import pytest

from facultrack import models  # noqa: F401
from facultrack.core.database import Base, SessionLocal, engine
from facultrack.models import AchievementCategory
from facultrack.services import admin_service, department_service, teacher_service
from facultrack.services.authorization_service import Actor, ActorRole

CSE = "cse-2nd-year"
MECH = "non-cse-2nd-year"


@pytest.fixture(scope="function", autouse=True)
def setup_db():
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        department_service.seed_departments(session)
        session.commit()
    finally:
        session.close()
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def make_teacher(db_session):
    """Register a teacher and return its ``Actor``."""

    def _make(department_id=CSE, *, name="Asha Verma", email=None):
        teacher_id = uuid.uuid4()
        teacher_service.register_teacher(
            db_session,
            teacher_id=teacher_id,
            full_name=name,
            email=email or f"{teacher_id.hex[:8]}@faculty.example.edu",
            department_id=department_id,
        )
        db_session.commit()
        return Actor(actor_id=teacher_id, role=ActorRole.TEACHER)

    return _make


@pytest.fixture
def make_admin(db_session):
    """Create an admin holding grants for ``departments`` (or the super flag)."""

    def _make(*departments, super_admin=False):
        admin_id = uuid.uuid4()
        if super_admin:
            admin_service.grant_access(db_session, actor=None, admin_id=admin_id, is_super_admin=True)
        for department_id in departments:
            admin_service.grant_access(db_session, actor=None, admin_id=admin_id, department_id=department_id)
        db_session.commit()
        return Actor(actor_id=admin_id, role=ActorRole.ADMIN)

    return _make


VALID_DETAILS = {
    AchievementCategory.JOURNAL_ARTICLE: {
        "doi": "10.1000/xyz123",
        "journal_name": "Journal of Edge Systems",
        "indexed_in": ["Scopus", "SCIE"],
        "q_ranking": "Q2",
    },
    AchievementCategory.CONFERENCE_PAPER: {
        "conference_name": "ICEC 2025",
        "conference_date": "2025-08-21",
        "indexed_in": ["Scopus"],
        "q_ranking": "Q3",
    },
    AchievementCategory.PATENT: {
        "patent_number": "IN202511012345",
        "patent_office": "Indian Patent Office",
        "patent_status": "Filed",
    },
    AchievementCategory.OTHER: {},
}


@pytest.fixture
def submit(db_session):
    """Create a pending achievement for ``teacher`` and commit it."""

    from facultrack.services import achievement_service

    def _submit(teacher, category=AchievementCategory.CONFERENCE_PAPER, *, title="Edge inference", current_time=None, details=None):
        achievement = achievement_service.create_achievement(
            db_session,
            teacher_id=teacher.actor_id,
            category=category,
            title=title,
            date_achieved=date(2025, 9, 1),
            details=dict(VALID_DETAILS[category]) if details is None else details,
            current_time=current_time,
        )
        db_session.commit()
        return achievement

    return _submit
