from datetime import date

import pytest

from facultrack.core.errors import ConflictError, NotFoundError, ValidationError
from facultrack.models import AchievementCategory, AchievementStatus
from facultrack.services import achievement_service, review_service
from tests.conftest import CSE, MECH


def test_create_starts_pending(db_session, make_teacher, submit):
    teacher = make_teacher()
    achievement = submit(teacher)

    assert achievement.status is AchievementStatus.PENDING
    assert achievement.rejection_reason is None
    assert achievement.points_awarded is None
    assert achievement.version == 1
    assert achievement.details["conference_name"] == "ICEC 2025"


def test_create_requires_title(db_session, make_teacher):
    teacher = make_teacher()
    with pytest.raises(ValidationError) as excinfo:
        achievement_service.create_achievement(
            db_session,
            teacher_id=teacher.actor_id,
            category=AchievementCategory.OTHER,
            title="   ",
            date_achieved=date(2025, 1, 1),
        )
    assert excinfo.value.field == "title"


def test_create_for_unknown_teacher(db_session):
    import uuid

    with pytest.raises(NotFoundError):
        achievement_service.create_achievement(
            db_session,
            teacher_id=uuid.uuid4(),
            category=AchievementCategory.OTHER,
            title="Talk",
            date_achieved="2025-01-01",
        )


def test_list_by_teacher_and_department(db_session, make_teacher, submit):
    cse_teacher = make_teacher(CSE)
    other_teacher = make_teacher(MECH)
    first = submit(cse_teacher, title="First")
    submit(other_teacher, title="Elsewhere")

    mine = achievement_service.list_by_teacher(db_session, teacher_id=cse_teacher.actor_id)
    assert [a.achievement_id for a in mine] == [first.achievement_id]

    pending_cse = achievement_service.list_by_department(
        db_session, department_id=CSE, status=AchievementStatus.PENDING
    )
    assert [a.title for a in pending_cse] == ["First"]
    assert achievement_service.list_by_department(db_session, department_id=CSE, status=AchievementStatus.APPROVED) == []


def test_update_pending_keeps_status(db_session, make_teacher, submit):
    teacher = make_teacher()
    achievement = submit(teacher)

    updated = achievement_service.update_achievement(
        db_session,
        achievement_id=achievement.achievement_id,
        changes={"title": "Edge inference, revised", "remarks": "camera-ready"},
    )
    db_session.commit()

    assert updated.title == "Edge inference, revised"
    assert updated.remarks == "camera-ready"
    assert updated.status is AchievementStatus.PENDING
    assert updated.version == 2


def test_update_cannot_change_category(db_session, make_teacher, submit):
    teacher = make_teacher()
    achievement = submit(teacher)

    with pytest.raises(ValidationError) as excinfo:
        achievement_service.update_achievement(
            db_session,
            achievement_id=achievement.achievement_id,
            changes={"category": AchievementCategory.PATENT},
        )
    assert excinfo.value.field == "category"


def test_update_revalidates_details(db_session, make_teacher, submit):
    teacher = make_teacher()
    achievement = submit(teacher)

    with pytest.raises(ValidationError) as excinfo:
        achievement_service.update_achievement(
            db_session,
            achievement_id=achievement.achievement_id,
            changes={"details": {"conference_name": "ICEC"}},
        )
    assert excinfo.value.field == "conference_date"


def test_editing_rejected_record_resubmits(db_session, make_teacher, make_admin, submit):
    teacher = make_teacher()
    admin = make_admin(CSE)
    achievement = submit(teacher)
    review_service.reject_achievement(
        db_session, actor=admin, achievement_id=achievement.achievement_id, reason="missing proceedings"
    )
    db_session.commit()

    updated = achievement_service.update_achievement(
        db_session,
        achievement_id=achievement.achievement_id,
        changes={"document_url": "https://storage.example.edu/proofs/p.pdf"},
    )
    db_session.commit()

    assert updated.status is AchievementStatus.PENDING
    assert updated.rejection_reason is None
    assert updated.document_url == "https://storage.example.edu/proofs/p.pdf"


def test_approved_record_is_frozen(db_session, make_teacher, make_admin, submit):
    teacher = make_teacher()
    admin = make_admin(CSE)
    achievement = submit(teacher)
    review_service.approve_achievement(db_session, actor=admin, achievement_id=achievement.achievement_id, points=5)
    db_session.commit()

    with pytest.raises(ConflictError):
        achievement_service.update_achievement(
            db_session, achievement_id=achievement.achievement_id, changes={"title": "Changed"}
        )


def test_delete_only_when_status_matches(db_session, make_teacher, submit):
    teacher = make_teacher()
    achievement = submit(teacher)

    assert achievement_service.delete_achievement(db_session, achievement.achievement_id) is False
    assert (
        achievement_service.delete_achievement(
            db_session, achievement.achievement_id, expected_status=AchievementStatus.PENDING
        )
        is True
    )
