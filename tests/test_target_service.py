import uuid
from datetime import date, datetime, timedelta

import pytest

from facultrack.core.errors import ForbiddenError, ValidationError
from facultrack.services import points_service, target_service
from facultrack.services.target_service import TargetStatus
from tests.conftest import CSE, MECH

NOW = datetime(2025, 11, 12, 9, 0, 0)


def _award(db_session, teacher, points):
    points_service.award(db_session, teacher_id=teacher.actor_id, points=points, admin_id=uuid.uuid4())
    db_session.commit()


def _target(db_session, admin, points, due, *, benefits=None, created=NOW, department_id=CSE):
    target = target_service.create_target(
        db_session,
        actor=admin,
        department_id=department_id,
        target_points=points,
        target_date=due,
        benefits=benefits,
        current_time=created,
    )
    db_session.commit()
    return target


def test_no_active_target(db_session, make_teacher):
    teacher = make_teacher()
    evaluation = target_service.evaluate(db_session, teacher.actor_id, current_time=NOW)

    assert evaluation.status is TargetStatus.NO_ACTIVE_TARGET
    assert evaluation.benefits == []
    assert evaluation.target_points is None


def test_achieved_unlocks_benefits(db_session, make_teacher, make_admin):
    teacher = make_teacher()
    admin = make_admin(CSE)
    _target(db_session, admin, 20, date(2026, 3, 31), benefits=["Travel grant", "  ", "Research allowance"])
    _award(db_session, teacher, 25)

    evaluation = target_service.evaluate(db_session, teacher.actor_id, current_time=NOW)

    assert evaluation.status is TargetStatus.ACHIEVED
    assert evaluation.current_points == 25
    assert evaluation.benefits == ["Travel grant", "Research allowance"]


def test_exact_threshold_is_achieved(db_session, make_teacher, make_admin):
    teacher = make_teacher()
    admin = make_admin(CSE)
    _target(db_session, admin, 20, date(2026, 3, 31))
    _award(db_session, teacher, 20)

    assert target_service.evaluate(db_session, teacher.actor_id, current_time=NOW).status is TargetStatus.ACHIEVED


def test_in_progress(db_session, make_teacher, make_admin):
    teacher = make_teacher()
    admin = make_admin(CSE)
    _target(db_session, admin, 20, date(2026, 3, 31), benefits=["Travel grant"])
    _award(db_session, teacher, 5)

    evaluation = target_service.evaluate(db_session, teacher.actor_id, current_time=NOW)
    assert evaluation.status is TargetStatus.IN_PROGRESS
    assert evaluation.benefits == ["Travel grant"]


def test_expired_wins_over_achieved(db_session, make_teacher, make_admin):
    teacher = make_teacher()
    admin = make_admin(CSE)
    _target(db_session, admin, 5, date(2025, 11, 11), benefits=["Travel grant"])
    _award(db_session, teacher, 50)

    evaluation = target_service.evaluate(db_session, teacher.actor_id, current_time=NOW)
    assert evaluation.status is TargetStatus.EXPIRED
    assert evaluation.benefits == []


def test_due_today_is_not_expired(db_session, make_teacher, make_admin):
    teacher = make_teacher()
    admin = make_admin(CSE)
    _target(db_session, admin, 5, NOW.date())

    assert target_service.evaluate(db_session, teacher.actor_id, current_time=NOW).status is TargetStatus.IN_PROGRESS


def test_newest_target_is_active(db_session, make_teacher, make_admin):
    teacher = make_teacher()
    admin = make_admin(CSE)
    _target(db_session, admin, 5, date(2026, 1, 31), created=NOW - timedelta(days=30))
    _target(db_session, admin, 50, date(2026, 6, 30), created=NOW)
    _award(db_session, teacher, 10)

    evaluation = target_service.evaluate(db_session, teacher.actor_id, current_time=NOW)
    assert evaluation.target_points == 50
    assert evaluation.status is TargetStatus.IN_PROGRESS
    assert [t.target_points for t in target_service.list_targets(db_session, department_id=CSE)] == [50, 5]


def test_other_department_target_ignored(db_session, make_teacher, make_admin):
    teacher = make_teacher(CSE)
    admin = make_admin(MECH)
    _target(db_session, admin, 5, date(2026, 1, 31), department_id=MECH)

    assert target_service.evaluate(db_session, teacher.actor_id, current_time=NOW).status is TargetStatus.NO_ACTIVE_TARGET


def test_only_scoped_admin_sets_targets(db_session, make_admin):
    admin = make_admin(MECH)
    with pytest.raises(ForbiddenError):
        target_service.create_target(
            db_session, actor=admin, department_id=CSE, target_points=10, target_date=date(2026, 1, 1)
        )


def test_negative_target_rejected(db_session, make_admin):
    admin = make_admin(CSE)
    with pytest.raises(ValidationError) as excinfo:
        target_service.create_target(
            db_session, actor=admin, department_id=CSE, target_points=-1, target_date=date(2026, 1, 1)
        )
    assert excinfo.value.field == "target_points"


def test_same_instant_targets_resolve_consistently(db_session, make_teacher, make_admin):
    teacher = make_teacher()
    admin = make_admin(CSE)
    first = _target(db_session, admin, 10, date(2026, 3, 31), created=NOW)
    second = _target(db_session, admin, 30, date(2026, 3, 31), created=NOW)

    expected = max((first, second), key=lambda target: target.target_id.hex)
    history = target_service.list_targets(db_session, department_id=CSE)

    assert target_service.active_target(db_session, CSE).target_id == expected.target_id
    assert history[0].target_id == expected.target_id
    assert target_service.evaluate(db_session, teacher.actor_id, current_time=NOW).target_points == expected.target_points
