import threading
import uuid

import pytest

from facultrack.core.database import SessionLocal
from facultrack.core.errors import ValidationError
from facultrack.models import LedgerEntryType, TeacherPointsBalance
from facultrack.services import points_service


def test_award_appends_entry_and_moves_balance(db_session, make_teacher):
    teacher = make_teacher()
    admin_id = uuid.uuid4()

    entry = points_service.award(db_session, teacher_id=teacher.actor_id, points=10, admin_id=admin_id, reason="paper")
    db_session.commit()

    assert entry.entry_type is LedgerEntryType.AWARD
    assert entry.points_delta == 10
    assert points_service.get_balance(db_session, teacher.actor_id) == 10
    assert points_service.ledger_total(db_session, teacher.actor_id) == 10


def test_zero_points_award_is_recorded(db_session, make_teacher):
    teacher = make_teacher()
    points_service.award(db_session, teacher_id=teacher.actor_id, points=0, admin_id=uuid.uuid4())
    db_session.commit()

    history = points_service.list_history(db_session, teacher_id=teacher.actor_id)
    assert len(history) == 1
    assert points_service.get_balance(db_session, teacher.actor_id) == 0


@pytest.mark.parametrize("points", [-1, 2.5, True, None])
def test_rejects_invalid_points(db_session, make_teacher, points):
    teacher = make_teacher()
    with pytest.raises(ValidationError) as excinfo:
        points_service.award(db_session, teacher_id=teacher.actor_id, points=points, admin_id=uuid.uuid4())
    assert excinfo.value.field == "points"


def test_reverse_records_negative_delta(db_session, make_teacher):
    teacher = make_teacher()
    admin_id = uuid.uuid4()
    points_service.award(db_session, teacher_id=teacher.actor_id, points=7, admin_id=admin_id)
    entry = points_service.reverse(db_session, teacher_id=teacher.actor_id, points=7, admin_id=admin_id)
    db_session.commit()

    assert entry.entry_type is LedgerEntryType.REVERSAL
    assert entry.points_delta == -7
    assert points_service.get_balance(db_session, teacher.actor_id) == 0
    assert len(points_service.list_history(db_session, teacher_id=teacher.actor_id)) == 2


def test_unknown_teacher_balance_is_zero(db_session):
    assert points_service.get_balance(db_session, uuid.uuid4()) == 0


def test_reconcile_repairs_drift(db_session, make_teacher):
    teacher = make_teacher()
    points_service.award(db_session, teacher_id=teacher.actor_id, points=4, admin_id=uuid.uuid4())
    db_session.commit()

    balance = db_session.get(TeacherPointsBalance, teacher.actor_id)
    balance.current_points = 99
    db_session.commit()

    assert points_service.reconcile_balance(db_session, teacher.actor_id) == 4
    db_session.commit()
    assert points_service.get_balance(db_session, teacher.actor_id) == 4


def test_concurrent_awards_are_all_counted(make_teacher):
    teacher = make_teacher()
    admin_id = uuid.uuid4()
    workers = 8
    errors = []

    def award_one():
        session = SessionLocal()
        try:
            points_service.award(session, teacher_id=teacher.actor_id, points=1, admin_id=admin_id)
            session.commit()
        except Exception as exc:  # pragma: no cover - surfaced through the assertion below
            session.rollback()
            errors.append(exc)
        finally:
            session.close()

    threads = [threading.Thread(target=award_one) for _ in range(workers)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    session = SessionLocal()
    try:
        assert points_service.get_balance(session, teacher.actor_id) == workers
        assert points_service.ledger_total(session, teacher.actor_id) == workers
    finally:
        session.close()
