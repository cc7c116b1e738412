from datetime import datetime, timedelta

from facultrack.models import Achievement, AchievementStatus
from facultrack.services import review_service
from facultrack.services.retention_service import run_retention_sweep
from tests.conftest import CSE

NOW = datetime(2025, 11, 12, 2, 0, 0)


def _rejected(db_session, teacher, admin, submit, *, age_days):
    achievement = submit(teacher, current_time=NOW - timedelta(days=age_days))
    review_service.reject_achievement(
        db_session,
        actor=admin,
        achievement_id=achievement.achievement_id,
        reason="insufficient proof",
        current_time=NOW - timedelta(days=age_days),
    )
    db_session.commit()
    return achievement.achievement_id


def test_sweep_purges_only_old_rejected(db_session, make_teacher, make_admin, submit):
    teacher = make_teacher()
    admin = make_admin(CSE)
    old_rejected = _rejected(db_session, teacher, admin, submit, age_days=8)
    recent_rejected = _rejected(db_session, teacher, admin, submit, age_days=6)
    old_pending = submit(teacher, current_time=NOW - timedelta(days=30)).achievement_id

    summary = run_retention_sweep(db_session, current_time=NOW, retention_days=7)
    db_session.commit()

    assert summary == {"candidates": 1, "deleted": 1}
    assert db_session.get(Achievement, old_rejected) is None
    assert db_session.get(Achievement, recent_rejected).status is AchievementStatus.REJECTED
    assert db_session.get(Achievement, old_pending).status is AchievementStatus.PENDING


def test_sweep_is_idempotent(db_session, make_teacher, make_admin, submit):
    teacher = make_teacher()
    admin = make_admin(CSE)
    _rejected(db_session, teacher, admin, submit, age_days=10)

    run_retention_sweep(db_session, current_time=NOW, retention_days=7)
    db_session.commit()
    assert run_retention_sweep(db_session, current_time=NOW, retention_days=7) == {"candidates": 0, "deleted": 0}


def test_record_reset_before_purge_survives(db_session, make_teacher, make_admin, submit):
    teacher = make_teacher()
    admin = make_admin(CSE)
    achievement_id = _rejected(db_session, teacher, admin, submit, age_days=9)

    review_service.reset_to_pending(db_session, actor=admin, achievement_id=achievement_id)
    db_session.commit()

    assert run_retention_sweep(db_session, current_time=NOW, retention_days=7)["deleted"] == 0
    assert db_session.get(Achievement, achievement_id) is not None


def test_ledger_survives_purge_of_its_achievement(db_session, make_teacher, make_admin, submit):
    from sqlalchemy import text

    from facultrack.services import points_service

    assert db_session.execute(text("PRAGMA foreign_keys")).scalar() == 1

    teacher = make_teacher()
    admin = make_admin(CSE)
    created = NOW - timedelta(days=9)
    achievement_id = submit(teacher, current_time=created).achievement_id
    review_service.approve_achievement(
        db_session, actor=admin, achievement_id=achievement_id, points=10, current_time=created
    )
    db_session.commit()
    review_service.reopen_achievement(db_session, actor=admin, achievement_id=achievement_id, current_time=created)
    db_session.commit()
    review_service.reject_achievement(
        db_session, actor=admin, achievement_id=achievement_id, reason="duplicate entry", current_time=created
    )
    db_session.commit()

    assert run_retention_sweep(db_session, current_time=NOW, retention_days=7) == {"candidates": 1, "deleted": 1}
    db_session.commit()
    db_session.expire_all()

    entries = points_service.entries_for_achievement(db_session, achievement_id)
    assert [(entry.entry_type.value, entry.points_delta) for entry in entries] == [("AWARD", 10), ("REVERSAL", -10)]
    assert all(entry.achievement_id == achievement_id for entry in entries)
    assert points_service.get_balance(db_session, teacher.actor_id) == 0
