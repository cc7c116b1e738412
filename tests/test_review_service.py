import threading

import pytest

from facultrack.core.database import SessionLocal
from facultrack.core.errors import ConflictError, ForbiddenError, ValidationError
from facultrack.models import AchievementCategory, AchievementStatus, LedgerEntryType
from facultrack.services import achievement_service, points_service, review_service
from facultrack.services.notification_service import NotificationKind
from tests.conftest import CSE, MECH


def test_approve_conference_paper_awards_points(db_session, make_teacher, make_admin, submit):
    teacher = make_teacher(name="Asha Verma", email="asha@faculty.example.edu")
    admin = make_admin(CSE)
    achievement = submit(teacher, AchievementCategory.CONFERENCE_PAPER)

    outcome = review_service.approve_achievement(
        db_session, actor=admin, achievement_id=achievement.achievement_id, points=10
    )
    db_session.commit()

    assert outcome.achievement.status is AchievementStatus.APPROVED
    assert outcome.achievement.points_awarded == 10
    assert outcome.achievement.rejection_reason is None
    assert outcome.ledger_entry.points_delta == 10
    assert outcome.ledger_entry.reason == f"Achievement approved: {achievement.achievement_id}"
    assert points_service.get_balance(db_session, teacher.actor_id) == 10

    event = outcome.notification
    assert event.kind is NotificationKind.APPROVED
    assert event.contact.email == "asha@faculty.example.edu"
    assert event.summary.points_awarded == 10


def test_reject_patent_emits_reason(db_session, make_teacher, make_admin, submit):
    teacher = make_teacher()
    admin = make_admin(CSE)
    achievement = submit(teacher, AchievementCategory.PATENT)

    outcome = review_service.reject_achievement(
        db_session, actor=admin, achievement_id=achievement.achievement_id, reason="missing certificate"
    )
    db_session.commit()

    assert outcome.achievement.status is AchievementStatus.REJECTED
    assert outcome.achievement.rejection_reason == "missing certificate"
    assert outcome.ledger_entry is None
    assert outcome.notification.kind is NotificationKind.REJECTED
    assert outcome.notification.reason == "missing certificate"
    assert points_service.get_balance(db_session, teacher.actor_id) == 0


def test_reject_requires_reason(db_session, make_teacher, make_admin, submit):
    teacher = make_teacher()
    admin = make_admin(CSE)
    achievement = submit(teacher)

    with pytest.raises(ValidationError) as excinfo:
        review_service.reject_achievement(db_session, actor=admin, achievement_id=achievement.achievement_id, reason="  ")
    assert excinfo.value.field == "reason"


def test_approve_requires_points(db_session, make_teacher, make_admin, submit):
    teacher = make_teacher()
    admin = make_admin(CSE)
    achievement = submit(teacher)

    with pytest.raises(ValidationError) as excinfo:
        review_service.approve_achievement(db_session, actor=admin, achievement_id=achievement.achievement_id, points=None)
    assert excinfo.value.field == "points"


def test_out_of_scope_admin_cannot_review(db_session, make_teacher, make_admin, submit):
    teacher = make_teacher(CSE)
    admin = make_admin(MECH)
    achievement = submit(teacher)

    with pytest.raises(ForbiddenError):
        review_service.approve_achievement(db_session, actor=admin, achievement_id=achievement.achievement_id, points=3)


def test_teacher_cannot_approve_own_record(db_session, make_teacher, submit):
    teacher = make_teacher()
    achievement = submit(teacher)

    with pytest.raises(ForbiddenError):
        review_service.approve_achievement(db_session, actor=teacher, achievement_id=achievement.achievement_id, points=3)


def test_second_approval_conflicts(db_session, make_teacher, make_admin, submit):
    teacher = make_teacher()
    admin = make_admin(CSE)
    achievement = submit(teacher)
    review_service.approve_achievement(db_session, actor=admin, achievement_id=achievement.achievement_id, points=4)
    db_session.commit()

    with pytest.raises(ConflictError):
        review_service.approve_achievement(db_session, actor=admin, achievement_id=achievement.achievement_id, points=4)
    db_session.rollback()
    assert points_service.get_balance(db_session, teacher.actor_id) == 4


def test_reset_clears_reason(db_session, make_teacher, make_admin, submit):
    teacher = make_teacher()
    admin = make_admin(CSE)
    achievement = submit(teacher)
    review_service.reject_achievement(db_session, actor=admin, achievement_id=achievement.achievement_id, reason="blurry scan")
    db_session.commit()

    outcome = review_service.reset_to_pending(db_session, actor=admin, achievement_id=achievement.achievement_id)
    db_session.commit()

    assert outcome.achievement.status is AchievementStatus.PENDING
    assert outcome.achievement.rejection_reason is None
    assert outcome.notification is None


def test_reset_requires_rejected(db_session, make_teacher, make_admin, submit):
    teacher = make_teacher()
    admin = make_admin(CSE)
    achievement = submit(teacher)

    with pytest.raises(ConflictError):
        review_service.reset_to_pending(db_session, actor=admin, achievement_id=achievement.achievement_id)


def test_reopen_and_reapprove_never_double_counts(db_session, make_teacher, make_admin, submit):
    teacher = make_teacher()
    admin = make_admin(CSE)
    achievement = submit(teacher)
    achievement_id = achievement.achievement_id

    review_service.approve_achievement(db_session, actor=admin, achievement_id=achievement_id, points=10)
    db_session.commit()
    reopened = review_service.reopen_achievement(db_session, actor=admin, achievement_id=achievement_id)
    db_session.commit()

    assert reopened.achievement.status is AchievementStatus.PENDING
    assert reopened.achievement.points_awarded == 10
    assert reopened.ledger_entry.entry_type is LedgerEntryType.REVERSAL
    assert points_service.get_balance(db_session, teacher.actor_id) == 0

    review_service.approve_achievement(db_session, actor=admin, achievement_id=achievement_id, points=6)
    db_session.commit()

    entries = points_service.entries_for_achievement(db_session, achievement_id)
    assert [entry.points_delta for entry in entries] == [10, -10, 6]
    assert points_service.get_balance(db_session, teacher.actor_id) == 6
    assert points_service.ledger_total(db_session, teacher.actor_id) == 6


def test_approve_and_reject_race_has_one_winner(make_teacher, make_admin, submit):
    teacher = make_teacher()
    admin = make_admin(CSE)
    achievement_id = submit(teacher).achievement_id
    barrier = threading.Barrier(2)
    results = {}

    def run(name, action):
        session = SessionLocal()
        try:
            barrier.wait()
            action(session)
            session.commit()
            results[name] = "won"
        except ConflictError:
            session.rollback()
            results[name] = "conflict"
        finally:
            session.close()

    approve = threading.Thread(
        target=run,
        args=(
            "approve",
            lambda s: review_service.approve_achievement(s, actor=admin, achievement_id=achievement_id, points=5),
        ),
    )
    reject = threading.Thread(
        target=run,
        args=(
            "reject",
            lambda s: review_service.reject_achievement(s, actor=admin, achievement_id=achievement_id, reason="dup"),
        ),
    )
    approve.start()
    reject.start()
    approve.join()
    reject.join()

    assert sorted(results.values()) == ["conflict", "won"]

    session = SessionLocal()
    try:
        stored = achievement_service.get_achievement(session, achievement_id)
        entries = points_service.entries_for_achievement(session, achievement_id)
        if results["approve"] == "won":
            assert stored.status is AchievementStatus.APPROVED
            assert [entry.points_delta for entry in entries] == [5]
            assert points_service.get_balance(session, teacher.actor_id) == 5
        else:
            assert stored.status is AchievementStatus.REJECTED
            assert entries == []
            assert points_service.get_balance(session, teacher.actor_id) == 0
    finally:
        session.close()


def test_failed_ledger_write_leaves_record_pending(db_session, make_teacher, make_admin, submit, monkeypatch):
    from sqlalchemy.exc import OperationalError

    teacher = make_teacher()
    admin = make_admin(CSE)
    achievement_id = submit(teacher).achievement_id

    def failing_apply_delta(*args, **kwargs):
        raise OperationalError("UPDATE teacher_points", {}, Exception("disk I/O error"))

    monkeypatch.setattr(points_service, "_apply_delta", failing_apply_delta)

    with pytest.raises(OperationalError):
        review_service.approve_achievement(db_session, actor=admin, achievement_id=achievement_id, points=10)
    db_session.rollback()

    session = SessionLocal()
    try:
        stored = achievement_service.get_achievement(session, achievement_id)
        assert stored.status is AchievementStatus.PENDING
        assert stored.points_awarded is None
        assert points_service.entries_for_achievement(session, achievement_id) == []
        assert points_service.get_balance(session, teacher.actor_id) == 0
    finally:
        session.close()
