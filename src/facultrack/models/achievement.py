"""Achievement record model."""

import enum
import uuid
from datetime import datetime

from sqlalchemy import JSON, CheckConstraint, Column, Date, DateTime, Enum, ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import relationship

from ..core.database import Base


class AchievementCategory(str, enum.Enum):
    """Fixed achievement categories; each selects one field group."""

    JOURNAL_ARTICLE = "JOURNAL_ARTICLE"
    CONFERENCE_PAPER = "CONFERENCE_PAPER"
    BOOK_CHAPTER = "BOOK_CHAPTER"
    PATENT = "PATENT"
    RESEARCH_COLLABORATION = "RESEARCH_COLLABORATION"
    AWARD_RECOGNITION = "AWARD_RECOGNITION"
    CONSULTANCY_FUNDED_PROJECT = "CONSULTANCY_FUNDED_PROJECT"
    STARTUP_CENTER = "STARTUP_CENTER"
    OTHER = "OTHER"


class AchievementStatus(str, enum.Enum):
    """Review states."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class Achievement(Base):
    """A teacher-submitted accomplishment awaiting or past review."""

    __tablename__ = "achievements"
    __table_args__ = (
        CheckConstraint(
            "(status = 'REJECTED' AND rejection_reason IS NOT NULL) "
            "OR (status <> 'REJECTED' AND rejection_reason IS NULL)",
            name="achievements_rejection_reason_shape",
        ),
        CheckConstraint("points_awarded IS NULL OR points_awarded >= 0", name="achievements_points_non_negative"),
    )

    achievement_id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    teacher_id = Column(Uuid(as_uuid=True), ForeignKey("teachers.teacher_id", ondelete="RESTRICT"), nullable=False, index=True)
    category = Column(Enum(AchievementCategory, name="achievement_category"), nullable=False)
    title = Column(String, nullable=False)
    date_achieved = Column(Date, nullable=False)
    description = Column(Text)
    document_url = Column(String)
    remarks = Column(Text)
    details = Column(JSON, nullable=False, default=dict)
    status = Column(
        Enum(AchievementStatus, name="achievement_status"),
        nullable=False,
        default=AchievementStatus.PENDING,
        index=True,
    )
    rejection_reason = Column(Text)
    points_awarded = Column(Integer)
    reviewed_by = Column(Uuid(as_uuid=True))
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    status_changed_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    teacher = relationship("Teacher", back_populates="achievements")
