"""Points ledger model capturing every award and reversal."""

import enum
from datetime import datetime

from sqlalchemy import CheckConstraint, Column, DateTime, Enum, ForeignKey, Integer, Text, Uuid
from sqlalchemy.orm import relationship

from ..core.database import Base


class LedgerEntryType(str, enum.Enum):
    """Ledger event classification."""

    AWARD = "AWARD"
    REVERSAL = "REVERSAL"


class PointsLedgerEntry(Base):
    """Append-only ledger of point movements for each teacher."""

    __tablename__ = "points_ledger"
    __table_args__ = (
        CheckConstraint(
            "(entry_type = 'AWARD' AND points_delta >= 0) OR (entry_type = 'REVERSAL' AND points_delta <= 0)",
            name="points_ledger_delta_sign",
        ),
    )

    entry_id = Column(Integer, primary_key=True, autoincrement=True)
    teacher_id = Column(Uuid(as_uuid=True), ForeignKey("teachers.teacher_id", ondelete="RESTRICT"), nullable=False, index=True)
    # Plain reference: entries outlive purged achievements unchanged.
    achievement_id = Column(Uuid(as_uuid=True), index=True)
    awarded_by = Column(Uuid(as_uuid=True), nullable=False)
    entry_type = Column(Enum(LedgerEntryType, name="ledger_entry_type"), nullable=False)
    points_delta = Column(Integer, nullable=False)
    reason = Column(Text)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    teacher = relationship("Teacher", back_populates="ledger_entries")
