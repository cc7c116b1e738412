"""Materialized per-teacher points balance."""

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, Uuid
from sqlalchemy.orm import relationship

from ..core.database import Base


class TeacherPointsBalance(Base):
    """Running total of a teacher's ledger; only ever moved by atomic increments."""

    __tablename__ = "teacher_points"

    teacher_id = Column(Uuid(as_uuid=True), ForeignKey("teachers.teacher_id", ondelete="CASCADE"), primary_key=True)
    current_points = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    teacher = relationship("Teacher", back_populates="balance")
