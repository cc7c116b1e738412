"""Teacher domain model."""

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, String, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship

from ..core.database import Base


class Teacher(Base):
    """Department-scoped faculty member owning achievements.

    ``teacher_id`` is the identity provider's subject id.
    """

    __tablename__ = "teachers"
    __table_args__ = (
        UniqueConstraint("email", name="teachers_email_unique"),
    )

    teacher_id = Column(Uuid(as_uuid=True), primary_key=True)
    full_name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    department_id = Column(
        String(64), ForeignKey("departments.department_id", ondelete="RESTRICT"), nullable=False, index=True
    )
    designation = Column(String)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    department = relationship("Department", back_populates="teachers")
    achievements = relationship("Achievement", back_populates="teacher")
    ledger_entries = relationship("PointsLedgerEntry", back_populates="teacher")
    balance = relationship("TeacherPointsBalance", back_populates="teacher", uselist=False)
