"""Department point targets."""

import uuid
from datetime import datetime

from sqlalchemy import JSON, CheckConstraint, Column, Date, DateTime, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import relationship

from ..core.database import Base


class DepartmentTarget(Base):
    """A point threshold with a deadline; the newest row per department is the active one."""

    __tablename__ = "department_targets"
    __table_args__ = (
        CheckConstraint("target_points >= 0", name="department_targets_points_non_negative"),
    )

    target_id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    department_id = Column(
        String(64), ForeignKey("departments.department_id", ondelete="RESTRICT"), nullable=False, index=True
    )
    target_points = Column(Integer, nullable=False)
    target_date = Column(Date, nullable=False)
    benefits = Column(JSON, nullable=False, default=list)
    created_by = Column(Uuid(as_uuid=True), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)

    department = relationship("Department", back_populates="targets")
