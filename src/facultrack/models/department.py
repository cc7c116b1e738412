"""Department catalog model."""

from datetime import datetime

from sqlalchemy import Column, DateTime, String
from sqlalchemy.orm import relationship

from ..core.database import Base


class Department(Base):
    """One entry of the fixed department catalog."""

    __tablename__ = "departments"

    department_id = Column(String(64), primary_key=True)
    name = Column(String, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    teachers = relationship("Teacher", back_populates="department")
    targets = relationship("DepartmentTarget", back_populates="department")
