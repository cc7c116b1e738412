"""Admin access grants."""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, ForeignKey, Index, String, UniqueConstraint, Uuid, text

from ..core.database import Base


class AdminGrant(Base):
    """Either the super-admin flag or access to one department for an admin identity."""

    __tablename__ = "admin_grants"
    __table_args__ = (
        UniqueConstraint("admin_id", "department_id", name="admin_grants_department_unique"),
        CheckConstraint(
            "(is_super_admin AND department_id IS NULL) OR (NOT is_super_admin AND department_id IS NOT NULL)",
            name="admin_grants_scope_shape",
        ),
        Index(
            "admin_grants_single_super_flag",
            "admin_id",
            unique=True,
            sqlite_where=text("is_super_admin"),
            postgresql_where=text("is_super_admin"),
        ),
    )

    grant_id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    admin_id = Column(Uuid(as_uuid=True), nullable=False, index=True)
    department_id = Column(String(64), ForeignKey("departments.department_id", ondelete="CASCADE"))
    is_super_admin = Column(Boolean, nullable=False, default=False)
    granted_by = Column(Uuid(as_uuid=True))
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
