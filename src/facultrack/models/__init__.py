"""SQLAlchemy models for Facultrack."""

from .achievement import Achievement, AchievementCategory, AchievementStatus
from .admin_grant import AdminGrant
from .department import Department
from .department_target import DepartmentTarget
from .points_ledger import LedgerEntryType, PointsLedgerEntry
from .teacher import Teacher
from .teacher_points import TeacherPointsBalance

__all__ = [
    "Achievement",
    "AchievementCategory",
    "AchievementStatus",
    "AdminGrant",
    "Department",
    "DepartmentTarget",
    "LedgerEntryType",
    "PointsLedgerEntry",
    "Teacher",
    "TeacherPointsBalance",
]
