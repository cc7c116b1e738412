"""Public schema exports."""

from .achievement import (
	AchievementCreate,
	AchievementRead,
	AchievementUpdate,
	ApproveRequest,
	CategoryFieldRead,
	CategorySchemaRead,
	RejectRequest,
	ReopenRequest,
)
from .admin import AdminGrantCreate, AdminGrantRead, SweepSummary
from .points import LedgerEntryRead, PointsSummary, TargetCreate, TargetEvaluationRead, TargetRead
from .teacher import DepartmentRead, TeacherCreate, TeacherRead

__all__ = [
	"AchievementCreate",
	"AchievementRead",
	"AchievementUpdate",
	"AdminGrantCreate",
	"AdminGrantRead",
	"ApproveRequest",
	"CategoryFieldRead",
	"CategorySchemaRead",
	"DepartmentRead",
	"LedgerEntryRead",
	"PointsSummary",
	"RejectRequest",
	"ReopenRequest",
	"SweepSummary",
	"TargetCreate",
	"TargetEvaluationRead",
	"TargetRead",
	"TeacherCreate",
	"TeacherRead",
]
