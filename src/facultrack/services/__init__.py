"""Service layer exports."""

from . import (
	achievement_service,
	admin_service,
	authorization_service,
	category_registry,
	department_service,
	notification_service,
	points_service,
	retention_service,
	review_service,
	target_service,
	teacher_service,
)

__all__ = [
	"achievement_service",
	"admin_service",
	"authorization_service",
	"category_registry",
	"department_service",
	"notification_service",
	"points_service",
	"retention_service",
	"review_service",
	"target_service",
	"teacher_service",
]
