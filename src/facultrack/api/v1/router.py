"""Primary API router definition."""

from fastapi import APIRouter

from . import achievements, admin_grants, categories, departments, maintenance, reviews, teachers

api_router = APIRouter()

api_router.include_router(categories.router)
api_router.include_router(teachers.router)
api_router.include_router(achievements.router)
api_router.include_router(reviews.router)
api_router.include_router(departments.router)
api_router.include_router(admin_grants.router)
api_router.include_router(maintenance.router)


@api_router.get("/health", tags=["health"])
async def healthcheck() -> dict[str, str]:
    """Basic health probe endpoint."""
    return {"status": "ok"}
