"""
Asset dashboard routes.
"""

from fastapi import APIRouter

from reliatrack.api.dependencies import CurrentUserDep, DatabaseDep
from reliatrack.services.dashboard_service import DashboardService

router = APIRouter()


@router.get("/dashboard")
async def dashboard(current_user: CurrentUserDep, db: DatabaseDep):
    """Overdue work, next week's maintenance and fleet health."""
    return await DashboardService(db).overview(current_user.id)


@router.get("/dashboard/stats")
async def dashboard_stats(current_user: CurrentUserDep, db: DatabaseDep):
    return await DashboardService(db).stats(current_user.id)
