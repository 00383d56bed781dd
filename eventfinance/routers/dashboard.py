"""
Event Finance Manager - Dashboard Router
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from eventfinance.database import get_async_session
from eventfinance.dependencies import get_current_user
from eventfinance.models.user import User
from eventfinance.schemas.dashboard import DashboardResponse
from eventfinance.services.event_service import EventService


router = APIRouter()


@router.get(
    "/dashboard",
    response_model=DashboardResponse,
    summary="Organization dashboard",
    description="Per-event progress (capped at 100) plus uncapped overall utilisation.",
)
async def get_dashboard(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    return await EventService(db).get_dashboard(current_user.organization_id)
