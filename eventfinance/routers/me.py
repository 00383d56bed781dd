"""
Event Finance Manager - Current User Router

The caller's resolved permissions and notifications.
"""

from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from eventfinance.database import get_async_session
from eventfinance.dependencies import get_current_user, get_permissions, is_demo_mode
from eventfinance.models.user import User
from eventfinance.schemas.dashboard import NotificationResponse, PermissionsResponse
from eventfinance.services.notification_service import NotificationService
from eventfinance.utils.permissions import BudgetPermissions


router = APIRouter()


@router.get(
    "/me/permissions",
    response_model=PermissionsResponse,
    summary="Current permissions",
)
async def get_my_permissions(
    permissions: BudgetPermissions = Depends(get_permissions),
    demo_mode: bool = Depends(is_demo_mode),
):
    """Capabilities the UI should use to show or hide controls."""
    return PermissionsResponse(is_demo_mode=demo_mode, **permissions.to_dict())


@router.get(
    "/me/notifications",
    response_model=List[NotificationResponse],
    summary="My notifications",
)
async def list_my_notifications(
    unread_only: bool = Query(False),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    notifications = await NotificationService(db).get_user_notifications(
        current_user.id,
        unread_only=unread_only,
    )
    return [
        NotificationResponse(
            id=notification.id,
            type=notification.type.value,
            title=notification.title,
            message=notification.message,
            metadata=notification.extra,
            is_read=notification.is_read,
        )
        for notification in notifications
    ]


@router.post(
    "/me/notifications/read",
    summary="Mark all notifications read",
)
async def mark_my_notifications_read(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    updated = await NotificationService(db).mark_all_as_read(current_user.id)
    return {"updated": updated}
