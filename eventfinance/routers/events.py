"""
Event Finance Manager - Events Router

API endpoints for event management.
"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from eventfinance.database import get_async_session
from eventfinance.dependencies import get_current_user, get_permissions
from eventfinance.models.event import EventStatus
from eventfinance.models.user import User
from eventfinance.schemas.event import (
    ActivityResponse,
    EventCreateRequest,
    EventListResponse,
    EventResponse,
    EventUpdateRequest,
)
from eventfinance.services.activity_service import ActivityService
from eventfinance.services.event_service import EventService
from eventfinance.utils.permissions import BudgetPermissions


router = APIRouter()


@router.get(
    "/events",
    response_model=EventListResponse,
    summary="List events",
)
async def list_events(
    status_filter: Optional[EventStatus] = Query(None, alias="status"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    """List the organization's events."""
    events = await EventService(db).list_events(current_user.organization_id, status=status_filter)
    return EventListResponse(
        events=[EventResponse.model_validate(event) for event in events],
        total=len(events),
    )


@router.post(
    "/events",
    response_model=EventResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create event",
)
async def create_event(
    request: EventCreateRequest,
    current_user: User = Depends(get_current_user),
    permissions: BudgetPermissions = Depends(get_permissions),
    db: AsyncSession = Depends(get_async_session),
):
    event = await EventService(db).create_event(
        current_user.organization_id,
        request.model_dump(exclude_unset=True),
        current_user,
        permissions,
    )
    return EventResponse.model_validate(event)


@router.get(
    "/events/{event_id}",
    response_model=EventResponse,
    summary="Get event",
)
async def get_event(
    event_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    event = await EventService(db).get_event(event_id, current_user.organization_id)
    return EventResponse.model_validate(event)


@router.patch(
    "/events/{event_id}",
    response_model=EventResponse,
    summary="Update event",
    description="Update event details or change its status. Only fields sent are applied.",
)
async def update_event(
    event_id: UUID,
    request: EventUpdateRequest,
    current_user: User = Depends(get_current_user),
    permissions: BudgetPermissions = Depends(get_permissions),
    db: AsyncSession = Depends(get_async_session),
):
    event = await EventService(db).update_event(
        event_id,
        current_user.organization_id,
        request.model_dump(exclude_unset=True),
        current_user,
        permissions,
    )
    return EventResponse.model_validate(event)


@router.delete(
    "/events/{event_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete event",
    description="Without confirm=true answers 409 with a summary of what would be deleted.",
)
async def delete_event(
    event_id: UUID,
    confirm: bool = Query(False),
    current_user: User = Depends(get_current_user),
    permissions: BudgetPermissions = Depends(get_permissions),
    db: AsyncSession = Depends(get_async_session),
):
    await EventService(db).delete_event(
        event_id,
        current_user.organization_id,
        current_user,
        permissions,
        confirmed=confirm,
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/events/{event_id}/activity",
    response_model=List[ActivityResponse],
    summary="Event activity",
)
async def get_event_activity(
    event_id: UUID,
    limit: int = Query(100, ge=1, le=500),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    """Most recent activity on an event."""
    await EventService(db).get_event(event_id, current_user.organization_id)
    entries = await ActivityService(db).get_event_activity(event_id, limit=limit)
    return [ActivityResponse.model_validate(entry) for entry in entries]
