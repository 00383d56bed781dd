"""
Event Finance Manager - Budget Items Router

API endpoints for an event's budget line items.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from eventfinance.database import get_async_session
from eventfinance.dependencies import get_current_user, get_permissions
from eventfinance.models.user import User
from eventfinance.schemas.budget import (
    BudgetItemCreateRequest,
    BudgetItemListResponse,
    BudgetItemResponse,
    BudgetItemUpdateRequest,
    BudgetSummaryResponse,
)
from eventfinance.services.budget_calculations import calculate_budget_totals
from eventfinance.services.budget_item_service import BudgetItemService
from eventfinance.utils.permissions import BudgetPermissions


router = APIRouter()


@router.get(
    "/events/{event_id}/budget-items",
    response_model=BudgetItemListResponse,
    summary="List budget items",
)
async def list_budget_items(
    event_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    items = await BudgetItemService(db).list_items(event_id, current_user.organization_id)
    return BudgetItemListResponse(
        items=[BudgetItemResponse.model_validate(item) for item in items],
        total=len(items),
        totals=calculate_budget_totals(items).to_dict(),
    )


@router.post(
    "/events/{event_id}/budget-items",
    response_model=BudgetItemResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create budget item",
)
async def create_budget_item(
    event_id: UUID,
    request: BudgetItemCreateRequest,
    current_user: User = Depends(get_current_user),
    permissions: BudgetPermissions = Depends(get_permissions),
    db: AsyncSession = Depends(get_async_session),
):
    item = await BudgetItemService(db).create_item(
        event_id,
        request.model_dump(exclude_unset=True),
        current_user,
        permissions,
    )
    return BudgetItemResponse.model_validate(item)


# Declared before /{item_id} so "summary" is not parsed as an id
@router.get(
    "/events/{event_id}/budget-items/summary",
    response_model=BudgetSummaryResponse,
    summary="Event budget summary",
)
async def get_budget_summary(
    event_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    return await BudgetItemService(db).get_budget_summary(event_id, current_user.organization_id)


@router.get(
    "/events/{event_id}/budget-items/{item_id}",
    response_model=BudgetItemResponse,
    summary="Get budget item",
)
async def get_budget_item(
    event_id: UUID,
    item_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    item = await BudgetItemService(db).get_item(event_id, item_id, current_user.organization_id)
    return BudgetItemResponse.model_validate(item)


@router.patch(
    "/events/{event_id}/budget-items/{item_id}",
    response_model=BudgetItemResponse,
    summary="Update budget item",
)
async def update_budget_item(
    event_id: UUID,
    item_id: UUID,
    request: BudgetItemUpdateRequest,
    current_user: User = Depends(get_current_user),
    permissions: BudgetPermissions = Depends(get_permissions),
    db: AsyncSession = Depends(get_async_session),
):
    item = await BudgetItemService(db).update_item(
        event_id,
        item_id,
        request.model_dump(exclude_unset=True),
        current_user,
        permissions,
    )
    return BudgetItemResponse.model_validate(item)


@router.delete(
    "/events/{event_id}/budget-items/{item_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete budget item",
    description="Without confirm=true answers 409 with a summary of what would be deleted.",
)
async def delete_budget_item(
    event_id: UUID,
    item_id: UUID,
    confirm: bool = Query(False),
    current_user: User = Depends(get_current_user),
    permissions: BudgetPermissions = Depends(get_permissions),
    db: AsyncSession = Depends(get_async_session),
):
    await BudgetItemService(db).delete_item(
        event_id,
        item_id,
        current_user,
        permissions,
        confirmed=confirm,
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
