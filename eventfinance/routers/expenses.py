"""
Event Finance Manager - Expenses Router

API endpoints for expense submission and approval.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from eventfinance.database import get_async_session
from eventfinance.dependencies import get_current_user, get_permissions
from eventfinance.models.budget import BudgetItemCategory
from eventfinance.models.expense import ExpenseStatus
from eventfinance.models.user import User
from eventfinance.schemas.expense import (
    ExpenseCreateRequest,
    ExpenseDecisionRequest,
    ExpenseListResponse,
    ExpenseResponse,
    ExpenseSummaryResponse,
    ExpenseUpdateRequest,
)
from eventfinance.services.expense_service import ExpenseService
from eventfinance.services.validation import enum_values
from eventfinance.utils.error_handling import InvalidCategoryException
from eventfinance.utils.permissions import BudgetPermissions


router = APIRouter()


def _category_filter(category: Optional[str]) -> Optional[BudgetItemCategory]:
    if not category:
        return None
    try:
        return BudgetItemCategory(category)
    except ValueError:
        raise InvalidCategoryException(category, enum_values(BudgetItemCategory))


@router.get(
    "/expenses",
    response_model=ExpenseListResponse,
    summary="List expenses",
)
async def list_expenses(
    event_id: Optional[UUID] = Query(None),
    status_filter: Optional[ExpenseStatus] = Query(None, alias="status"),
    category: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    expenses = await ExpenseService(db).list_expenses(
        current_user.organization_id,
        event_id=event_id,
        status=status_filter,
        category=_category_filter(category),
    )
    return ExpenseListResponse(
        expenses=[ExpenseResponse.model_validate(expense) for expense in expenses],
        total=len(expenses),
    )


@router.post(
    "/expenses",
    response_model=ExpenseResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit expense",
)
async def create_expense(
    request: ExpenseCreateRequest,
    current_user: User = Depends(get_current_user),
    permissions: BudgetPermissions = Depends(get_permissions),
    db: AsyncSession = Depends(get_async_session),
):
    expense = await ExpenseService(db).create_expense(
        request.model_dump(exclude_unset=True),
        current_user,
        permissions,
    )
    return ExpenseResponse.model_validate(expense)


@router.get(
    "/expenses/summary",
    response_model=ExpenseSummaryResponse,
    summary="Expense totals",
)
async def get_expense_summary(
    event_id: Optional[UUID] = Query(None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    totals = await ExpenseService(db).get_expense_summary(
        current_user.organization_id,
        event_id=event_id,
    )
    return totals.to_dict()


@router.get(
    "/expenses/{expense_id}",
    response_model=ExpenseResponse,
    summary="Get expense",
)
async def get_expense(
    expense_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    expense = await ExpenseService(db).get_expense(expense_id, current_user.organization_id)
    return ExpenseResponse.model_validate(expense)


@router.patch(
    "/expenses/{expense_id}",
    response_model=ExpenseResponse,
    summary="Edit pending expense",
)
async def update_expense(
    expense_id: UUID,
    request: ExpenseUpdateRequest,
    current_user: User = Depends(get_current_user),
    permissions: BudgetPermissions = Depends(get_permissions),
    db: AsyncSession = Depends(get_async_session),
):
    expense = await ExpenseService(db).update_expense(
        expense_id,
        request.model_dump(exclude_unset=True),
        current_user,
        permissions,
    )
    return ExpenseResponse.model_validate(expense)


@router.delete(
    "/expenses/{expense_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete pending expense",
    description="Without confirm=true answers 409 with a summary of what would be deleted.",
)
async def delete_expense(
    expense_id: UUID,
    confirm: bool = Query(False),
    current_user: User = Depends(get_current_user),
    permissions: BudgetPermissions = Depends(get_permissions),
    db: AsyncSession = Depends(get_async_session),
):
    await ExpenseService(db).delete_expense(
        expense_id,
        current_user,
        permissions,
        confirmed=confirm,
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/expenses/{expense_id}/approve",
    response_model=ExpenseResponse,
    summary="Approve expense",
)
async def approve_expense(
    expense_id: UUID,
    request: Optional[ExpenseDecisionRequest] = None,
    current_user: User = Depends(get_current_user),
    permissions: BudgetPermissions = Depends(get_permissions),
    db: AsyncSession = Depends(get_async_session),
):
    expense = await ExpenseService(db).approve_expense(
        expense_id,
        current_user,
        permissions,
        comments=request.comments if request else None,
    )
    return ExpenseResponse.model_validate(expense)


@router.post(
    "/expenses/{expense_id}/reject",
    response_model=ExpenseResponse,
    summary="Reject expense",
)
async def reject_expense(
    expense_id: UUID,
    request: Optional[ExpenseDecisionRequest] = None,
    current_user: User = Depends(get_current_user),
    permissions: BudgetPermissions = Depends(get_permissions),
    db: AsyncSession = Depends(get_async_session),
):
    expense = await ExpenseService(db).reject_expense(
        expense_id,
        current_user,
        permissions,
        comments=request.comments if request else None,
    )
    return ExpenseResponse.model_validate(expense)
