"""
Event Finance Manager - Expense Schemas
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from eventfinance.models.budget import BudgetItemCategory
from eventfinance.models.expense import ExpenseStatus, WorkflowAction


# ===========================================
# REQUEST SCHEMAS
# ===========================================

class ExpenseCreateRequest(BaseModel):
    """Schema for submitting an expense."""
    event_id: Optional[UUID] = None
    title: Optional[str] = Field(None, max_length=255)
    amount: Optional[Decimal] = None
    category: Optional[str] = None
    description: Optional[str] = None
    vendor: Optional[str] = Field(None, max_length=255)
    vendor_id: Optional[UUID] = None
    budget_item_id: Optional[UUID] = None


class ExpenseUpdateRequest(BaseModel):
    """Schema for editing a pending expense."""
    title: Optional[str] = Field(None, max_length=255)
    amount: Optional[Decimal] = None
    category: Optional[str] = None
    description: Optional[str] = None
    vendor: Optional[str] = Field(None, max_length=255)
    vendor_id: Optional[UUID] = None
    budget_item_id: Optional[UUID] = None


class ExpenseDecisionRequest(BaseModel):
    """Optional comments attached to an approve/reject decision."""
    comments: Optional[str] = None


# ===========================================
# RESPONSE SCHEMAS
# ===========================================

class WorkflowEntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    approver_id: Optional[UUID] = None
    action: WorkflowAction
    comments: Optional[str] = None
    action_at: datetime


class ExpenseResponse(BaseModel):
    """Schema for expense response."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    event_id: UUID
    organization_id: UUID
    budget_item_id: Optional[UUID] = None
    category: BudgetItemCategory
    title: str
    amount: Decimal
    description: Optional[str] = None
    vendor: Optional[str] = None
    vendor_id: Optional[UUID] = None
    status: ExpenseStatus
    created_by_id: Optional[UUID] = None
    workflow_entries: List[WorkflowEntryResponse] = []
    created_at: datetime
    updated_at: datetime


class ExpenseListResponse(BaseModel):
    expenses: List[ExpenseResponse]
    total: int


class ExpenseSummaryResponse(BaseModel):
    total_allocated: Decimal
    total_spent: Decimal
    remaining: Decimal
    percentage_spent: Decimal
    pending_amount: Decimal
    pending_count: int
    approved_count: int
    rejected_count: int
