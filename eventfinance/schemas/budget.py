"""
Event Finance Manager - Budget Line Item Schemas

Category is accepted as a plain string so the service can report an
unknown category alongside any other invalid fields in one response.
"""

from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, computed_field

from eventfinance.models.budget import BudgetItemCategory, BudgetItemStatus
from eventfinance.utils.money import format_variance


# ===========================================
# REQUEST SCHEMAS
# ===========================================

class BudgetItemCreateRequest(BaseModel):
    """Schema for creating a budget line item."""
    category: Optional[str] = Field(None, description="One of the fixed budget categories")
    subcategory: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    estimated_cost: Optional[Decimal] = None
    actual_cost: Optional[Decimal] = None
    status: Optional[BudgetItemStatus] = None
    notes: Optional[str] = None
    assigned_user_id: Optional[UUID] = None
    vendor: Optional[str] = Field(None, max_length=255)
    vendor_id: Optional[UUID] = None
    strategic_goal_id: Optional[UUID] = None
    file_attachment: Optional[str] = Field(None, max_length=500)


class BudgetItemUpdateRequest(BudgetItemCreateRequest):
    """Schema for updating a budget line item. Only fields sent are applied."""


# ===========================================
# RESPONSE SCHEMAS
# ===========================================

class BudgetItemResponse(BaseModel):
    """Schema for budget line item response."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    event_id: UUID
    category: BudgetItemCategory
    subcategory: Optional[str] = None
    description: str
    estimated_cost: Optional[Decimal] = None
    actual_cost: Optional[Decimal] = None
    variance: Decimal
    status: BudgetItemStatus
    notes: Optional[str] = None
    assigned_user_id: Optional[UUID] = None
    vendor: Optional[str] = None
    vendor_id: Optional[UUID] = None
    strategic_goal_id: Optional[UUID] = None
    file_attachment: Optional[str] = None
    last_edited_by_id: Optional[UUID] = None
    last_edited_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    @computed_field
    @property
    def variance_label(self) -> str:
        return format_variance(self.variance).label


class BudgetTotalsResponse(BaseModel):
    total_allocated: Decimal
    total_spent: Decimal
    remaining: Decimal
    percentage_spent: Decimal


class CategoryTotalsResponse(BaseModel):
    allocated: Decimal
    spent: Decimal


class BudgetStatusResponse(BaseModel):
    label: str
    bg: str
    border: str
    text: str
    indicator: str


class VarianceResponse(BaseModel):
    total_estimated: Decimal
    total_actual: Decimal
    variance: Decimal
    variance_percentage: Decimal
    is_over_budget: bool


class BudgetItemListResponse(BaseModel):
    items: List[BudgetItemResponse]
    total: int
    totals: BudgetTotalsResponse


class BudgetSummaryResponse(BaseModel):
    """Event budget roll-up."""
    event_id: UUID
    event_budget: Optional[Decimal] = None
    item_count: int
    totals: BudgetTotalsResponse
    category_totals: Dict[str, CategoryTotalsResponse]
    variance: VarianceResponse
    status: BudgetStatusResponse
