"""
Event Finance Manager - Event Schemas
"""

from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from eventfinance.models.event import EventStatus


# ===========================================
# REQUEST SCHEMAS
# ===========================================

class EventCreateRequest(BaseModel):
    """Schema for creating an event."""
    name: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    venue: Optional[str] = Field(None, max_length=255)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    budget: Optional[Decimal] = Field(None, description="Overall event budget")
    status: Optional[EventStatus] = None


class EventUpdateRequest(BaseModel):
    """Schema for updating an event. Only fields sent are applied."""
    name: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    venue: Optional[str] = Field(None, max_length=255)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    budget: Optional[Decimal] = None
    status: Optional[EventStatus] = None


# ===========================================
# RESPONSE SCHEMAS
# ===========================================

class EventResponse(BaseModel):
    """Schema for event response."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    organization_id: UUID
    name: str
    description: Optional[str] = None
    venue: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    budget: Optional[Decimal] = None
    status: EventStatus
    created_by_id: Optional[UUID] = None
    created_at: datetime
    updated_at: datetime


class EventListResponse(BaseModel):
    events: List[EventResponse]
    total: int


class ActivityResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: Optional[UUID] = None
    event_id: Optional[UUID] = None
    action: str
    details: Optional[dict] = None
    created_at: datetime
