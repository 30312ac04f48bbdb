from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from inbound.app.db.models.core_types import (
    ContactMethod,
    DeliveryStatus,
    RejectionCaseStatus,
    ReturnStatus,
)


def _blank_to_none(v):
    if isinstance(v, str) and not v.strip():
        return None
    return v


class DispositionRead(BaseModel):
    id: int
    acceptance_item_id: int
    return_status: ReturnStatus
    vendor_response: str | None
    return_date: date | None
    replacement_date: date | None
    inventory_location: str | None
    cost_impact: Decimal

    # Résolus via l'item source (référence faible)
    description: str | None = None
    rejected_quantity: int | None = None
    rejection_reason: str | None = None
    source_missing: bool = False


class RejectionCaseRead(BaseModel):
    id: int
    acceptance_id: int
    status: RejectionCaseStatus
    rejection_date: datetime
    vendor_contacted_date: datetime | None
    vendor_response_date: date | None
    resolution_notes: str | None
    total_rejected_items: int
    total_cost_impact: Decimal
    version: int
    items: list[DispositionRead]


class DispositionUpdate(BaseModel):
    id: int
    return_status: ReturnStatus | None = None
    vendor_response: str | None = None
    return_date: date | None = None
    replacement_date: date | None = None
    inventory_location: str | None = Field(default=None, max_length=128)
    cost_impact: Decimal | None = Field(default=None, ge=0)

    @field_validator("return_date", "replacement_date", mode="before")
    @classmethod
    def blank_dates(cls, v):
        return _blank_to_none(v)


class RejectionUpdate(BaseModel):
    items: list[DispositionUpdate] = Field(default_factory=list)
    resolution_notes: str | None = None
    vendor_response_date: date | None = None
    version: int | None = None

    @field_validator("vendor_response_date", mode="before")
    @classmethod
    def blank_dates(cls, v):
        return _blank_to_none(v)


class VendorContactCreate(BaseModel):
    message: str = ""
    contact_method: ContactMethod = ContactMethod.email
    expected_response_date: date | None = None

    @field_validator("expected_response_date", mode="before")
    @classmethod
    def blank_dates(cls, v):
        return _blank_to_none(v)


class CommunicationRead(BaseModel):
    id: int
    case_id: int
    supplier_id: int | None
    method: ContactMethod
    delivery_status: DeliveryStatus
    message: str
    expected_response_date: date | None
    sent_at: datetime

    class Config:
        from_attributes = True
