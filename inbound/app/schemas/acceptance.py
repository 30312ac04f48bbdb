from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from inbound.app.db.models.core_types import ItemStatus


class AcceptanceItemRead(BaseModel):
    id: int
    line_no: int
    shipment_line_id: int | None
    description: str
    delivered_quantity: int
    accepted_quantity: int
    rejected_quantity: int
    rejection_reason: str | None
    item_status: ItemStatus  # READ ONLY : dérivé des quantités

    class Config:
        from_attributes = True


class AcceptanceRead(BaseModel):
    id: int
    shipment_id: int
    overall_status: ItemStatus  # READ ONLY : dérivé des items
    acceptance_notes: str | None
    rejection_notes: str | None
    accepted_by_name: str | None
    accepted_by_designation: str | None
    accepted_by_contact: str | None
    signature_ref: str | None
    generate_certificate: bool
    acceptance_date: datetime | None
    finalized_at: datetime | None
    is_finalized: bool
    version: int
    items: list[AcceptanceItemRead]

    class Config:
        from_attributes = True


class ItemQuantitiesUpdate(BaseModel):
    # Pas de ge=0 ici : le moteur lève QuantityOutOfRange avec un message métier
    accepted_quantity: int
    rejected_quantity: int
    rejection_reason: str | None = None
    version: int | None = None


class ItemQuantitiesSave(BaseModel):
    id: int
    accepted_quantity: int
    rejected_quantity: int
    rejection_reason: str | None = None


class AcceptanceSave(BaseModel):
    acceptance_notes: str | None = None
    rejection_notes: str | None = None
    accepted_by_name: str | None = Field(default=None, max_length=200)
    accepted_by_designation: str | None = Field(default=None, max_length=200)
    accepted_by_contact: str | None = Field(default=None, max_length=200)
    # Artefact opaque (data URL, SVG...) transmis tel quel au signature store
    signature: str | None = None
    generate_certificate: bool = False
    items: list[ItemQuantitiesSave] = Field(default_factory=list)
    version: int | None = None


class CertificateRead(BaseModel):
    acceptance_id: int
    certificate_ref: str
