from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel


class ShipmentLineRead(BaseModel):
    id: int
    line_no: int
    description: str
    unit_price: Decimal
    delivered_quantity: int

    class Config:
        from_attributes = True


class ShipmentRead(BaseModel):
    id: int
    purchase_order_id: int
    challan_number: str | None
    delivery_date: date | None
    delivery_address: str | None
    contact_person: str | None
    contact_phone: str | None
    created_at: datetime
    lines: list[ShipmentLineRead]

    class Config:
        from_attributes = True
