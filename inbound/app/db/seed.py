from __future__ import annotations

from datetime import date
from decimal import Decimal

from sqlalchemy import select

from inbound.app.db.session import SessionLocal
from inbound.app.db.models.models_v1 import PurchaseOrder, Shipment, ShipmentLine, Supplier


def run_seed():
    """Données de démo : un fournisseur, un PO, une livraison de 3 lignes."""
    db = SessionLocal()
    try:
        supplier = db.scalar(select(Supplier).where(Supplier.name == "DEMO SUPPLIER"))
        if not supplier:
            supplier = Supplier(
                name="DEMO SUPPLIER",
                contact_person="Demo Contact",
                email="orders@demo-supplier.example",
                phone="+00 000 000",
            )
            db.add(supplier)
            db.flush()

        po = db.scalar(select(PurchaseOrder).where(PurchaseOrder.po_number == "PO-DEMO-001"))
        if not po:
            po = PurchaseOrder(po_number="PO-DEMO-001", supplier_id=supplier.id)
            db.add(po)
            db.flush()

        shipment = db.scalar(select(Shipment).where(Shipment.challan_number == "DC-DEMO-001"))
        if not shipment:
            shipment = Shipment(
                purchase_order_id=po.id,
                challan_number="DC-DEMO-001",
                delivery_date=date.today(),
                delivery_address="Main warehouse, receiving dock",
                contact_person="Receiving desk",
            )
            shipment.lines = [
                ShipmentLine(line_no=1, description="Steel bracket 40mm", unit_price=Decimal("12.50"), delivered_quantity=10),
                ShipmentLine(line_no=2, description="Hex bolt M8", unit_price=Decimal("0.40"), delivered_quantity=500),
                ShipmentLine(line_no=3, description="Gasket kit", unit_price=Decimal("48.00"), delivered_quantity=3),
            ]
            db.add(shipment)

        db.commit()
        print(f"SEED OK: supplier={supplier.id}, po={po.po_number}, shipment={shipment.id}")
    finally:
        db.close()


if __name__ == "__main__":
    run_seed()
