from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from inbound.app.api.deps import get_db
from inbound.app.schemas.acceptance import AcceptanceRead
from inbound.app.schemas.shipment import ShipmentRead
from inbound.services import acceptance as svc

router = APIRouter(prefix="/shipments")


@router.get("", response_model=list[ShipmentRead])
def list_shipments(db: Session = Depends(get_db)):
    """Livraisons (READ ONLY), alimentées par le suivi des livraisons externe."""
    return svc.list_shipments(db)


@router.get("/{shipment_id}", response_model=ShipmentRead)
def get_shipment(shipment_id: int, db: Session = Depends(get_db)):
    return svc.get_shipment(db, shipment_id)


@router.get("/{shipment_id}/acceptance", response_model=AcceptanceRead)
def get_acceptance(shipment_id: int, db: Session = Depends(get_db)):
    return svc.get_acceptance(db, shipment_id)


@router.post("/{shipment_id}/acceptance", response_model=AcceptanceRead)
def open_acceptance(shipment_id: int, db: Session = Depends(get_db)):
    # Idempotent : rejouer l'appel renvoie la même acceptance
    return svc.open_acceptance(db, shipment_id=shipment_id)
