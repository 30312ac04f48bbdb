from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from inbound.app.api.deps import (
    get_certificate_generator,
    get_db,
    get_lock_policy,
    get_signature_store,
)
from inbound.app.schemas.acceptance import (
    AcceptanceRead,
    AcceptanceSave,
    CertificateRead,
    ItemQuantitiesUpdate,
)
from inbound.app.schemas.rejection import RejectionCaseRead
from inbound.services import acceptance as svc
from inbound.services import rejections

router = APIRouter(prefix="/acceptances")


@router.get("/{record_id}", response_model=AcceptanceRead)
def get_acceptance(record_id: int, db: Session = Depends(get_db)):
    return svc.get_acceptance_record(db, record_id)


@router.put("/{record_id}/items/{item_id}", response_model=AcceptanceRead)
def update_item_quantities(
    record_id: int,
    item_id: int,
    payload: ItemQuantitiesUpdate,
    db: Session = Depends(get_db),
    lock_policy=Depends(get_lock_policy),
):
    return svc.update_item_quantities(
        db,
        record_id=record_id,
        item_id=item_id,
        accepted=payload.accepted_quantity,
        rejected=payload.rejected_quantity,
        rejection_reason=payload.rejection_reason,
        expected_version=payload.version,
        lock_policy=lock_policy,
    )


@router.put("/{record_id}", response_model=AcceptanceRead)
def save_acceptance(
    record_id: int,
    payload: AcceptanceSave,
    db: Session = Depends(get_db),
    signatures=Depends(get_signature_store),
    certificates=Depends(get_certificate_generator),
    lock_policy=Depends(get_lock_policy),
):
    return svc.save_acceptance(
        db,
        record_id=record_id,
        changes=payload,
        signatures=signatures,
        certificates=certificates,
        lock_policy=lock_policy,
    )


@router.post("/{record_id}/certificate", response_model=CertificateRead, status_code=201)
def generate_certificate(
    record_id: int,
    db: Session = Depends(get_db),
    certificates=Depends(get_certificate_generator),
):
    ref = svc.request_certificate(db, record_id=record_id, certificates=certificates)
    return {"acceptance_id": record_id, "certificate_ref": ref}


@router.get("/{record_id}/rejection", response_model=RejectionCaseRead)
def get_rejection_for_acceptance(record_id: int, db: Session = Depends(get_db)):
    case = rejections.get_case_for_acceptance(db, record_id)
    return rejections.describe_case(db, case)
