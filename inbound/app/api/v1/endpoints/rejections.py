from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from inbound.app.api.deps import get_db, get_field_policy, get_transition_policy
from inbound.app.schemas.rejection import (
    CommunicationRead,
    RejectionCaseRead,
    RejectionUpdate,
    VendorContactCreate,
)
from inbound.services import rejections as svc
from inbound.services import vendor_comms

router = APIRouter(prefix="/rejections")


@router.get("/{case_id}", response_model=RejectionCaseRead)
def get_rejection_case(case_id: int, db: Session = Depends(get_db)):
    case = svc.get_rejection_case(db, case_id)
    return svc.describe_case(db, case)


@router.put("/{case_id}", response_model=RejectionCaseRead)
def update_dispositions(
    case_id: int,
    payload: RejectionUpdate,
    db: Session = Depends(get_db),
    field_policy=Depends(get_field_policy),
    transition_policy=Depends(get_transition_policy),
):
    case = svc.save_dispositions(
        db,
        case_id=case_id,
        items=payload.items,
        resolution_notes=payload.resolution_notes,
        vendor_response_date=payload.vendor_response_date,
        expected_version=payload.version,
        field_policy=field_policy,
        transition_policy=transition_policy,
    )
    return svc.describe_case(db, case)


@router.post("/{case_id}/contact-vendor", response_model=CommunicationRead, status_code=201)
def contact_vendor(case_id: int, payload: VendorContactCreate, db: Session = Depends(get_db)):
    return vendor_comms.append_communication(
        db,
        case_id=case_id,
        method=payload.contact_method,
        message=payload.message,
        expected_response_date=payload.expected_response_date,
    )


@router.get("/{case_id}/communications", response_model=list[CommunicationRead])
def list_communications(case_id: int, db: Session = Depends(get_db)):
    return vendor_comms.list_communications(db, case_id=case_id)
