from __future__ import annotations

import logging
from datetime import date

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from inbound.app.db.models.core_types import ContactMethod, DeliveryStatus
from inbound.app.db.models.models_v1 import CommunicationEntry, utcnow
from inbound.services.errors import EmptyMessage, PersistenceFailure, UnknownContactMethod
from inbound.services.persistence import commit
from inbound.services.rejections import get_rejection_case

logger = logging.getLogger(__name__)


def _supplier_id_for(case) -> int | None:
    shipment = case.acceptance.shipment if case.acceptance else None
    po = shipment.purchase_order if shipment else None
    return po.supplier_id if po else None


def append_communication(
    db: Session,
    *,
    case_id: int,
    method: ContactMethod,
    message: str,
    expected_response_date: date | None = None,
) -> CommunicationEntry:
    """
    Journal append-only : une entrée "sent" par envoi.

    vendor_contacted_date du dossier = horodatage du dernier envoi
    (écrasé à chaque envoi, pas cumulé). Les statuts delivered/read/failed
    viennent du canal externe, pas d'ici.
    """
    if not message or not message.strip():
        raise EmptyMessage()
    try:
        method = ContactMethod(method)
    except ValueError:
        raise UnknownContactMethod(method) from None

    case = get_rejection_case(db, case_id)

    now = utcnow()
    entry = CommunicationEntry(
        case_id=case.id,
        supplier_id=_supplier_id_for(case),
        method=method,
        delivery_status=DeliveryStatus.sent,
        message=message,
        expected_response_date=expected_response_date,
        sent_at=now,
    )
    db.add(entry)
    case.vendor_contacted_date = now

    commit(db, "RejectionCase", case.id)
    logger.info("rejection case %s: vendor contacted by %s (entry %s)", case.id, method.value, entry.id)
    return entry


def list_communications(db: Session, *, case_id: int) -> list[CommunicationEntry]:
    get_rejection_case(db, case_id)
    try:
        rows = db.execute(
            select(CommunicationEntry)
            .where(CommunicationEntry.case_id == case_id)
            .order_by(CommunicationEntry.sent_at.asc(), CommunicationEntry.id.asc())
        )
        return list(rows.scalars().all())
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceFailure(e) from e
