"""
Acceptance service.

Orchestration du workflow d'acceptation (ouverture, saisie des quantités,
sauvegarde finale). Toute la logique de statut est dans :
    inbound.services.acceptance_engine

Une opération = une unité de travail = un commit.
Un appel en échec ne laisse aucune écriture partielle.
"""

from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from inbound.app.db.models.models_v1 import AcceptanceItem, AcceptanceRecord, Shipment, utcnow
from inbound.app.schemas.acceptance import AcceptanceSave
from inbound.services.acceptance_engine import check_quantities
from inbound.services.certificates import default_certificate_generator
from inbound.services.errors import MissingAcceptor, NotFinalized, NotFound, PersistenceFailure
from inbound.services.persistence import check_version, commit, load
from inbound.services.policies import RecordLockPolicy, default_lock_policy
from inbound.services.rejections import ensure_dispositions
from inbound.services.signatures import default_signature_store

logger = logging.getLogger(__name__)

ENTITY = "Acceptance"

RECORD_FIELDS = (
    "acceptance_notes",
    "rejection_notes",
    "accepted_by_designation",
    "accepted_by_contact",
    "generate_certificate",
)


# ---------- Lecture ----------
def list_shipments(db: Session) -> list[Shipment]:
    try:
        return list(db.execute(select(Shipment).order_by(Shipment.id.desc())).scalars().all())
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceFailure(e) from e


def get_shipment(db: Session, shipment_id: int) -> Shipment:
    return load(db, Shipment, "Shipment", shipment_id)


def _find_by_shipment(db: Session, shipment_id: int) -> AcceptanceRecord | None:
    try:
        return db.execute(
            select(AcceptanceRecord).where(AcceptanceRecord.shipment_id == shipment_id)
        ).scalar_one_or_none()
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceFailure(e) from e


def get_acceptance(db: Session, shipment_id: int) -> AcceptanceRecord:
    get_shipment(db, shipment_id)
    record = _find_by_shipment(db, shipment_id)
    if record is None:
        raise NotFound("Acceptance for shipment", shipment_id)
    return record


def get_acceptance_record(db: Session, record_id: int) -> AcceptanceRecord:
    return load(db, AcceptanceRecord, ENTITY, record_id)


def _find_item(record: AcceptanceRecord, item_id: int) -> AcceptanceItem:
    for it in record.items:
        if it.id == item_id:
            return it
    raise NotFound("AcceptanceItem", item_id)


# ---------- Ecriture ----------
def open_acceptance(db: Session, *, shipment_id: int) -> AcceptanceRecord:
    """
    Entrée d'une livraison dans le workflow : un item par ligne livrée,
    dans l'ordre des lignes. Idempotent (retourne l'acceptance existante).
    """
    shipment = get_shipment(db, shipment_id)

    existing = _find_by_shipment(db, shipment_id)
    if existing:
        return existing

    record = AcceptanceRecord(shipment_id=shipment.id, generate_certificate=False)
    for line in shipment.lines:
        record.items.append(
            AcceptanceItem(
                shipment_line_id=line.id,
                line_no=line.line_no,
                description=line.description,
                delivered_quantity=line.delivered_quantity,
                accepted_quantity=0,
                rejected_quantity=0,
            )
        )
    db.add(record)

    # Concurrence : deux ouvertures simultanées -> contrainte unique shipment_id
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        existing = _find_by_shipment(db, shipment_id)
        if existing:
            return existing
        raise PersistenceFailure(e) from e
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceFailure(e) from e

    logger.info("acceptance %s opened for shipment %s (%d items)", record.id, shipment_id, len(record.items))
    return record


def update_item_quantities(
    db: Session,
    *,
    record_id: int,
    item_id: int,
    accepted: int,
    rejected: int,
    rejection_reason: str | None = None,
    expected_version: int | None = None,
    lock_policy: RecordLockPolicy | None = None,
) -> AcceptanceRecord:
    """
    Saisie accepted/rejected sur un item (tout ou rien).

    Invariant : accepted + rejected <= delivered, chacun >= 0.
    En cas d'échec l'item garde ses valeurs précédentes.
    """
    record = get_acceptance_record(db, record_id)
    (lock_policy or default_lock_policy()).check(record)
    check_version(ENTITY, record, expected_version)

    item = _find_item(record, item_id)
    check_quantities(item.delivered_quantity, accepted, rejected, item_id=item.id)

    item.accepted_quantity = accepted
    item.rejected_quantity = rejected
    if rejection_reason is not None:
        item.rejection_reason = rejection_reason
    # Touche le parent pour incrémenter sa version
    record.updated_at = utcnow()

    commit(db, ENTITY, record.id)
    return record


def save_acceptance(
    db: Session,
    *,
    record_id: int,
    changes: AcceptanceSave,
    signatures=None,
    certificates=None,
    lock_policy: RecordLockPolicy | None = None,
) -> AcceptanceRecord:
    """
    Sauvegarde finale d'une acceptance.

    Ordre :
    1) acceptor obligatoire (MissingAcceptor), avant toute écriture
    2) validation de toutes les quantités du batch (QuantityOutOfRange)
    3) stockage de la signature (absente = signature existante conservée)
    4) mutation des seuls champs présents + upsert des dispositions pending (jamais d'écrasement)
    5) commit, puis déclenchement du certificat (fire-and-forget)
    """
    record = get_acceptance_record(db, record_id)
    (lock_policy or default_lock_policy()).check(record)
    check_version(ENTITY, record, changes.version)

    acceptor = (changes.accepted_by_name or "").strip()
    if not acceptor:
        raise MissingAcceptor()

    edits = []
    for ln in changes.items:
        item = _find_item(record, ln.id)
        check_quantities(item.delivered_quantity, ln.accepted_quantity, ln.rejected_quantity, item_id=item.id)
        edits.append((item, ln))

    signature_ref = record.signature_ref
    if changes.signature:
        try:
            signature_ref = (signatures or default_signature_store()).store(changes.signature)
        except OSError as e:
            raise PersistenceFailure(e) from e

    for item, ln in edits:
        item.accepted_quantity = ln.accepted_quantity
        item.rejected_quantity = ln.rejected_quantity
        if "rejection_reason" in ln.model_fields_set:
            item.rejection_reason = ln.rejection_reason

    # Champ absent du payload = inchangé ; null explicite = effacé
    for field in RECORD_FIELDS:
        if field in changes.model_fields_set:
            setattr(record, field, getattr(changes, field))

    now = utcnow()
    record.accepted_by_name = acceptor
    record.signature_ref = signature_ref
    record.acceptance_date = now
    if record.finalized_at is None:
        record.finalized_at = now
    record.updated_at = now

    case = ensure_dispositions(db, record)
    commit(db, ENTITY, record.id)

    logger.info(
        "acceptance %s saved by %r: %s%s",
        record.id,
        acceptor,
        record.overall_status.value,
        f", rejection case {case.id}" if case is not None else "",
    )

    if changes.generate_certificate:
        _fire_certificate(certificates or default_certificate_generator(), record)
    return record


def _fire_certificate(certificates, record: AcceptanceRecord) -> None:
    # Fire-and-forget : un échec de génération n'annule pas la sauvegarde
    try:
        ref = certificates.generate(record)
    except Exception:
        logger.exception("certificate generation failed for acceptance %s", record.id)
        return
    logger.info("certificate for acceptance %s written to %s", record.id, ref)


def request_certificate(db: Session, *, record_id: int, certificates=None) -> str:
    """Génération explicite d'un certificat pour une acceptance déjà finalisée."""
    record = get_acceptance_record(db, record_id)
    if not record.is_finalized:
        raise NotFinalized(record.id)
    try:
        return (certificates or default_certificate_generator()).generate(record)
    except OSError as e:
        raise PersistenceFailure(e) from e
