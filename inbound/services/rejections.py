"""
Rejection disposition tracker.

Le RejectionCase est un agrégat séparé de l'AcceptanceRecord :
- il référence les items par id (référence faible, pas de copie)
- il n'est PAS resynchronisé quand les quantités source changent ensuite
- aucune vérification de quantité croisée n'est faite ici

Calculs purs (coût, statut du dossier) : inbound.services.dispositions
"""

from __future__ import annotations

import logging
from decimal import Decimal
from types import SimpleNamespace
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from inbound.app.db.models.core_types import ReturnStatus
from inbound.app.db.models.models_v1 import (
    AcceptanceItem,
    AcceptanceRecord,
    RejectedItemDisposition,
    RejectionCase,
    utcnow,
)
from inbound.app.schemas.rejection import DispositionUpdate
from inbound.services.acceptance_engine import rejection_candidates
from inbound.services.errors import NotFound, PersistenceFailure
from inbound.services.persistence import check_version, commit, load
from inbound.services.policies import (
    DispositionFieldPolicy,
    TransitionPolicy,
    default_field_policy,
    default_transition_policy,
)

logger = logging.getLogger(__name__)

ENTITY = "RejectionCase"

DISPOSITION_FIELDS = (
    "return_status",
    "vendor_response",
    "return_date",
    "replacement_date",
    "inventory_location",
    "cost_impact",
)


def _find_case_for(db: Session, acceptance_id: int) -> RejectionCase | None:
    try:
        return db.execute(
            select(RejectionCase).where(RejectionCase.acceptance_id == acceptance_id)
        ).scalar_one_or_none()
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceFailure(e) from e


def ensure_dispositions(db: Session, record: AcceptanceRecord) -> RejectionCase | None:
    """
    Upsert idempotent par item id.

    - ouvre le dossier au premier item rejeté
    - ajoute une disposition pending pour chaque item rejeté qui n'en a pas
    - ne touche jamais une disposition existante
    Pas de commit ici : fait partie de l'unité de travail de l'appelant.
    """
    case = _find_case_for(db, record.id)
    candidates = rejection_candidates(record.items)
    if not candidates:
        return case

    if case is None:
        case = RejectionCase(acceptance_id=record.id, rejection_date=utcnow())
        db.add(case)

    known = {d.acceptance_item_id for d in case.dispositions}
    created = 0
    for it in candidates:
        if it.id in known:
            continue
        case.dispositions.append(
            RejectedItemDisposition(
                acceptance_item_id=it.id,
                return_status=ReturnStatus.pending,
                cost_impact=Decimal("0"),
            )
        )
        created += 1

    if created:
        case.updated_at = utcnow()
        logger.info("acceptance %s: %d disposition(s) seeded as pending", record.id, created)
    return case


def get_rejection_case(db: Session, case_id: int) -> RejectionCase:
    return load(db, RejectionCase, ENTITY, case_id)


def get_case_for_acceptance(db: Session, record_id: int) -> RejectionCase:
    load(db, AcceptanceRecord, "Acceptance", record_id)
    case = _find_case_for(db, record_id)
    if case is None:
        raise NotFound("RejectionCase for acceptance", record_id)
    return case


def _prospective(d: RejectedItemDisposition, changes: dict) -> SimpleNamespace:
    state = {field: getattr(d, field) for field in DISPOSITION_FIELDS}
    state.update(changes)
    return SimpleNamespace(id=d.id, **state)


def _changes(upd: DispositionUpdate) -> dict:
    changes = upd.model_dump(exclude_unset=True, exclude={"id"})
    # return_status / cost_impact non nullables : None = inchangé
    for field in ("return_status", "cost_impact"):
        if changes.get(field) is None:
            changes.pop(field, None)
    return changes


def save_dispositions(
    db: Session,
    *,
    case_id: int,
    items: Iterable[DispositionUpdate],
    resolution_notes: str | None = None,
    vendor_response_date=None,
    expected_version: int | None = None,
    field_policy: DispositionFieldPolicy | None = None,
    transition_policy: TransitionPolicy | None = None,
) -> RejectionCase:
    """
    Mise à jour des dispositions (par id) + notes de résolution.

    Toutes les transitions et tous les champs requis sont vérifiés sur
    l'état futur AVANT d'écrire quoi que ce soit.
    """
    field_policy = field_policy or default_field_policy()
    transition_policy = transition_policy or default_transition_policy()

    case = get_rejection_case(db, case_id)
    check_version(ENTITY, case, expected_version)

    by_id = {d.id: d for d in case.dispositions}
    planned = []
    for upd in items:
        d = by_id.get(upd.id)
        if d is None:
            raise NotFound("Disposition", upd.id)
        changes = _changes(upd)
        if "return_status" in changes:
            transition_policy.check(d.id, d.return_status, changes["return_status"])
        planned.append((d, changes))

    field_policy.check([_prospective(d, changes) for d, changes in planned])

    for d, changes in planned:
        for field, value in changes.items():
            setattr(d, field, value)

    if resolution_notes is not None:
        case.resolution_notes = resolution_notes
    if vendor_response_date is not None:
        case.vendor_response_date = vendor_response_date
    case.updated_at = utcnow()

    commit(db, ENTITY, case.id)
    logger.info("rejection case %s updated (%d disposition(s)), status %s", case.id, len(planned), case.status.value)
    return case


def describe_case(db: Session, case: RejectionCase) -> dict:
    """
    Vue de lecture : chaque disposition est complétée par son item source
    (lookup par id). source_missing signale un item disparu ou dont la
    quantité rejetée est retombée à 0 depuis l'ouverture du dossier.
    """
    item_ids = [d.acceptance_item_id for d in case.dispositions]
    sources = {}
    if item_ids:
        try:
            rows = db.execute(select(AcceptanceItem).where(AcceptanceItem.id.in_(item_ids))).scalars().all()
        except SQLAlchemyError as e:
            db.rollback()
            raise PersistenceFailure(e) from e
        sources = {it.id: it for it in rows}

    items = []
    for d in case.dispositions:
        src = sources.get(d.acceptance_item_id)
        items.append(
            {
                "id": d.id,
                "acceptance_item_id": d.acceptance_item_id,
                "return_status": d.return_status,
                "vendor_response": d.vendor_response,
                "return_date": d.return_date,
                "replacement_date": d.replacement_date,
                "inventory_location": d.inventory_location,
                "cost_impact": d.cost_impact,
                "description": src.description if src else None,
                "rejected_quantity": src.rejected_quantity if src else None,
                "rejection_reason": src.rejection_reason if src else None,
                "source_missing": src is None or not src.rejected_quantity,
            }
        )

    return {
        "id": case.id,
        "acceptance_id": case.acceptance_id,
        "status": case.status,
        "rejection_date": case.rejection_date,
        "vendor_contacted_date": case.vendor_contacted_date,
        "vendor_response_date": case.vendor_response_date,
        "resolution_notes": case.resolution_notes,
        "total_rejected_items": len(items),
        "total_cost_impact": case.total_cost_impact,
        "version": case.version,
        "items": items,
    }
