"""
Acceptance engine (pur).

Dérivation des statuts à partir des quantités, sans I/O ni mutation.
Le statut n'est jamais stocké : il est recalculé à chaque lecture.

Règle item :
    accepted == 0 et rejected == delivered   -> rejected
    accepted == delivered et rejected == 0   -> accepted
    accepted + rejected == delivered         -> partially_accepted
    sinon                                    -> pending

Règle globale :
    un seul statut distinct                  -> ce statut
    au moins un rejected/partially_accepted  -> partially_accepted
    sinon (accepted + pending)               -> pending
"""

from __future__ import annotations

from typing import Iterable

from inbound.app.db.models.core_types import ItemStatus
from inbound.services.errors import QuantityOutOfRange

DOWNGRADING_STATUSES = {ItemStatus.rejected, ItemStatus.partially_accepted}


def _quantities(item) -> tuple[int, int, int]:
    return (
        int(item.delivered_quantity or 0),
        int(item.accepted_quantity or 0),
        int(item.rejected_quantity or 0),
    )


def status_for(delivered: int, accepted: int, rejected: int) -> ItemStatus:
    # Ligne livrée à zéro : rien à refuser, acceptée par construction
    if delivered == 0:
        return ItemStatus.accepted

    if accepted == 0 and rejected == delivered:
        return ItemStatus.rejected
    if accepted == delivered and rejected == 0:
        return ItemStatus.accepted
    if accepted + rejected == delivered:
        return ItemStatus.partially_accepted
    return ItemStatus.pending


def derive_item_status(item) -> ItemStatus:
    return status_for(*_quantities(item))


def derive_overall_status(items: Iterable) -> ItemStatus:
    statuses = {derive_item_status(it) for it in items}

    if not statuses:
        return ItemStatus.pending
    if len(statuses) == 1:
        return next(iter(statuses))
    if statuses & DOWNGRADING_STATUSES:
        return ItemStatus.partially_accepted
    return ItemStatus.pending


def check_quantities(
    delivered: int,
    accepted: int,
    rejected: int,
    *,
    item_id: int | None = None,
) -> None:
    """Lève QuantityOutOfRange si accepted/rejected < 0 ou si la somme dépasse delivered."""
    if accepted < 0 or rejected < 0 or accepted + rejected > delivered:
        raise QuantityOutOfRange(
            item_id=item_id,
            delivered=delivered,
            accepted=accepted,
            rejected=rejected,
        )


def rejection_candidates(items: Iterable) -> list:
    """Items qui doivent avoir une disposition : rejetés (tout ou partie) avec une quantité rejetée."""
    return [
        it
        for it in items
        if derive_item_status(it) in DOWNGRADING_STATUSES and int(it.rejected_quantity or 0) > 0
    ]
