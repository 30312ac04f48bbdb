from __future__ import annotations

from decimal import Decimal
from typing import Iterable

from inbound.app.db.models.core_types import RejectionCaseStatus, ReturnStatus


def total_cost_impact(dispositions: Iterable) -> Decimal:
    """
    Coût des rejets conservés sur place.

    Seules les dispositions non_returnable comptent ; un cost_impact resté
    renseigné sur un autre statut est ignoré.
    """
    total = Decimal("0")
    for d in dispositions:
        if d.return_status != ReturnStatus.non_returnable:
            continue
        total += Decimal(str(d.cost_impact or 0))
    return total


def derive_case_status(dispositions: Iterable, *, vendor_contacted: bool) -> RejectionCaseStatus:
    statuses = [d.return_status for d in dispositions]
    open_count = sum(1 for s in statuses if s == ReturnStatus.pending)

    if open_count == len(statuses):
        return RejectionCaseStatus.processing if vendor_contacted else RejectionCaseStatus.pending
    if open_count == 0:
        return RejectionCaseStatus.resolved
    return RejectionCaseStatus.partially_resolved
