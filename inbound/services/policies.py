"""
Policies explicites, activables par configuration.

- DispositionFieldPolicy : champs requis selon le return_status
- TransitionPolicy       : transitions libres (comportement historique) ou forward-only
- RecordLockPolicy       : verrouillage des acceptances finalisées (désactivé par défaut)
"""

from __future__ import annotations

from inbound.app import config
from inbound.app.db.models.core_types import ReturnStatus
from inbound.services.errors import DispositionInvalid, RecordFinalized, TransitionNotAllowed


REQUIRED_FIELDS_BY_STATUS: dict[ReturnStatus, tuple[str, ...]] = {
    ReturnStatus.non_returnable: ("inventory_location",),
    ReturnStatus.returned: ("return_date",),
    ReturnStatus.replaced: ("replacement_date",),
}


def _is_blank(value) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


class DispositionFieldPolicy:
    def __init__(self, required: dict[ReturnStatus, tuple[str, ...]] | None = None, enabled: bool = True):
        self.required = REQUIRED_FIELDS_BY_STATUS if required is None else required
        self.enabled = enabled

    def errors_for(self, disposition) -> list[dict]:
        if not self.enabled:
            return []
        errors = []
        for field in self.required.get(disposition.return_status, ()):
            if _is_blank(getattr(disposition, field, None)):
                errors.append(
                    {
                        "disposition_id": disposition.id,
                        "field": field,
                        "message": f"{field} is required when return_status is {disposition.return_status.value}",
                    }
                )
        return errors

    def check(self, dispositions) -> None:
        errors = [e for d in dispositions for e in self.errors_for(d)]
        if errors:
            raise DispositionInvalid(errors)


class TransitionPolicy:
    """
    free         : toute transition est permise (y compris retour à pending)
    forward_only : on ne quitte que pending ; un statut final ne bouge plus
    """

    MODES = ("free", "forward_only")

    def __init__(self, mode: str = "free"):
        if mode not in self.MODES:
            raise ValueError(f"Unknown transition mode {mode!r}")
        self.mode = mode

    def allows(self, current: ReturnStatus, requested: ReturnStatus) -> bool:
        if self.mode == "free" or current == requested:
            return True
        return current == ReturnStatus.pending

    def check(self, disposition_id: int, current: ReturnStatus, requested: ReturnStatus) -> None:
        if not self.allows(current, requested):
            raise TransitionNotAllowed(disposition_id, current.value, requested.value)


class RecordLockPolicy:
    def __init__(self, enabled: bool = False):
        self.enabled = enabled

    def check(self, record) -> None:
        if self.enabled and record.is_finalized:
            raise RecordFinalized(record.id)


def default_field_policy() -> DispositionFieldPolicy:
    return DispositionFieldPolicy(enabled=config.DISPOSITION_FIELD_CHECKS)


def default_transition_policy() -> TransitionPolicy:
    return TransitionPolicy(config.DISPOSITION_TRANSITIONS)


def default_lock_policy() -> RecordLockPolicy:
    return RecordLockPolicy(enabled=config.LOCK_FINALIZED_RECORDS)
