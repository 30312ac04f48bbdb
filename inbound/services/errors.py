"""
Erreurs métier du moteur d'acceptation.

Chaque erreur porte un code stable et le status HTTP correspondant ;
la traduction en réponse HTTP est faite une seule fois
(voir inbound.app.main).
"""

from __future__ import annotations


class AcceptanceError(Exception):
    """Base des erreurs métier."""

    code = "ACCEPTANCE_ERROR"
    status_code = 400

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def payload(self) -> dict:
        return {"detail": self.message, "code": self.code}


class QuantityOutOfRange(AcceptanceError):
    code = "QUANTITY_OUT_OF_RANGE"
    status_code = 422

    def __init__(self, *, item_id: int | None, delivered: int, accepted: int, rejected: int):
        self.item_id = item_id
        self.delivered = delivered
        self.accepted = accepted
        self.rejected = rejected
        if accepted < 0 or rejected < 0:
            msg = f"Quantities must be >= 0 (accepted={accepted}, rejected={rejected})"
        else:
            msg = (
                f"accepted + rejected ({accepted} + {rejected}) "
                f"exceeds delivered quantity ({delivered})"
            )
        if item_id is not None:
            msg = f"Item {item_id}: {msg}"
        super().__init__(msg)


class MissingAcceptor(AcceptanceError):
    code = "MISSING_ACCEPTOR"
    status_code = 422

    def __init__(self):
        super().__init__("accepted_by_name is required to save an acceptance")


class NotFinalized(AcceptanceError):
    code = "NOT_FINALIZED"
    status_code = 409

    def __init__(self, record_id: int):
        self.record_id = record_id
        super().__init__(f"Acceptance {record_id} has not been saved yet, no certificate can be issued")


class UnknownContactMethod(AcceptanceError):
    code = "UNKNOWN_CONTACT_METHOD"
    status_code = 422

    def __init__(self, method):
        self.method = method
        super().__init__(f"Unknown contact method {method!r}")


class EmptyMessage(AcceptanceError):
    code = "EMPTY_MESSAGE"
    status_code = 422

    def __init__(self):
        super().__init__("Vendor message must not be empty")


class NotFound(AcceptanceError):
    code = "NOT_FOUND"
    status_code = 404

    def __init__(self, entity: str, entity_id):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")


class DispositionInvalid(AcceptanceError):
    """Champs requis manquants selon le return_status (un message par champ)."""

    code = "DISPOSITION_INVALID"
    status_code = 422

    def __init__(self, errors: list[dict]):
        self.errors = errors
        super().__init__(f"{len(errors)} disposition field error(s)")

    def payload(self) -> dict:
        return {"detail": self.message, "code": self.code, "errors": self.errors}


class TransitionNotAllowed(AcceptanceError):
    code = "TRANSITION_NOT_ALLOWED"
    status_code = 409

    def __init__(self, disposition_id: int, current: str, requested: str):
        self.disposition_id = disposition_id
        self.current = current
        self.requested = requested
        super().__init__(
            f"Disposition {disposition_id}: transition {current} -> {requested} is not allowed"
        )


class RecordFinalized(AcceptanceError):
    code = "RECORD_FINALIZED"
    status_code = 409

    def __init__(self, record_id: int):
        self.record_id = record_id
        super().__init__(f"Acceptance {record_id} is finalized and locked")


class ConcurrentModification(AcceptanceError):
    code = "CONCURRENT_MODIFICATION"
    status_code = 409

    def __init__(self, entity: str, entity_id, expected=None, current=None):
        self.entity = entity
        self.entity_id = entity_id
        self.expected = expected
        self.current = current
        if expected is not None and current is not None:
            msg = f"{entity} {entity_id} is at version {current}, not {expected}"
        else:
            msg = f"{entity} {entity_id} was modified concurrently"
        super().__init__(msg)


class PersistenceFailure(AcceptanceError):
    """Erreur du store : remontée telle quelle, jamais retentée ici."""

    code = "PERSISTENCE_FAILURE"
    status_code = 503

    def __init__(self, cause: Exception):
        self.cause = cause
        super().__init__(f"{type(cause).__name__}: {cause}")
