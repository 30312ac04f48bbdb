from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from inbound.services.errors import ConcurrentModification, NotFound, PersistenceFailure

logger = logging.getLogger(__name__)


def check_version(entity: str, obj, expected_version: int | None) -> None:
    if expected_version is None:
        return
    if int(obj.version) != int(expected_version):
        logger.warning("stale %s %s: expected version %s, current %s", entity, obj.id, expected_version, obj.version)
        raise ConcurrentModification(entity, obj.id, expected=expected_version, current=obj.version)


def commit(db: Session, entity: str, entity_id) -> None:
    """
    Commit unique par opération.

    - StaleDataError (version_id_col) -> ConcurrentModification
    - toute autre erreur SQLAlchemy   -> PersistenceFailure (pas de retry)
    Le rollback remet la session dans l'état d'avant l'appel.
    """
    try:
        db.commit()
    except StaleDataError:
        db.rollback()
        logger.warning("concurrent update on %s %s", entity, entity_id)
        raise ConcurrentModification(entity, entity_id)
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceFailure(e) from e


def load(db: Session, model, entity: str, entity_id):
    try:
        obj = db.get(model, entity_id)
    except SQLAlchemyError as e:
        db.rollback()
        raise PersistenceFailure(e) from e
    if obj is None:
        raise NotFound(entity, entity_id)
    return obj
