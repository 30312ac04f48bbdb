from __future__ import annotations

from typing import Generator

from inbound.app.db.session import SessionLocal
from inbound.services.certificates import default_certificate_generator
from inbound.services.policies import default_field_policy, default_lock_policy, default_transition_policy
from inbound.services.signatures import default_signature_store


def get_db() -> Generator:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# Collaborateurs externes et policies : surchargeables via dependency_overrides
def get_signature_store():
    return default_signature_store()


def get_certificate_generator():
    return default_certificate_generator()


def get_field_policy():
    return default_field_policy()


def get_transition_policy():
    return default_transition_policy()


def get_lock_policy():
    return default_lock_policy()
