import itertools
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from inbound.app.api import deps
from inbound.app.db.base import Base
from inbound.app.db.models.models_v1 import PurchaseOrder, Shipment, ShipmentLine, Supplier
from inbound.app.main import app
from inbound.services.acceptance import open_acceptance
from inbound.services.policies import DispositionFieldPolicy, RecordLockPolicy, TransitionPolicy
from inbound.services.signatures import FileSignatureStore


class RecordingCertificates:
    """Générateur de certificat factice : enregistre les ids au lieu d'écrire un PDF."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.generated = []

    def generate(self, record) -> str:
        if self.fail:
            raise RuntimeError("certificate backend down")
        self.generated.append(record.id)
        return f"cert:{record.id}"


@pytest.fixture(scope="function")
def engine():
    """
    Base SQLite en mémoire, recréée pour chaque test.
    StaticPool : une seule connexion partagée (sinon chaque connexion = base vide).
    """
    eng = create_engine(
        "sqlite+pysqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=eng)
    try:
        yield eng
    finally:
        Base.metadata.drop_all(bind=eng)
        eng.dispose()


@pytest.fixture(scope="function")
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False)


@pytest.fixture(scope="function")
def db_session(session_factory) -> Session:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def signatures(tmp_path):
    return FileSignatureStore(str(tmp_path / "signatures"))


@pytest.fixture
def certificates():
    return RecordingCertificates()


@pytest.fixture
def make_shipment(db_session):
    """make_shipment(10, 3) -> livraison de 2 lignes (delivered 10 et 3)."""
    seq = itertools.count(1)

    def _make(*delivered: int) -> Shipment:
        n = next(seq)
        supplier = Supplier(name=f"TEST-SUP-{n}", email=f"sup{n}@example.test", phone="000")
        po = PurchaseOrder(po_number=f"TEST-PO-{n}", supplier=supplier)
        shipment = Shipment(
            purchase_order=po,
            challan_number=f"TEST-DC-{n}",
            delivery_address="Dock 1",
            contact_person="Receiving",
            lines=[
                ShipmentLine(
                    line_no=i,
                    description=f"Item {i}",
                    unit_price=Decimal("10.00"),
                    delivered_quantity=qty,
                )
                for i, qty in enumerate(delivered, start=1)
            ],
        )
        db_session.add(shipment)
        db_session.commit()
        return shipment

    return _make


@pytest.fixture
def make_record(db_session, make_shipment):
    def _make(*delivered: int):
        shipment = make_shipment(*delivered)
        return open_acceptance(db_session, shipment_id=shipment.id)

    return _make


@pytest.fixture
def client(session_factory, signatures, certificates):
    def _get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[deps.get_db] = _get_db
    app.dependency_overrides[deps.get_signature_store] = lambda: signatures
    app.dependency_overrides[deps.get_certificate_generator] = lambda: certificates
    app.dependency_overrides[deps.get_field_policy] = lambda: DispositionFieldPolicy()
    app.dependency_overrides[deps.get_transition_policy] = lambda: TransitionPolicy("free")
    app.dependency_overrides[deps.get_lock_policy] = lambda: RecordLockPolicy(enabled=False)
    try:
        with TestClient(app) as c:
            yield c
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def fail_statements(engine):
    """
    fail_statements("UPDATE acceptance_records") : toute requête qui commence
    par ce préfixe lève OperationalError, comme une base tombée.
    """
    listeners = []

    def _install(prefix: str):
        def _before(conn, cursor, statement, parameters, context, executemany):
            if statement.lstrip().upper().startswith(prefix.upper()):
                raise OperationalError(statement, parameters, Exception("db down"))

        event.listen(engine, "before_cursor_execute", _before)
        listeners.append(_before)

    yield _install

    for fn in listeners:
        event.remove(engine, "before_cursor_execute", fn)
