from datetime import date

import pytest
from sqlalchemy import select

from inbound.app.db.models.core_types import ContactMethod, DeliveryStatus, RejectionCaseStatus
from inbound.app.db.models.models_v1 import CommunicationEntry, RejectionCase
from inbound.app.schemas.acceptance import AcceptanceSave, ItemQuantitiesSave
from inbound.services.acceptance import save_acceptance
from inbound.services.errors import EmptyMessage, NotFound, UnknownContactMethod
from inbound.services.rejections import get_case_for_acceptance
from inbound.services.vendor_comms import append_communication, list_communications


@pytest.fixture
def case(db_session, make_record):
    record = make_record(6)
    changes = AcceptanceSave(
        accepted_by_name="R. Store",
        items=[ItemQuantitiesSave(id=record.items[0].id, accepted_quantity=4, rejected_quantity=2)],
    )
    save_acceptance(db_session, record_id=record.id, changes=changes)
    return get_case_for_acceptance(db_session, record.id)


@pytest.mark.parametrize("message", ["", "   ", "\n\t"])
def test_empty_message_is_refused(db_session, case, message):
    with pytest.raises(EmptyMessage):
        append_communication(db_session, case_id=case.id, method=ContactMethod.email, message=message)

    assert db_session.execute(select(CommunicationEntry)).scalars().all() == []
    assert case.vendor_contacted_date is None
    assert case.status == RejectionCaseStatus.pending


def test_append_creates_sent_entry(db_session, case):
    entry = append_communication(
        db_session,
        case_id=case.id,
        method=ContactMethod.whatsapp,
        message="2 units damaged, please advise",
        expected_response_date=date(2026, 6, 1),
    )

    assert entry.id is not None
    assert entry.delivery_status == DeliveryStatus.sent
    assert entry.method == ContactMethod.whatsapp
    assert entry.expected_response_date == date(2026, 6, 1)
    assert entry.supplier_id == case.acceptance.shipment.purchase_order.supplier_id
    assert case.vendor_contacted_date == entry.sent_at
    assert case.status == RejectionCaseStatus.processing


def test_method_given_as_text(db_session, case):
    entry = append_communication(db_session, case_id=case.id, method="phone", message="Called the desk")
    assert entry.method == ContactMethod.phone


def test_log_is_append_only(db_session, case):
    first = append_communication(db_session, case_id=case.id, method="email", message="First notice")
    first_sent_at = first.sent_at

    second = append_communication(db_session, case_id=case.id, method="phone", message="Follow-up call")

    db_session.expire_all()
    entries = list_communications(db_session, case_id=case.id)
    assert [e.id for e in entries] == [first.id, second.id]
    assert entries[0].message == "First notice"
    assert entries[0].method == ContactMethod.email
    assert entries[0].sent_at == first_sent_at

    # le dossier garde la date du dernier envoi
    case = db_session.get(RejectionCase, case.id)
    assert case.vendor_contacted_date == entries[1].sent_at
    assert [e.id for e in case.communications] == [first.id, second.id]


def test_unknown_case(db_session):
    with pytest.raises(NotFound):
        append_communication(db_session, case_id=777, method="email", message="hello")
    with pytest.raises(NotFound):
        list_communications(db_session, case_id=777)


def test_unknown_method_is_a_domain_error(db_session, case):
    with pytest.raises(UnknownContactMethod) as exc:
        append_communication(db_session, case_id=case.id, method="fax", message="hello")

    assert exc.value.status_code == 422
    assert exc.value.payload()["code"] == "UNKNOWN_CONTACT_METHOD"
    assert list_communications(db_session, case_id=case.id) == []
    assert case.vendor_contacted_date is None
