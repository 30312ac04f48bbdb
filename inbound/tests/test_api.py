from decimal import Decimal


def _open(client, make_shipment, *delivered):
    shipment = make_shipment(*delivered)
    r = client.post(f"/v1/shipments/{shipment.id}/acceptance")
    assert r.status_code == 200, r.text
    return r.json()


def test_health(client):
    r = client.get("/v1/health")
    assert r.status_code == 200
    assert r.json() == {"ok": True}


def test_shipments_are_listed(client, make_shipment):
    shipment = make_shipment(10, 3)

    r = client.get("/v1/shipments")
    assert r.status_code == 200
    assert shipment.id in [s["id"] for s in r.json()]

    r = client.get(f"/v1/shipments/{shipment.id}")
    assert r.status_code == 200
    assert [ln["delivered_quantity"] for ln in r.json()["lines"]] == [10, 3]


def test_full_acceptance_and_rejection_flow(client, make_shipment, certificates, signatures):
    record = _open(client, make_shipment, 10, 4)
    rid = record["id"]
    first, second = record["items"]
    assert record["overall_status"] == "pending"
    assert record["version"] == 1

    # ouverture idempotente
    assert _open_again(client, record["shipment_id"])["id"] == rid

    r = client.put(
        f"/v1/acceptances/{rid}/items/{first['id']}",
        json={"accepted_quantity": 10, "rejected_quantity": 0, "version": 1},
    )
    assert r.status_code == 200, r.text
    assert r.json()["items"][0]["item_status"] == "accepted"
    assert r.json()["version"] == 2

    r = client.put(
        f"/v1/acceptances/{rid}",
        json={
            "accepted_by_name": "R. Store",
            "accepted_by_designation": "Store keeper",
            "signature": "data:image/png;base64,AAAA",
            "generate_certificate": True,
            "items": [
                {"id": second["id"], "accepted_quantity": 1, "rejected_quantity": 3, "rejection_reason": "dented"}
            ],
            "version": 2,
        },
    )
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["overall_status"] == "partially_accepted"
    assert body["is_finalized"] is True
    assert body["signature_ref"].startswith("sig:")
    assert certificates.generated == [rid]

    r = client.get(f"/v1/acceptances/{rid}/rejection")
    assert r.status_code == 200, r.text
    case = r.json()
    assert case["status"] == "pending"
    assert case["total_rejected_items"] == 1
    (disp,) = case["items"]
    assert disp["acceptance_item_id"] == second["id"]
    assert disp["return_status"] == "pending"
    assert disp["rejected_quantity"] == 3
    assert disp["rejection_reason"] == "dented"

    r = client.post(
        f"/v1/rejections/{case['id']}/contact-vendor",
        json={"message": "3 units dented, please collect", "contact_method": "email", "expected_response_date": ""},
    )
    assert r.status_code == 201, r.text
    assert r.json()["delivery_status"] == "sent"

    r = client.put(
        f"/v1/rejections/{case['id']}",
        json={
            "items": [
                {
                    "id": disp["id"],
                    "return_status": "non_returnable",
                    "inventory_location": "Bin A-12",
                    "cost_impact": "30.00",
                    "return_date": "",
                }
            ],
            "resolution_notes": "Kept for scrap",
        },
    )
    assert r.status_code == 200, r.text
    case = r.json()
    assert case["status"] == "resolved"
    assert Decimal(str(case["total_cost_impact"])) == Decimal("30")
    assert case["resolution_notes"] == "Kept for scrap"
    assert case["vendor_contacted_date"] is not None

    r = client.get(f"/v1/rejections/{case['id']}/communications")
    assert r.status_code == 200
    assert [c["message"] for c in r.json()] == ["3 units dented, please collect"]


def _open_again(client, shipment_id):
    r = client.post(f"/v1/shipments/{shipment_id}/acceptance")
    assert r.status_code == 200
    return r.json()


def test_quantity_out_of_range_is_422(client, make_shipment):
    record = _open(client, make_shipment, 10)
    item = record["items"][0]

    r = client.put(
        f"/v1/acceptances/{record['id']}/items/{item['id']}",
        json={"accepted_quantity": 6, "rejected_quantity": 6},
    )
    assert r.status_code == 422
    assert r.json()["code"] == "QUANTITY_OUT_OF_RANGE"

    r = client.get(f"/v1/acceptances/{record['id']}")
    assert r.json()["items"][0]["accepted_quantity"] == 0


def test_missing_acceptor_is_422(client, make_shipment):
    record = _open(client, make_shipment, 3)

    r = client.put(f"/v1/acceptances/{record['id']}", json={"accepted_by_name": "  "})
    assert r.status_code == 422
    assert r.json()["code"] == "MISSING_ACCEPTOR"

    r = client.get(f"/v1/acceptances/{record['id']}/rejection")
    assert r.status_code == 404


def test_unknown_ids_are_404(client):
    for url in ("/v1/shipments/999", "/v1/shipments/999/acceptance", "/v1/acceptances/999", "/v1/rejections/999"):
        r = client.get(url)
        assert r.status_code == 404, url
        assert r.json()["code"] == "NOT_FOUND"

    r = client.post("/v1/shipments/999/acceptance")
    assert r.status_code == 404


def test_stale_version_is_409(client, make_shipment):
    record = _open(client, make_shipment, 10)
    item = record["items"][0]
    url = f"/v1/acceptances/{record['id']}/items/{item['id']}"

    assert client.put(url, json={"accepted_quantity": 1, "rejected_quantity": 0, "version": 1}).status_code == 200

    r = client.put(url, json={"accepted_quantity": 2, "rejected_quantity": 0, "version": 1})
    assert r.status_code == 409
    assert r.json()["code"] == "CONCURRENT_MODIFICATION"


def _rejected_case(client, make_shipment):
    record = _open(client, make_shipment, 5)
    item = record["items"][0]
    r = client.put(
        f"/v1/acceptances/{record['id']}",
        json={
            "accepted_by_name": "R. Store",
            "items": [{"id": item["id"], "accepted_quantity": 0, "rejected_quantity": 5}],
        },
    )
    assert r.status_code == 200, r.text
    return client.get(f"/v1/acceptances/{record['id']}/rejection").json()


def test_disposition_missing_field_is_422(client, make_shipment):
    case = _rejected_case(client, make_shipment)
    disp = case["items"][0]

    r = client.put(f"/v1/rejections/{case['id']}", json={"items": [{"id": disp["id"], "return_status": "replaced"}]})
    assert r.status_code == 422
    body = r.json()
    assert body["code"] == "DISPOSITION_INVALID"
    assert body["errors"][0]["field"] == "replacement_date"


def test_negative_cost_impact_is_rejected(client, make_shipment):
    case = _rejected_case(client, make_shipment)
    disp = case["items"][0]

    r = client.put(f"/v1/rejections/{case['id']}", json={"items": [{"id": disp["id"], "cost_impact": "-1"}]})
    assert r.status_code == 422


def test_empty_vendor_message_is_422(client, make_shipment):
    case = _rejected_case(client, make_shipment)

    r = client.post(f"/v1/rejections/{case['id']}/contact-vendor", json={"message": "", "contact_method": "phone"})
    assert r.status_code == 422
    assert r.json()["code"] == "EMPTY_MESSAGE"

    assert client.get(f"/v1/rejections/{case['id']}/communications").json() == []


def test_certificate_endpoint(client, make_shipment, certificates):
    record = _open(client, make_shipment, 2)
    url = f"/v1/acceptances/{record['id']}/certificate"

    r = client.post(url)
    assert r.status_code == 409
    assert r.json()["code"] == "NOT_FINALIZED"
    assert certificates.generated == []

    client.put(f"/v1/acceptances/{record['id']}", json={"accepted_by_name": "R. Store"})
    r = client.post(url)
    assert r.status_code == 201, r.text
    assert r.json() == {"acceptance_id": record["id"], "certificate_ref": f"cert:{record['id']}"}


def test_store_failure_is_503(client, make_shipment, fail_statements):
    record = _open(client, make_shipment, 10)
    item = record["items"][0]
    fail_statements("UPDATE acceptance_items")

    r = client.put(
        f"/v1/acceptances/{record['id']}/items/{item['id']}",
        json={"accepted_quantity": 4, "rejected_quantity": 1},
    )
    assert r.status_code == 503
    body = r.json()
    assert body["code"] == "PERSISTENCE_FAILURE"
    assert "db down" in body["detail"]

    r = client.get(f"/v1/acceptances/{record['id']}")
    assert r.json()["items"][0]["accepted_quantity"] == 0
    assert r.json()["version"] == 1
