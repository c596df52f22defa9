"""
HTTP tests for the purchase and workflow routers.
Each test gets a fresh app, so every test starts with an empty repository.
"""
import pytest

API = "/api/v1"


@pytest.fixture
def created(client, purchase_payload) -> dict:
    resp = client.post(f"{API}/purchases", json=purchase_payload)
    assert resp.status_code == 201
    return resp.json()["data"]


class TestHealth:

    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"


class TestPurchases:

    def test_create_returns_camel_case_purchase(self, created):
        assert created["winnerName"] == "Keisha Brown"
        assert created["totalAmount"] == "23000"
        assert created["paidAmount"] == "0"
        assert created["paymentStatus"] == "pending"
        workflow = created["workflow"]
        assert workflow["currentStage"] == 1
        assert workflow["purchaseId"] == created["id"]
        assert workflow["stages"]["documentsReceived"]["isRegistered"] is True
        assert workflow["stages"]["documentsReceived"]["tasks"]["kind"] == "registered"

    def test_explicit_null_registration(self, client, purchase_payload):
        purchase_payload["isRegistered"] = None
        resp = client.post(f"{API}/purchases", json=purchase_payload)
        documents = resp.json()["data"]["workflow"]["stages"]["documentsReceived"]
        assert documents["isRegistered"] is None
        assert documents["tasks"] is None

    def test_get_and_list(self, client, created):
        resp = client.get(f"{API}/purchases/{created['id']}")
        assert resp.status_code == 200
        assert resp.json()["data"]["id"] == created["id"]

        resp = client.get(f"{API}/purchases", params={"paymentStatus": "pending"})
        body = resp.json()
        assert body["meta"] == {"total": 1, "page": 1, "limit": 20, "pages": 1}
        assert body["data"][0]["workflowId"] == created["workflow"]["id"]

    def test_list_filter_excludes_other_statuses(self, client, created):
        resp = client.get(f"{API}/purchases", params={"paymentStatus": "completed"})
        assert resp.json()["meta"]["total"] == 0
        assert resp.json()["meta"]["pages"] == 0

    def test_malformed_body_uses_error_envelope(self, client, purchase_payload):
        del purchase_payload["winnerName"]
        resp = client.post(f"{API}/purchases", json=purchase_payload)
        assert resp.status_code == 422
        error = resp.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert any(d["field"] == "winnerName" for d in error["details"])

    def test_unknown_route_is_404(self, client):
        resp = client.get(f"{API}/auctions")
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "NOT_FOUND"

    def test_unknown_purchase_is_404(self, client):
        resp = client.get(f"{API}/purchases/does-not-exist")
        assert resp.status_code == 404
        assert resp.json()["error"]["code"] == "NOT_FOUND"


class TestPayments:

    def test_record_payment_and_financials(self, client, created):
        pid = created["id"]
        resp = client.post(
            f"{API}/purchases/{pid}/payments",
            json={"amount": "9200", "date": "2026-03-01", "method": "bank_transfer"},
        )
        assert resp.status_code == 201
        data = resp.json()["data"]
        assert data["paymentStatus"] == "partial"
        assert data["overpaid"] is False
        assert data["payment"]["date"] == "2026-03-01"

        summary = client.get(f"{API}/purchases/{pid}/financials").json()["data"]
        assert summary["paymentProgress"] == 40
        assert summary["outstanding"] == "13800"

    def test_overpayment_is_accepted(self, client, created):
        resp = client.post(
            f"{API}/purchases/{created['id']}/payments",
            json={"amount": "24000", "date": "2026-03-01"},
        )
        assert resp.status_code == 201
        assert resp.json()["data"]["overpaid"] is True

    def test_zero_payment_is_rejected(self, client, created):
        resp = client.post(
            f"{API}/purchases/{created['id']}/payments",
            json={"amount": "0", "date": "2026-03-01"},
        )
        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "VALIDATION_ERROR"


class TestShipment:

    def test_update_and_read_back(self, client, created):
        pid = created["id"]
        resp = client.put(
            f"{API}/purchases/{pid}/shipment",
            json={
                "carrier": "Maersk",
                "trackingNumber": "MSK-4471",
                "status": "in_transit",
                "estimatedDelivery": "2026-05-20",
            },
        )
        assert resp.status_code == 200
        shipment = resp.json()["data"]
        assert shipment["trackingNumber"] == "MSK-4471"
        assert shipment["currentLocation"] == "Warehouse"
        assert shipment["estimatedDelivery"] == "2026-05-20"
        assert len(shipment["events"]) == 1

        purchase = client.get(f"{API}/purchases/{pid}").json()["data"]
        assert purchase["shipment"]["status"] == "in_transit"

    def test_second_update_appends_event(self, client, created):
        url = f"{API}/purchases/{created['id']}/shipment"
        client.put(url, json={"carrier": "Maersk", "trackingNumber": "MSK-4471"})
        resp = client.put(
            url,
            json={"carrier": "Maersk", "trackingNumber": "MSK-4471",
                  "status": "at_port", "currentLocation": "Kingston"},
        )
        events = resp.json()["data"]["events"]
        assert [e["status"] for e in events] == ["preparing", "at_port"]

    def test_create_with_initial_shipment(self, client, purchase_payload):
        purchase_payload["shipment"] = {"carrier": "NYK", "trackingNumber": "NYK-9"}
        resp = client.post(f"{API}/purchases", json=purchase_payload)
        assert resp.status_code == 201
        shipment = resp.json()["data"]["shipment"]
        assert shipment["carrier"] == "NYK"
        assert shipment["status"] == "preparing"

    def test_missing_tracking_number_is_422(self, client, created):
        resp = client.put(
            f"{API}/purchases/{created['id']}/shipment", json={"carrier": "Maersk"},
        )
        assert resp.status_code == 422
        error = resp.json()["error"]
        assert error["code"] == "VALIDATION_ERROR"
        assert any(d["field"] == "trackingNumber" for d in error["details"])

    def test_unknown_purchase_is_404(self, client):
        resp = client.put(
            f"{API}/purchases/nope/shipment",
            json={"carrier": "Maersk", "trackingNumber": "MSK-4471"},
        )
        assert resp.status_code == 404


class TestDocuments:

    def _upload(self, client, pid, doc_type, *names):
        return client.post(
            f"{API}/purchases/{pid}/documents",
            json={
                "declaredType": doc_type,
                "uploadedBy": "ops",
                "files": [{"name": n, "size": 2048} for n in names],
            },
        )

    def test_upload_completes_task(self, client, created):
        resp = self._upload(client, created["id"], "bill_of_lading", "bl.pdf")
        assert resp.status_code == 201
        data = resp.json()["data"]
        assert data["checklistUpdated"]["completed"] is True
        assert data["checklistUpdated"]["attachment"]["name"] == "bl.pdf"
        assert data["target"] == "booking.received_so"

    def test_unknown_type_is_422(self, client, created):
        resp = self._upload(client, created["id"], "passport", "p.pdf")
        assert resp.status_code == 422

    def test_checklist_and_delete(self, client, created):
        pid = created["id"]
        doc = self._upload(client, pid, "invoice", "inv.pdf").json()["data"]["documents"][0]

        entries = client.get(f"{API}/purchases/{pid}/documents/checklist").json()["data"]
        invoice = next(e for e in entries if e["type"] == "invoice")
        assert invoice == {"type": "invoice", "label": "Invoice", "present": True}

        resp = client.delete(f"{API}/purchases/{pid}/documents/{doc['id']}")
        assert resp.status_code == 204
        resp = client.delete(f"{API}/purchases/{pid}/documents/{doc['id']}")
        assert resp.status_code == 404


class TestWorkflows:

    def test_checklist_item_update(self, client, created):
        wid = created["workflow"]["id"]
        resp = client.put(
            f"{API}/workflows/{wid}/stages/transport/items/transportArranged",
            json={"completed": True, "completedBy": "ops"},
        )
        assert resp.status_code == 200
        item = resp.json()["data"]
        assert item["completed"] is True
        assert item["completedBy"] == "ops"
        assert item["completedAt"] is not None

        progress = client.get(f"{API}/workflows/{wid}/tasks/progress").json()["data"]
        assert progress == {"completed": 1, "total": 16, "percent": 6}

    def test_completing_without_user_is_422(self, client, created):
        wid = created["workflow"]["id"]
        resp = client.put(
            f"{API}/workflows/{wid}/stages/booking/items/receivedSO",
            json={"completed": True},
        )
        assert resp.status_code == 422

    def test_inactive_branch_item_is_409(self, client, created):
        wid = created["workflow"]["id"]
        client.put(f"{API}/workflows/{wid}/documents-received/branch", json={"isRegistered": False})
        resp = client.put(
            f"{API}/workflows/{wid}/stages/documentsReceived/items/deregistered",
            json={"completed": True, "completedBy": "ops"},
        )
        assert resp.status_code == 409
        assert resp.json()["error"]["code"] == "STATE_CONFLICT"

    def test_branch_switch(self, client, created):
        wid = created["workflow"]["id"]
        resp = client.put(
            f"{API}/workflows/{wid}/documents-received/branch", json={"isRegistered": False},
        )
        assert resp.status_code == 200
        documents = resp.json()["data"]["stages"]["documentsReceived"]
        assert documents["tasks"]["kind"] == "unregistered"
        assert client.get(f"{API}/workflows/{wid}/tasks/progress").json()["data"]["total"] == 12

    def test_current_stage_and_views(self, client, created):
        wid = created["workflow"]["id"]
        resp = client.put(f"{API}/workflows/{wid}/current-stage", json={"stage": 2})
        assert resp.json()["data"]["currentStage"] == 2

        progress = client.get(f"{API}/workflows/{wid}/progress").json()["data"]
        assert progress["percent"] == 25
        assert progress["strategy"] == "current_stage"

        view = client.get(f"{API}/workflows/{wid}/customer-stage").json()["data"]
        assert view["externalStage"] == 3
        assert view["progress"] == 38
        assert view["stages"][2]["status"] == "in-progress"

    def test_current_stage_out_of_range(self, client, created):
        wid = created["workflow"]["id"]
        resp = client.put(f"{API}/workflows/{wid}/current-stage", json={"stage": 9})
        assert resp.status_code == 422
        assert resp.json()["error"]["code"] == "VALIDATION_ERROR"

    def test_stage_overview(self, client, created):
        wid = created["workflow"]["id"]
        stages = client.get(f"{API}/workflows/{wid}/stages").json()["data"]
        assert len(stages) == 8
        assert stages[1]["shortLabel"]
        assert stages[1]["progress"] == {"completed": 0, "total": 3, "percent": 0}
        assert stages[2]["outstanding"] == ["No payment recorded"]

    def test_unknown_workflow_is_404(self, client):
        resp = client.get(f"{API}/workflows/missing")
        assert resp.status_code == 404
        assert "Workflow" in resp.json()["error"]["message"]
