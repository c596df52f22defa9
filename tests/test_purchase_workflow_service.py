"""
Tests for PurchaseWorkflowService: id-based access to purchases and workflows.
"""
import datetime as dt
from decimal import Decimal

import pytest

from fulfillment.core.config import settings
from fulfillment.core.exceptions import NotFoundError, StateConflictError, ValidationError
from fulfillment.core.pagination import PaginationParams
from fulfillment.domain.document import DocumentType, FileMetadata
from fulfillment.domain.purchase import PaymentStatus, ShipmentStatus, VehicleInfo


def _create(service, **overrides):
    data = {
        "vehicle_info": VehicleInfo(make="Honda", model="Fit", year=2018, vin="GK3-1234567"),
        "winner_name": "Tomas Silva",
        "winning_bid": Decimal("6000"),
        "shipping_cost": Decimal("1200"),
        "insurance_fee": Decimal("200"),
    }
    data.update(overrides)
    return service.create_purchase(**data)


def _page(**kwargs):
    params = {"page": 1, "limit": 20, "sort": "created_at", "order": "desc"}
    params.update(kwargs)
    return PaginationParams(**params)


class TestLookup:

    def test_purchase_and_workflow_resolve_to_each_other(self, service):
        purchase = _create(service)
        assert service.get_purchase(purchase.id) is purchase
        assert service.get_purchase_by_workflow(purchase.workflow.id) is purchase
        assert service.get_workflow(purchase.workflow.id) is purchase.workflow

    def test_unknown_purchase(self, service):
        with pytest.raises(NotFoundError):
            service.get_purchase("nope")

    def test_unknown_workflow(self, service):
        with pytest.raises(NotFoundError) as exc:
            service.get_task_progress("nope")
        assert "Workflow" in exc.value.message

    def test_list_filters_by_payment_status(self, service):
        paid = _create(service)
        _create(service)
        service.record_payment(paid.id, paid.total_amount, dt.date(2026, 1, 5))

        items, total = service.list_purchases(_page(), payment_status="completed")
        assert total == 1
        assert items == [paid]

    def test_list_paginates(self, service):
        for _ in range(3):
            _create(service)
        items, total = service.list_purchases(_page(limit=2, page=2))
        assert total == 3
        assert len(items) == 1


class TestCreatePurchase:

    def test_total_and_fresh_workflow(self, service):
        purchase = _create(service)
        assert purchase.total_amount == Decimal("7400")
        assert purchase.currency == settings.default_currency
        assert service.get_task_progress(purchase.workflow.id).total == 16

    def test_missing_registration_uses_configured_default(self, service, monkeypatch):
        monkeypatch.setattr(settings, "default_is_registered", False)
        purchase = _create(service)
        assert purchase.workflow.stages.documents_received.is_registered is False

    def test_explicit_none_leaves_branch_undecided(self, service):
        purchase = _create(service, is_registered=None)
        assert purchase.workflow.stages.documents_received.is_registered is None
        assert service.get_task_progress(purchase.workflow.id).total == 11


class TestChecklistUpdates:

    def test_complete_and_reopen(self, service):
        purchase = _create(service)
        wid = purchase.workflow.id

        item = service.set_checklist_item(wid, "transport", "yardNotified", True, "ops", "left voicemail")
        assert item.completed and item.completed_by == "ops"
        assert service.get_task_progress(wid).completed == 1

        item = service.set_checklist_item(wid, "transport", "yardNotified", False, None)
        assert not item.completed
        assert item.completed_at is None
        assert service.get_task_progress(wid).completed == 0

    def test_completing_requires_user(self, service):
        purchase = _create(service)
        with pytest.raises(ValidationError):
            service.set_checklist_item(purchase.workflow.id, "booking", "receivedSO", True, None)
        assert not purchase.workflow.stages.booking.received_so.completed

    def test_inactive_branch_item_conflicts(self, service):
        purchase = _create(service, is_registered=False)
        with pytest.raises(StateConflictError):
            service.set_checklist_item(
                purchase.workflow.id, "documentsReceived", "insuranceRefundReceived", True, "ops",
            )

    def test_update_touches_workflow(self, service):
        purchase = _create(service)
        before = purchase.workflow.updated_at
        service.set_checklist_item(purchase.workflow.id, "shipped", "blPaid", True, "ops")
        assert purchase.workflow.updated_at >= before


class TestBranchAndStage:

    def test_switch_branch_changes_totals(self, service):
        purchase = _create(service)
        wid = purchase.workflow.id
        service.set_documents_received_branch(wid, False)
        assert service.get_task_progress(wid).total == 12

    def test_set_current_stage_and_progress(self, service):
        purchase = _create(service)
        wid = purchase.workflow.id
        service.set_current_stage(wid, 5)
        assert service.get_workflow_progress(wid) == 63
        assert service.get_customer_stage(wid).external_stage == 5

    def test_set_current_stage_out_of_range(self, service):
        purchase = _create(service)
        with pytest.raises(ValidationError):
            service.set_current_stage(purchase.workflow.id, 0)

    def test_completed_stages_strategy(self, service, monkeypatch):
        monkeypatch.setattr(settings, "workflow_progress_strategy", "completed_stages")
        purchase = _create(service, requires_repair_stage=False)
        wid = purchase.workflow.id
        service.set_current_stage(wid, 8)
        # only the absent repair stage counts as done
        assert service.get_workflow_progress(wid) == 13

    def test_stage_overview(self, service):
        purchase = _create(service)
        overview = service.get_stage_overview(purchase.workflow.id)
        assert [row["number"] for row in overview] == list(range(1, 9))
        payment = overview[2]
        assert payment["key"] == "payment"
        assert payment["complete"] is False
        assert payment["outstanding"] == ["No payment recorded"]


class TestDocumentsAndPayments:

    def test_upload_through_service(self, service):
        purchase = _create(service)
        result = service.upload_document(
            purchase.id, [FileMetadata(name="ec.pdf", size=2048)], "export_certificate", "ops",
        )
        assert result.checklist_updated is not None
        checklist = service.get_document_checklist(purchase.id)
        assert checklist[DocumentType.EXPORT_CERTIFICATE] is True

    def test_delete_document(self, service):
        purchase = _create(service)
        doc = service.upload_document(
            purchase.id, [FileMetadata(name="photo.jpg")], "other", "ops",
        ).documents[0]
        service.delete_document(purchase.id, doc.id)
        assert purchase.documents == []

    def test_payment_and_summary(self, service):
        purchase = _create(service)
        result = service.record_payment(purchase.id, Decimal("3700"), dt.date(2026, 2, 1))
        assert result.payment_status == PaymentStatus.PARTIAL
        summary = service.get_financial_summary(purchase.id)
        assert summary.payment_progress == 50
        assert summary.outstanding == Decimal("3700")

    def test_payment_on_unknown_purchase(self, service):
        with pytest.raises(NotFoundError):
            service.record_payment("nope", Decimal("1"), dt.date(2026, 2, 1))

    def test_update_shipment(self, service):
        purchase = _create(service)
        shipment = service.update_shipment(
            purchase.id, carrier="Maersk", tracking_number="MSK-4471",
            status=ShipmentStatus.AT_PORT, current_location="Durban",
        )
        assert service.get_purchase(purchase.id).shipment is shipment
        assert shipment.events[0].location == "Durban"

    def test_shipment_on_unknown_purchase(self, service):
        with pytest.raises(NotFoundError):
            service.update_shipment("nope", carrier="Maersk", tracking_number="MSK-4471")
