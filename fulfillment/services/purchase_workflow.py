"""Purchase workflow service — the id-based entry point for callers.

Resolves purchases and workflows through the repository, delegates every
calculation to the pure modules (progress, customer_view, financials,
document_linker), and raises AppException subclasses for rule violations.

Rule: No FastAPI here. Mutations are validated before anything is written.
"""


import datetime as dt
import logging
from decimal import Decimal

from fulfillment.core.config import settings
from fulfillment.core.exceptions import NotFoundError, ValidationError
from fulfillment.core.pagination import PaginationParams
from fulfillment.domain.document import DocumentType, FileMetadata
from fulfillment.domain.purchase import PaymentMethod, Purchase, Shipment, ShipmentStatus
from fulfillment.domain.workflow import WORKFLOW_STAGES, ChecklistItem, PurchaseWorkflow
from fulfillment.repositories.purchase import PurchaseRepository
from fulfillment.services import customer_view, document_linker, financials, progress, shipping

logger = logging.getLogger(__name__)


class PurchaseWorkflowService:
    def __init__(self, repository: PurchaseRepository):
        self._repo = repository

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get_purchase(self, purchase_id: str) -> Purchase:
        purchase = self._repo.get_by_id(purchase_id)
        if not purchase:
            raise NotFoundError("Purchase", purchase_id)
        return purchase

    def get_purchase_by_workflow(self, workflow_id: str) -> Purchase:
        purchase = self._repo.get_by_workflow_id(workflow_id)
        if not purchase:
            raise NotFoundError("Workflow", workflow_id)
        return purchase

    def get_workflow(self, workflow_id: str) -> PurchaseWorkflow:
        return self.get_purchase_by_workflow(workflow_id).workflow

    def list_purchases(
        self, pagination: PaginationParams, payment_status: str | None = None
    ) -> tuple[list[Purchase], int]:
        filters = {"payment_status": payment_status} if payment_status else None
        return self._repo.list(
            offset=pagination.offset,
            limit=pagination.limit,
            order_by=pagination.sort,
            order=pagination.order,
            filters=filters,
        )

    # ------------------------------------------------------------------
    # Purchase lifecycle
    # ------------------------------------------------------------------

    def create_purchase(self, **data) -> Purchase:
        """Create a purchase with its workflow.

        ``is_registered`` falls back to ``settings.default_is_registered`` when
        the caller does not pass it at all.
        """
        data.setdefault("is_registered", settings.default_is_registered)
        if not data.get("currency"):
            data["currency"] = settings.default_currency
        purchase = Purchase.create(**data)
        self._repo.add(purchase)
        logger.info(
            "Created purchase %s (workflow %s, total %s %s)",
            purchase.id, purchase.workflow.id, purchase.total_amount, purchase.currency,
        )
        return purchase

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_task_progress(self, workflow_id: str) -> progress.TaskProgress:
        return progress.task_progress(self.get_workflow(workflow_id))

    def get_workflow_progress(self, workflow_id: str) -> int:
        purchase = self.get_purchase_by_workflow(workflow_id)
        if settings.workflow_progress_strategy == "completed_stages":
            return progress.completed_stage_progress(purchase)
        return progress.workflow_progress(purchase.workflow)

    def get_customer_stage(self, workflow_id: str) -> customer_view.CustomerStageView:
        return customer_view.customer_stage_view(self.get_workflow(workflow_id))

    def get_stage_overview(self, workflow_id: str) -> list[dict]:
        purchase = self.get_purchase_by_workflow(workflow_id)
        return [
            {
                "number": stage.number,
                "key": stage.key,
                "label": stage.label,
                "short_label": stage.short_label,
                "progress": progress.stage_progress(purchase.workflow, stage.number),
                "complete": progress.is_stage_complete(purchase, stage.number),
                "outstanding": progress.outstanding_tasks(purchase, stage.number),
            }
            for stage in WORKFLOW_STAGES
        ]

    def get_financial_summary(self, purchase_id: str) -> financials.FinancialSummary:
        return financials.financial_summary(self.get_purchase(purchase_id))

    def get_document_checklist(self, purchase_id: str) -> dict[DocumentType, bool]:
        return document_linker.document_checklist(self.get_purchase(purchase_id))

    # ------------------------------------------------------------------
    # Workflow mutations
    # ------------------------------------------------------------------

    def set_checklist_item(
        self,
        workflow_id: str,
        stage_key: str,
        item_key: str,
        completed: bool,
        completed_by: str | None,
        notes: str | None = None,
    ) -> ChecklistItem:
        workflow = self.get_workflow(workflow_id)
        item = workflow.get_checklist_item(stage_key, item_key)
        if completed:
            if not completed_by:
                raise ValidationError("completed_by is required to complete a task")
            item.mark_complete(completed_by, notes=notes)
        else:
            item.reset(notes=notes)
        workflow.touch()
        logger.info(
            "Workflow %s: %s.%s -> %s%s",
            workflow.id, stage_key, item_key,
            "completed" if completed else "open",
            f" by {completed_by}" if completed else "",
        )
        return item

    def set_documents_received_branch(
        self, workflow_id: str, is_registered: bool
    ) -> PurchaseWorkflow:
        workflow = self.get_workflow(workflow_id)
        if workflow.set_registration(is_registered):
            logger.info(
                "Workflow %s: documents branch switched to %s",
                workflow.id, "registered" if is_registered else "unregistered",
            )
        return workflow

    def set_current_stage(self, workflow_id: str, stage: int) -> PurchaseWorkflow:
        workflow = self.get_workflow(workflow_id)
        previous = workflow.current_stage
        workflow.set_current_stage(stage)
        logger.info("Workflow %s: stage %d -> %d", workflow.id, previous, stage)
        return workflow

    # ------------------------------------------------------------------
    # Documents, payments & shipment
    # ------------------------------------------------------------------

    def upload_document(
        self,
        purchase_id: str,
        files: list[FileMetadata],
        declared_type: str | DocumentType,
        uploaded_by: str,
    ) -> document_linker.UploadResult:
        purchase = self.get_purchase(purchase_id)
        return document_linker.link_documents(purchase, files, declared_type, uploaded_by)

    def delete_document(self, purchase_id: str, document_id: str) -> None:
        document_linker.delete_document(self.get_purchase(purchase_id), document_id)

    def record_payment(
        self,
        purchase_id: str,
        amount: Decimal,
        date: dt.date,
        *,
        method: PaymentMethod | None = None,
        reference_number: str | None = None,
        recorded_by: str | None = None,
        notes: str | None = None,
    ) -> financials.PaymentResult:
        purchase = self.get_purchase(purchase_id)
        return financials.record_payment(
            purchase,
            amount,
            date,
            method=method,
            reference_number=reference_number,
            recorded_by=recorded_by,
            notes=notes,
        )

    def update_shipment(
        self,
        purchase_id: str,
        *,
        carrier: str,
        tracking_number: str,
        status: ShipmentStatus = ShipmentStatus.PREPARING,
        current_location: str | None = None,
        estimated_delivery: dt.date | None = None,
        description: str | None = None,
    ) -> Shipment:
        purchase = self.get_purchase(purchase_id)
        return shipping.update_shipment(
            purchase,
            carrier=carrier,
            tracking_number=tracking_number,
            status=status,
            current_location=current_location,
            estimated_delivery=estimated_delivery,
            description=description,
        )
