"""Purchase router — creation, lookup, payments, shipment and documents.

Pattern:
  1. Inject the PurchaseWorkflowService via Depends(get_purchase_service)
  2. Call service methods and wrap results in the response envelope
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from fulfillment.core.pagination import PaginationParams
from fulfillment.core.response import DataResponse, ListResponse, paginated
from fulfillment.domain.document import DOCUMENT_TYPE_LABELS
from fulfillment.domain.purchase import PaymentStatus, Purchase, Shipment
from fulfillment.routers.dependencies import get_purchase_service
from fulfillment.schemas.purchase import (
    DocumentChecklistEntryOut,
    DocumentUpload,
    PaymentCreate,
    PurchaseCreate,
    PurchaseSummaryOut,
    ShipmentUpdate,
)
from fulfillment.services.document_linker import UploadResult
from fulfillment.services.financials import FinancialSummary, PaymentResult
from fulfillment.services.purchase_workflow import PurchaseWorkflowService

router = APIRouter(prefix="/purchases", tags=["Purchases"])


def _summary(purchase: Purchase) -> PurchaseSummaryOut:
    return PurchaseSummaryOut(
        id=purchase.id,
        winner_name=purchase.winner_name,
        vehicle_info=purchase.vehicle_info,
        destination_port=purchase.destination_port,
        currency=purchase.currency,
        total_amount=purchase.total_amount,
        paid_amount=purchase.paid_amount,
        payment_status=purchase.payment_status.value,
        workflow_id=purchase.workflow.id,
        current_stage=purchase.workflow.current_stage,
    )


def _apply_shipment(svc: PurchaseWorkflowService, purchase_id: str, body: ShipmentUpdate) -> Shipment:
    return svc.update_shipment(
        purchase_id,
        carrier=body.carrier,
        tracking_number=body.tracking_number,
        status=body.status,
        current_location=body.current_location,
        estimated_delivery=body.estimated_delivery,
        description=body.description,
    )


# ------------------------------------------------------------------
# Purchases
# ------------------------------------------------------------------

@router.get("", response_model=ListResponse[PurchaseSummaryOut])
async def list_purchases(
    payment_status: Optional[PaymentStatus] = Query(
        default=None, alias="paymentStatus", description="Filter by payment status",
    ),
    pagination: PaginationParams = Depends(),
    svc: PurchaseWorkflowService = Depends(get_purchase_service),
):
    """List purchases (paginated). Filter by ?paymentStatus=pending|partial|completed."""
    items, total = svc.list_purchases(
        pagination, payment_status=payment_status.value if payment_status else None,
    )
    return paginated([_summary(p) for p in items], total, pagination)


@router.post("", response_model=DataResponse[Purchase], status_code=status.HTTP_201_CREATED)
async def create_purchase(
    body: PurchaseCreate,
    svc: PurchaseWorkflowService = Depends(get_purchase_service),
):
    """Create a purchase together with its fresh workflow."""
    data = dict(body)
    if "is_registered" not in body.model_fields_set:
        data.pop("is_registered")
    shipment = data.pop("shipment")
    purchase = svc.create_purchase(**data)
    if shipment is not None:
        _apply_shipment(svc, purchase.id, shipment)
    return {"data": purchase}


@router.get("/{purchase_id}", response_model=DataResponse[Purchase])
async def get_purchase(
    purchase_id: str,
    svc: PurchaseWorkflowService = Depends(get_purchase_service),
):
    return {"data": svc.get_purchase(purchase_id)}


@router.get("/{purchase_id}/financials", response_model=DataResponse[FinancialSummary])
async def get_financials(
    purchase_id: str,
    svc: PurchaseWorkflowService = Depends(get_purchase_service),
):
    """Total, paid, outstanding balance and payment progress."""
    return {"data": svc.get_financial_summary(purchase_id)}


# ------------------------------------------------------------------
# Payments
# ------------------------------------------------------------------

@router.post(
    "/{purchase_id}/payments",
    response_model=DataResponse[PaymentResult],
    status_code=status.HTTP_201_CREATED,
)
async def record_payment(
    purchase_id: str,
    body: PaymentCreate,
    svc: PurchaseWorkflowService = Depends(get_purchase_service),
):
    """Record a payment. Overpayment succeeds with ``overpaid: true``."""
    result = svc.record_payment(
        purchase_id,
        body.amount,
        body.date,
        method=body.method,
        reference_number=body.reference_number,
        recorded_by=body.recorded_by,
        notes=body.notes,
    )
    return {"data": result}


# ------------------------------------------------------------------
# Shipment
# ------------------------------------------------------------------

@router.put("/{purchase_id}/shipment", response_model=DataResponse[Shipment])
async def update_shipment(
    purchase_id: str,
    body: ShipmentUpdate,
    svc: PurchaseWorkflowService = Depends(get_purchase_service),
):
    """Replace the tracking details; each update is appended to the event history."""
    return {"data": _apply_shipment(svc, purchase_id, body)}


# ------------------------------------------------------------------
# Documents
# ------------------------------------------------------------------

@router.post(
    "/{purchase_id}/documents",
    response_model=DataResponse[UploadResult],
    status_code=status.HTTP_201_CREATED,
)
async def upload_documents(
    purchase_id: str,
    body: DocumentUpload,
    svc: PurchaseWorkflowService = Depends(get_purchase_service),
):
    """Store a batch of file metadata under one declared document type."""
    result = svc.upload_document(purchase_id, body.files, body.declared_type, body.uploaded_by)
    return {"data": result}


@router.get(
    "/{purchase_id}/documents/checklist",
    response_model=DataResponse[list[DocumentChecklistEntryOut]],
)
async def get_document_checklist(
    purchase_id: str,
    svc: PurchaseWorkflowService = Depends(get_purchase_service),
):
    checklist = svc.get_document_checklist(purchase_id)
    return {
        "data": [
            DocumentChecklistEntryOut(
                type=doc_type.value, label=DOCUMENT_TYPE_LABELS[doc_type], present=present,
            )
            for doc_type, present in checklist.items()
        ]
    }


@router.delete("/{purchase_id}/documents/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_document(
    purchase_id: str,
    document_id: str,
    svc: PurchaseWorkflowService = Depends(get_purchase_service),
):
    """Hard-delete a document. Completed tasks stay completed."""
    svc.delete_document(purchase_id, document_id)
