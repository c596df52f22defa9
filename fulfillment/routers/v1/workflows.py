"""Workflow router — checklist items, registration branch, stage and progress views."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from fulfillment.core.config import settings
from fulfillment.core.response import DataResponse
from fulfillment.domain.workflow import ChecklistItem, PurchaseWorkflow
from fulfillment.routers.dependencies import get_purchase_service
from fulfillment.schemas.purchase import (
    BranchUpdate,
    ChecklistItemUpdate,
    StageOverviewOut,
    StageUpdate,
    WorkflowProgressOut,
)
from fulfillment.services.customer_view import CustomerStageView
from fulfillment.services.progress import TaskProgress
from fulfillment.services.purchase_workflow import PurchaseWorkflowService

router = APIRouter(prefix="/workflows", tags=["Workflows"])


# ------------------------------------------------------------------
# Reads
# ------------------------------------------------------------------

@router.get("/{workflow_id}", response_model=DataResponse[PurchaseWorkflow])
async def get_workflow(
    workflow_id: str,
    svc: PurchaseWorkflowService = Depends(get_purchase_service),
):
    return {"data": svc.get_workflow(workflow_id)}


@router.get("/{workflow_id}/tasks/progress", response_model=DataResponse[TaskProgress])
async def get_task_progress(
    workflow_id: str,
    svc: PurchaseWorkflowService = Depends(get_purchase_service),
):
    """Completed vs. present checklist items across all stages."""
    return {"data": svc.get_task_progress(workflow_id)}


@router.get("/{workflow_id}/progress", response_model=DataResponse[WorkflowProgressOut])
async def get_workflow_progress(
    workflow_id: str,
    svc: PurchaseWorkflowService = Depends(get_purchase_service),
):
    """Internal pipeline percentage (see WORKFLOW_PROGRESS_STRATEGY)."""
    workflow = svc.get_workflow(workflow_id)
    return {
        "data": WorkflowProgressOut(
            workflow_id=workflow.id,
            current_stage=workflow.current_stage,
            strategy=settings.workflow_progress_strategy,
            percent=svc.get_workflow_progress(workflow_id),
        )
    }


@router.get("/{workflow_id}/customer-stage", response_model=DataResponse[CustomerStageView])
async def get_customer_stage(
    workflow_id: str,
    svc: PurchaseWorkflowService = Depends(get_purchase_service),
):
    """Stage view as shown to the buyer (payment before transport)."""
    return {"data": svc.get_customer_stage(workflow_id)}


@router.get("/{workflow_id}/stages", response_model=DataResponse[list[StageOverviewOut]])
async def get_stage_overview(
    workflow_id: str,
    svc: PurchaseWorkflowService = Depends(get_purchase_service),
):
    """Per-stage label, task progress, completion and outstanding tasks."""
    return {"data": svc.get_stage_overview(workflow_id)}


# ------------------------------------------------------------------
# Mutations
# ------------------------------------------------------------------

@router.put(
    "/{workflow_id}/stages/{stage_key}/items/{item_key}",
    response_model=DataResponse[ChecklistItem],
)
async def set_checklist_item(
    workflow_id: str,
    stage_key: str,
    item_key: str,
    body: ChecklistItemUpdate,
    svc: PurchaseWorkflowService = Depends(get_purchase_service),
):
    item = svc.set_checklist_item(
        workflow_id, stage_key, item_key, body.completed, body.completed_by, body.notes,
    )
    return {"data": item}


@router.put("/{workflow_id}/documents-received/branch", response_model=DataResponse[PurchaseWorkflow])
async def set_documents_received_branch(
    workflow_id: str,
    body: BranchUpdate,
    svc: PurchaseWorkflowService = Depends(get_purchase_service),
):
    """Switch between registered/unregistered task sets; the other set is discarded."""
    return {"data": svc.set_documents_received_branch(workflow_id, body.is_registered)}


@router.put("/{workflow_id}/current-stage", response_model=DataResponse[PurchaseWorkflow])
async def set_current_stage(
    workflow_id: str,
    body: StageUpdate,
    svc: PurchaseWorkflowService = Depends(get_purchase_service),
):
    """Move the workflow to any stage 1-8, regardless of task completion."""
    return {"data": svc.set_current_stage(workflow_id, body.stage)}
