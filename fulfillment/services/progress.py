"""Completion & progress calculations over a purchase workflow.

Everything here is pure: no mutation, no I/O, same answer for the same input.
Missing optional parts of a workflow (unset registration branch, repair or
DHL stage not required) count as "not applicable", never as errors.

Two percentages are exposed and must not be conflated:
  workflow_progress         — position in the pipeline (currentStage / 8)
  completed_stage_progress  — share of stages whose tasks are all done
"""


from decimal import ROUND_HALF_UP, Decimal

from pydantic import computed_field

from fulfillment.domain.mixins import DomainModel
from fulfillment.domain.purchase import Purchase
from fulfillment.domain.workflow import (
    TOTAL_STAGES,
    WORKFLOW_STAGES,
    PurchaseWorkflow,
    stage_key_for,
)

# ---------------------------------------------------------------------------
# Task labels (used for outstanding-task messages)
# ---------------------------------------------------------------------------

TASK_LABELS: dict[str, str] = {
    "payment_to_auction_house": "Payment to auction house not confirmed",
    "transport_arranged": "Transport not arranged",
    "yard_notified": "Yard not notified",
    "photos_requested": "Photos not requested",
    "marked_complete": "Repair/storage not marked as complete",
    "received_number_plates": "Number plates not received",
    "deregistered": "Vehicle not deregistered",
    "export_certificate_created": "Export certificate not created",
    "sent_deregistration_copy": "Deregistration copy not sent",
    "insurance_refund_received": "Insurance refund not received",
    "booking_requested": "Booking not requested",
    "sent_si_and_ec": "SI and EC not sent",
    "received_so": "SO not received",
    "bl_paid": "B/L not paid",
    "recycle_applied": "Recycle not applied",
    "documents_sent": "Documents not sent via DHL",
}

_PAYMENT_STAGE = 3
_DOCUMENTS_STAGE = 5


class TaskProgress(DomainModel):
    completed: int = 0
    total: int = 0

    model_config = {**DomainModel.model_config, "frozen": True}

    @computed_field  # type: ignore[prop-decorator]
    @property
    def percent(self) -> int:
        return round_percent(self.completed, self.total)

    def __add__(self, other: "TaskProgress") -> "TaskProgress":
        return TaskProgress(
            completed=self.completed + other.completed,
            total=self.total + other.total,
        )


def round_percent(part, whole) -> int:
    """``part / whole`` as a whole percentage, halves rounded up; 0 when whole is 0."""
    if not whole:
        return 0
    ratio = Decimal(str(part)) * 100 / Decimal(str(whole))
    return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


# ---------------------------------------------------------------------------
# Checklist progress
# ---------------------------------------------------------------------------

def stage_progress(workflow: PurchaseWorkflow, stage_number: int) -> TaskProgress:
    """Completed vs. present checklist items of a single stage."""
    items = workflow.checklist(stage_key_for(stage_number))
    return TaskProgress(
        completed=sum(1 for item in items.values() if item.completed),
        total=len(items),
    )


def task_progress(workflow: PurchaseWorkflow) -> TaskProgress:
    """Completed vs. present checklist items across the whole workflow."""
    result = TaskProgress()
    for stage in WORKFLOW_STAGES:
        result = result + stage_progress(workflow, stage.number)
    return result


def workflow_progress(workflow: PurchaseWorkflow) -> int:
    """Pipeline position of the internal current stage, 0-100."""
    return round_percent(workflow.current_stage, TOTAL_STAGES)


# ---------------------------------------------------------------------------
# Stage completion
# ---------------------------------------------------------------------------

def is_stage_complete(purchase: Purchase, stage_number: int) -> bool:
    """All present items done. The payment stage only needs one recorded payment."""
    if stage_number == _PAYMENT_STAGE:
        return len(purchase.payments) > 0
    workflow = purchase.workflow
    if (
        stage_number == _DOCUMENTS_STAGE
        and workflow.stages.documents_received.is_registered is None
    ):
        return False
    progress = stage_progress(workflow, stage_number)
    return progress.completed == progress.total


def completed_stage_progress(purchase: Purchase) -> int:
    """Share of the eight stages that are fully complete, 0-100."""
    done = sum(1 for s in WORKFLOW_STAGES if is_stage_complete(purchase, s.number))
    return round_percent(done, TOTAL_STAGES)


def outstanding_tasks(purchase: Purchase, stage_number: int) -> list[str]:
    """Human-readable reasons why a stage is not complete yet."""
    key = stage_key_for(stage_number)
    if stage_number == _PAYMENT_STAGE:
        return [] if purchase.payments else ["No payment recorded"]

    workflow = purchase.workflow
    if (
        stage_number == _DOCUMENTS_STAGE
        and workflow.stages.documents_received.is_registered is None
    ):
        return ["Vehicle registration status not set"]

    return [
        TASK_LABELS.get(name, name)
        for name, item in workflow.checklist(key).items()
        if not item.completed
    ]
