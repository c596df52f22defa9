"""Purchase workflow: eight fulfillment stages made of checklist items.

Stage layout (number -> key):
  1 after_purchase      payment_to_auction_house + invoice / cost-invoice trail
  2 transport           transport_arranged, yard_notified, photos_requested
  3 payment             no checklist; tracked on the Purchase itself
  4 repair_stored       marked_complete (only when requires_repair_stage)
  5 documents_received  registered or unregistered task branch
  6 booking             booking_requested, sent_si_and_ec, received_so
  7 shipped             bl_paid, recycle_applied
  8 dhl_documents       documents_sent (only when requires_dhl_documents)
"""

from __future__ import annotations

import re
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Literal, NamedTuple, Union

from pydantic import Field, computed_field, model_validator

from fulfillment.core.exceptions import StateConflictError, ValidationError
from fulfillment.domain.document import Document
from fulfillment.domain.mixins import DomainModel, TimestampMixin, _new_id, _now

TOTAL_STAGES = 8


class StageInfo(NamedTuple):
    number: int
    key: str
    label: str
    short_label: str


WORKFLOW_STAGES: tuple[StageInfo, ...] = (
    StageInfo(1, "after_purchase", "After Purchase", "Purchase"),
    StageInfo(2, "transport", "Transport", "Transport"),
    StageInfo(3, "payment", "Payment Processing", "Payment"),
    StageInfo(4, "repair_stored", "Repair/Stored", "Repair"),
    StageInfo(5, "documents_received", "Documents Received", "Documents"),
    StageInfo(6, "booking", "Booking", "Booking"),
    StageInfo(7, "shipped", "Shipped", "Shipped"),
    StageInfo(8, "dhl_documents", "DHL Documents", "DHL"),
)

REGISTERED_TASK_KEYS: tuple[str, ...] = (
    "received_number_plates",
    "deregistered",
    "export_certificate_created",
    "sent_deregistration_copy",
    "insurance_refund_received",
)
UNREGISTERED_TASK_KEYS: tuple[str, ...] = ("export_certificate_created",)

# Every checklist key a stage can ever hold, regardless of branch or flags.
CHECKLIST_KEYS: dict[str, tuple[str, ...]] = {
    "after_purchase": ("payment_to_auction_house",),
    "transport": ("transport_arranged", "yard_notified", "photos_requested"),
    "payment": (),
    "repair_stored": ("marked_complete",),
    "documents_received": REGISTERED_TASK_KEYS,
    "booking": ("booking_requested", "sent_si_and_ec", "received_so"),
    "shipped": ("bl_paid", "recycle_applied"),
    "dhl_documents": ("documents_sent",),
}

_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")
_CAMEL_BOUNDARY = re.compile(r"([a-z0-9])([A-Z])")


def to_snake_key(key: str) -> str:
    """``sentSIAndEC`` -> ``sent_si_and_ec``; snake_case passes through."""
    snake = _ACRONYM_BOUNDARY.sub(r"\1_\2", key.strip())
    snake = _CAMEL_BOUNDARY.sub(r"\1_\2", snake)
    return snake.replace("-", "_").lower()


def normalize_stage_key(stage_key: str) -> str:
    key = to_snake_key(stage_key)
    if key not in CHECKLIST_KEYS:
        raise ValidationError(f"Unknown workflow stage '{stage_key}'")
    return key


def stage_key_for(stage_number: int) -> str:
    if not 1 <= stage_number <= TOTAL_STAGES:
        raise ValidationError(
            f"Stage must be between 1 and {TOTAL_STAGES}, got {stage_number}"
        )
    return WORKFLOW_STAGES[stage_number - 1].key


def stage_label(stage_number: int) -> str:
    if not 1 <= stage_number <= TOTAL_STAGES:
        return ""
    return WORKFLOW_STAGES[stage_number - 1].label


# ---------------------------------------------------------------------------
# Checklist item
# ---------------------------------------------------------------------------

class ChecklistItem(DomainModel):
    """Atomic completable task. completed_at/completed_by exist iff completed."""

    completed: bool = False
    completed_at: datetime | None = None
    completed_by: str | None = None
    notes: str | None = None
    attachment: Document | None = None

    @model_validator(mode="after")
    def _check_completion_stamp(self) -> "ChecklistItem":
        if self.completed:
            if self.completed_at is None or not self.completed_by:
                raise ValueError("a completed item needs completed_at and completed_by")
        elif self.completed_at is not None or self.completed_by is not None:
            raise ValueError("an open item cannot carry completed_at or completed_by")
        return self

    def mark_complete(
        self,
        completed_by: str,
        notes: str | None = None,
        attachment: Document | None = None,
    ) -> None:
        if not completed_by:
            raise ValidationError("completed_by is required to complete a task")
        self.completed = True
        self.completed_at = _now()
        self.completed_by = completed_by
        if notes is not None:
            self.notes = notes
        if attachment is not None:
            self.attachment = attachment

    def reset(self, notes: str | None = None) -> None:
        self.completed = False
        self.completed_at = None
        self.completed_by = None
        self.attachment = None
        if notes is not None:
            self.notes = notes


# ---------------------------------------------------------------------------
# Stages
# ---------------------------------------------------------------------------

class CostType(str, Enum):
    TAX = "tax"
    AUCTION_FEE = "auction_fee"
    TRANSPORT = "transport"
    INSPECTION = "inspection"
    STORAGE = "storage"
    INSURANCE = "insurance"
    OTHER = "other"


class CostInvoice(DomainModel):
    id: str = Field(default_factory=_new_id)
    cost_type: CostType
    description: str = ""
    amount: Decimal | None = None
    attachment: Document | None = None


class AfterPurchaseStage(DomainModel):
    payment_to_auction_house: ChecklistItem = Field(default_factory=ChecklistItem)
    invoice_attachments: list[Document] = Field(default_factory=list)
    cost_invoices: list[CostInvoice] = Field(default_factory=list)


class TransportStage(DomainModel):
    transport_arranged: ChecklistItem = Field(default_factory=ChecklistItem)
    yard_notified: ChecklistItem = Field(default_factory=ChecklistItem)
    photos_requested: ChecklistItem = Field(default_factory=ChecklistItem)


class RepairStoredStage(DomainModel):
    marked_complete: ChecklistItem | None = None


class RegisteredTasks(DomainModel):
    kind: Literal["registered"] = "registered"
    received_number_plates: ChecklistItem = Field(default_factory=ChecklistItem)
    deregistered: ChecklistItem = Field(default_factory=ChecklistItem)
    export_certificate_created: ChecklistItem = Field(default_factory=ChecklistItem)
    sent_deregistration_copy: ChecklistItem = Field(default_factory=ChecklistItem)
    insurance_refund_received: ChecklistItem = Field(default_factory=ChecklistItem)


class UnregisteredTasks(DomainModel):
    kind: Literal["unregistered"] = "unregistered"
    export_certificate_created: ChecklistItem = Field(default_factory=ChecklistItem)


RegistrationBranch = Annotated[
    Union[RegisteredTasks, UnregisteredTasks], Field(discriminator="kind")
]


class DocumentsReceivedStage(DomainModel):
    """Holds at most one task branch; which one is what is_registered reports."""

    tasks: RegistrationBranch | None = None

    @computed_field  # type: ignore[prop-decorator]
    @property
    def is_registered(self) -> bool | None:
        if self.tasks is None:
            return None
        return isinstance(self.tasks, RegisteredTasks)

    @property
    def registered_tasks(self) -> RegisteredTasks | None:
        return self.tasks if isinstance(self.tasks, RegisteredTasks) else None

    @property
    def unregistered_tasks(self) -> UnregisteredTasks | None:
        return self.tasks if isinstance(self.tasks, UnregisteredTasks) else None

    def set_branch(self, is_registered: bool | None) -> bool:
        """Select the task branch. Returns True when the branch was replaced.

        Re-selecting the active branch keeps its progress; switching discards
        the previous branch entirely.
        """
        if is_registered == self.is_registered:
            return False
        if is_registered is None:
            self.tasks = None
        elif is_registered:
            self.tasks = RegisteredTasks()
        else:
            self.tasks = UnregisteredTasks()
        return True


class BookingStage(DomainModel):
    booking_requested: ChecklistItem = Field(default_factory=ChecklistItem)
    sent_si_and_ec: ChecklistItem = Field(default_factory=ChecklistItem)
    received_so: ChecklistItem = Field(default_factory=ChecklistItem)


class ShippedStage(DomainModel):
    bl_paid: ChecklistItem = Field(default_factory=ChecklistItem)
    recycle_applied: ChecklistItem = Field(default_factory=ChecklistItem)


class DHLDocumentsStage(DomainModel):
    documents_sent: ChecklistItem | None = None


class WorkflowStages(DomainModel):
    after_purchase: AfterPurchaseStage = Field(default_factory=AfterPurchaseStage)
    transport: TransportStage = Field(default_factory=TransportStage)
    repair_stored: RepairStoredStage = Field(default_factory=RepairStoredStage)
    documents_received: DocumentsReceivedStage = Field(default_factory=DocumentsReceivedStage)
    booking: BookingStage = Field(default_factory=BookingStage)
    shipped: ShippedStage = Field(default_factory=ShippedStage)
    dhl_documents: DHLDocumentsStage = Field(default_factory=DHLDocumentsStage)


# ---------------------------------------------------------------------------
# Workflow
# ---------------------------------------------------------------------------

class PurchaseWorkflow(TimestampMixin):
    id: str = Field(default_factory=_new_id)
    purchase_id: str
    current_stage: int = Field(default=1, ge=1, le=TOTAL_STAGES)
    requires_repair_stage: bool = True
    requires_dhl_documents: bool = True
    stages: WorkflowStages = Field(default_factory=WorkflowStages)

    @classmethod
    def create(
        cls,
        purchase_id: str,
        *,
        is_registered: bool | None = True,
        requires_repair_stage: bool = True,
        requires_dhl_documents: bool = True,
    ) -> "PurchaseWorkflow":
        """Fresh workflow at stage 1 with every present item open."""
        stages = WorkflowStages(
            repair_stored=RepairStoredStage(
                marked_complete=ChecklistItem() if requires_repair_stage else None,
            ),
            dhl_documents=DHLDocumentsStage(
                documents_sent=ChecklistItem() if requires_dhl_documents else None,
            ),
        )
        stages.documents_received.set_branch(is_registered)
        return cls(
            purchase_id=purchase_id,
            requires_repair_stage=requires_repair_stage,
            requires_dhl_documents=requires_dhl_documents,
            stages=stages,
        )

    def checklist(self, stage_key: str) -> dict[str, ChecklistItem]:
        """Checklist items that currently exist in a stage, keyed by snake_case name.

        Items of the inactive registration branch and of optional stages this
        deal does not require are left out.
        """
        key = normalize_stage_key(stage_key)
        s = self.stages
        if key == "payment":
            return {}
        if key == "repair_stored":
            item = s.repair_stored.marked_complete
            if not self.requires_repair_stage or item is None:
                return {}
            return {"marked_complete": item}
        if key == "dhl_documents":
            item = s.dhl_documents.documents_sent
            if not self.requires_dhl_documents or item is None:
                return {}
            return {"documents_sent": item}
        if key == "documents_received":
            branch = s.documents_received.tasks
            if branch is None:
                return {}
            keys = (
                REGISTERED_TASK_KEYS
                if isinstance(branch, RegisteredTasks)
                else UNREGISTERED_TASK_KEYS
            )
            return {k: getattr(branch, k) for k in keys}
        stage = getattr(s, key)
        return {k: getattr(stage, k) for k in CHECKLIST_KEYS[key]}

    def get_checklist_item(self, stage_key: str, item_key: str) -> ChecklistItem:
        """Resolve a live checklist item or explain why it cannot be written."""
        stage = normalize_stage_key(stage_key)
        item = to_snake_key(item_key)
        if not CHECKLIST_KEYS[stage]:
            raise ValidationError(f"Stage '{stage_key}' has no checklist items")
        if item not in CHECKLIST_KEYS[stage]:
            raise ValidationError(f"Unknown checklist item '{item_key}' in stage '{stage_key}'")

        items = self.checklist(stage)
        if item not in items:
            if stage == "documents_received":
                branch = self.stages.documents_received.is_registered
                state = "not set" if branch is None else (
                    "registered" if branch else "unregistered"
                )
                raise StateConflictError(
                    f"Checklist item '{item_key}' is not part of the active "
                    f"documents branch (registration {state})"
                )
            raise StateConflictError(
                f"Stage '{stage_key}' is not required for this purchase"
            )
        return items[item]

    def set_registration(self, is_registered: bool | None) -> bool:
        changed = self.stages.documents_received.set_branch(is_registered)
        if changed:
            self.touch()
        return changed

    def set_current_stage(self, stage: int) -> None:
        stage_key_for(stage)  # range check
        self.current_stage = stage
        self.touch()
