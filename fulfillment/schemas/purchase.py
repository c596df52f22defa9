"""Purchase & workflow request DTOs and response models."""


import datetime as dt
from decimal import Decimal

from pydantic import Field

from fulfillment.domain.document import FileMetadata
from fulfillment.domain.purchase import AdditionalCost, PaymentMethod, ShipmentStatus, VehicleInfo
from fulfillment.schemas.common import CamelModel
from fulfillment.services.progress import TaskProgress

# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------

class ShipmentUpdate(CamelModel):
    carrier: str = Field(min_length=1)
    tracking_number: str = Field(min_length=1)
    status: ShipmentStatus = ShipmentStatus.PREPARING
    current_location: str | None = None
    estimated_delivery: dt.date | None = None
    description: str | None = None

class PurchaseCreate(CamelModel):
    vehicle_info: VehicleInfo
    winner_name: str
    winner_email: str | None = None
    winner_phone: str | None = None
    winner_address: str | None = None
    destination_port: str | None = None
    notes: str | None = None
    currency: str | None = None
    winning_bid: Decimal = Field(ge=0)
    shipping_cost: Decimal = Field(default=Decimal("0"), ge=0)
    insurance_fee: Decimal = Field(default=Decimal("0"), ge=0)
    other_costs: list[AdditionalCost] = Field(default_factory=list)
    # Omitted -> settings.default_is_registered; explicit null -> undecided.
    is_registered: bool | None = Field(default=None)
    requires_repair_stage: bool = True
    requires_dhl_documents: bool = True
    shipment: ShipmentUpdate | None = None

class ChecklistItemUpdate(CamelModel):
    completed: bool
    completed_by: str | None = None
    notes: str | None = None

class BranchUpdate(CamelModel):
    is_registered: bool

class StageUpdate(CamelModel):
    stage: int

class DocumentUpload(CamelModel):
    declared_type: str
    uploaded_by: str
    files: list[FileMetadata]

class PaymentCreate(CamelModel):
    amount: Decimal
    date: dt.date
    method: PaymentMethod | None = None
    reference_number: str | None = None
    recorded_by: str | None = None
    notes: str | None = None

# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------

class PurchaseSummaryOut(CamelModel):
    id: str
    winner_name: str
    vehicle_info: VehicleInfo
    destination_port: str | None = None
    currency: str
    total_amount: Decimal
    paid_amount: Decimal
    payment_status: str
    workflow_id: str
    current_stage: int

class WorkflowProgressOut(CamelModel):
    workflow_id: str
    current_stage: int
    strategy: str
    percent: int

class StageOverviewOut(CamelModel):
    number: int
    key: str
    label: str
    short_label: str
    progress: TaskProgress
    complete: bool
    outstanding: list[str]

class DocumentChecklistEntryOut(CamelModel):
    type: str
    label: str
    present: bool
