"""Purchase: one won auction and everything that follows it."""

from __future__ import annotations

import datetime as dt
from decimal import Decimal
from enum import Enum

from pydantic import Field, computed_field

from fulfillment.domain.document import Document
from fulfillment.domain.mixins import DomainModel, TimestampMixin, _new_id, _now
from fulfillment.domain.workflow import PurchaseWorkflow


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PARTIAL = "partial"
    COMPLETED = "completed"


class PaymentMethod(str, Enum):
    BANK_TRANSFER = "bank_transfer"
    CASH = "cash"
    CHECK = "check"
    PAYPAL = "paypal"
    CARD = "card"
    OTHER = "other"


class ShipmentStatus(str, Enum):
    PREPARING = "preparing"
    IN_TRANSIT = "in_transit"
    AT_PORT = "at_port"
    CUSTOMS_CLEARANCE = "customs_clearance"
    DELIVERED = "delivered"


def derive_payment_status(paid_amount: Decimal, total_amount: Decimal) -> PaymentStatus:
    if paid_amount >= total_amount:
        return PaymentStatus.COMPLETED
    if paid_amount == 0:
        return PaymentStatus.PENDING
    return PaymentStatus.PARTIAL


class VehicleInfo(DomainModel):
    make: str
    model: str
    year: int
    vin: str
    mileage: int = 0
    color: str | None = None
    images: list[str] = Field(default_factory=list)


class Payment(DomainModel):
    id: str = Field(default_factory=_new_id)
    amount: Decimal
    date: dt.date
    method: PaymentMethod | None = None
    reference_number: str | None = None
    recorded_by: str | None = None
    recorded_at: dt.datetime = Field(default_factory=_now)
    notes: str | None = None


class ShipmentEvent(DomainModel):
    date: dt.datetime = Field(default_factory=_now)
    location: str
    status: ShipmentStatus
    description: str = ""


class Shipment(DomainModel):
    carrier: str
    tracking_number: str
    status: ShipmentStatus = ShipmentStatus.PREPARING
    current_location: str | None = None
    estimated_delivery: dt.date | None = None
    last_update: dt.datetime = Field(default_factory=_now)
    # Oldest first; carried over when the tracking details are replaced.
    events: list[ShipmentEvent] = Field(default_factory=list)


class AdditionalCost(DomainModel):
    description: str
    amount: Decimal


class Purchase(TimestampMixin):
    id: str = Field(default_factory=_new_id)
    vehicle_info: VehicleInfo
    winner_name: str
    winner_email: str | None = None
    winner_phone: str | None = None
    winner_address: str | None = None
    destination_port: str | None = None
    notes: str | None = None
    currency: str = "USD"

    winning_bid: Decimal
    shipping_cost: Decimal = Decimal("0")
    insurance_fee: Decimal = Decimal("0")
    other_costs: list[AdditionalCost] = Field(default_factory=list)
    # Fixed at creation; never re-derived from the cost fields.
    total_amount: Decimal
    paid_amount: Decimal = Decimal("0")
    payments: list[Payment] = Field(default_factory=list)

    documents: list[Document] = Field(default_factory=list)
    shipment: Shipment | None = None
    workflow: PurchaseWorkflow

    @computed_field  # type: ignore[prop-decorator]
    @property
    def payment_status(self) -> PaymentStatus:
        return derive_payment_status(self.paid_amount, self.total_amount)

    @classmethod
    def create(
        cls,
        *,
        vehicle_info: VehicleInfo,
        winner_name: str,
        winning_bid: Decimal,
        shipping_cost: Decimal = Decimal("0"),
        insurance_fee: Decimal = Decimal("0"),
        other_costs: list[AdditionalCost] | None = None,
        is_registered: bool | None = True,
        requires_repair_stage: bool = True,
        requires_dhl_documents: bool = True,
        **details,
    ) -> "Purchase":
        """Build a purchase, fix its total, and attach a fresh workflow."""
        other_costs = list(other_costs or [])
        total = winning_bid + shipping_cost + insurance_fee + sum(
            (c.amount for c in other_costs), Decimal("0")
        )
        purchase_id = details.pop("id", None) or _new_id()
        workflow = PurchaseWorkflow.create(
            purchase_id,
            is_registered=is_registered,
            requires_repair_stage=requires_repair_stage,
            requires_dhl_documents=requires_dhl_documents,
        )
        return cls(
            id=purchase_id,
            vehicle_info=vehicle_info,
            winner_name=winner_name,
            winning_bid=winning_bid,
            shipping_cost=shipping_cost,
            insurance_fee=insurance_fee,
            other_costs=other_costs,
            total_amount=total,
            workflow=workflow,
            **details,
        )

    def find_document(self, document_id: str) -> Document | None:
        return next((d for d in self.documents if d.id == document_id), None)
