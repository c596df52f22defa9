"""Domain package — pydantic models for purchases and their fulfillment workflow.

Folder intent:
  purchase.py  — Purchase aggregate, payments, shipment, payment status rule
  workflow.py  — PurchaseWorkflow, stages, checklist items, stage registry
  document.py  — Document records and upload metadata
  mixins.py    — DomainModel base (camelCase aliases) and TimestampMixin
"""

from fulfillment.domain.document import Document, DocumentType, FileMetadata
from fulfillment.domain.purchase import (
    AdditionalCost,
    Payment,
    PaymentMethod,
    PaymentStatus,
    Purchase,
    Shipment,
    ShipmentEvent,
    ShipmentStatus,
    VehicleInfo,
)
from fulfillment.domain.workflow import (
    ChecklistItem,
    CostInvoice,
    CostType,
    PurchaseWorkflow,
    RegisteredTasks,
    UnregisteredTasks,
)

__all__ = [
    "AdditionalCost",
    "ChecklistItem",
    "CostInvoice",
    "CostType",
    "Document",
    "DocumentType",
    "FileMetadata",
    "Payment",
    "PaymentMethod",
    "PaymentStatus",
    "Purchase",
    "PurchaseWorkflow",
    "RegisteredTasks",
    "Shipment",
    "ShipmentEvent",
    "ShipmentStatus",
    "UnregisteredTasks",
    "VehicleInfo",
]
