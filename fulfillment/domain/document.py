"""Document records attached to a purchase."""

from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import Field

from fulfillment.domain.mixins import DomainModel, _new_id, _now


class DocumentType(str, Enum):
    INVOICE = "invoice"
    EXPORT_CERTIFICATE = "export_certificate"
    BILL_OF_LADING = "bill_of_lading"
    INSURANCE = "insurance"
    INSPECTION = "inspection"
    DEREGISTRATION = "deregistration"
    NUMBER_PLATES = "number_plates"
    OTHER = "other"


DOCUMENT_TYPE_LABELS: dict[DocumentType, str] = {
    DocumentType.INVOICE: "Invoice",
    DocumentType.EXPORT_CERTIFICATE: "Export Certificate",
    DocumentType.BILL_OF_LADING: "Bill of Lading",
    DocumentType.INSURANCE: "Insurance Certificate",
    DocumentType.INSPECTION: "Inspection Report",
    DocumentType.DEREGISTRATION: "Deregistration Certificate",
    DocumentType.NUMBER_PLATES: "Number Plates",
    DocumentType.OTHER: "Other Documents",
}


class Document(DomainModel):
    """An uploaded file's metadata. Immutable; removed only by hard delete."""

    id: str = Field(default_factory=_new_id)
    name: str
    type: DocumentType
    uploaded_at: datetime = Field(default_factory=_now)
    uploaded_by: str
    size: int = Field(default=0, ge=0)
    url: str = ""

    model_config = {**DomainModel.model_config, "frozen": True}


class FileMetadata(DomainModel):
    """What a caller knows about a file before it becomes a Document."""

    name: str = Field(min_length=1)
    size: int = Field(default=0, ge=0)
    url: str = ""
