"""Document classification linker.

An upload batch carries one declared DocumentType. Every file becomes a
Document on the purchase; the declared type then decides which checklist item
(if any) the batch satisfies:

  invoice             -> after-purchase invoice trail (no checklist write)
  insurance           -> after-purchase cost invoice  (no checklist write)
  export_certificate  -> documents_received.<active branch>.export_certificate_created
  bill_of_lading      -> booking.received_so
  inspection          -> repair_stored.marked_complete
  deregistration      -> documents_received.registered.deregistered
  number_plates       -> documents_received.registered.received_number_plates
  other               -> nothing

A target that does not exist right now (inactive branch, optional stage not
required) is not an error: the documents are stored and no task changes.
"""


import logging
from typing import NamedTuple

from fulfillment.core.config import settings
from fulfillment.core.exceptions import NotFoundError, StateConflictError, ValidationError
from fulfillment.domain.document import Document, DocumentType, FileMetadata
from fulfillment.domain.mixins import DomainModel
from fulfillment.domain.purchase import Purchase
from fulfillment.domain.workflow import CHECKLIST_KEYS, ChecklistItem, CostInvoice, CostType

logger = logging.getLogger(__name__)


class ChecklistTarget(NamedTuple):
    stage: str
    item: str

    def __str__(self) -> str:
        return f"{self.stage}.{self.item}"


DOCUMENT_CHECKLIST_TARGETS: dict[DocumentType, ChecklistTarget] = {
    DocumentType.EXPORT_CERTIFICATE: ChecklistTarget("documents_received", "export_certificate_created"),
    DocumentType.BILL_OF_LADING: ChecklistTarget("booking", "received_so"),
    DocumentType.INSPECTION: ChecklistTarget("repair_stored", "marked_complete"),
    DocumentType.DEREGISTRATION: ChecklistTarget("documents_received", "deregistered"),
    DocumentType.NUMBER_PLATES: ChecklistTarget("documents_received", "received_number_plates"),
}


class UploadResult(DomainModel):
    documents: list[Document]
    checklist_updated: ChecklistItem | None = None
    target: str | None = None
    message: str


def parse_document_type(value: "str | DocumentType") -> DocumentType:
    try:
        return DocumentType(value)
    except ValueError:
        allowed = ", ".join(t.value for t in DocumentType)
        raise ValidationError(
            f"Unknown document type '{value}'. Accepted types: {allowed}"
        ) from None


def _validate_files(files: list[FileMetadata]) -> None:
    if not files:
        raise ValidationError("Upload batch contains no files")
    limit = settings.max_upload_size_bytes
    for f in files:
        if f.size > limit:
            raise ValidationError(
                f"File '{f.name}' is {f.size} bytes; the limit is {settings.max_upload_size_mb} MB"
            )


def _resolve_target(purchase: Purchase, target: ChecklistTarget) -> ChecklistItem | None:
    try:
        return purchase.workflow.get_checklist_item(target.stage, target.item)
    except StateConflictError:
        return None


def link_documents(
    purchase: Purchase,
    files: list[FileMetadata],
    declared_type: "str | DocumentType",
    uploaded_by: str,
) -> UploadResult:
    """Store an upload batch and complete the checklist item its type satisfies."""
    doc_type = parse_document_type(declared_type)
    _validate_files(files)

    documents = [
        Document(name=f.name, type=doc_type, uploaded_by=uploaded_by, size=f.size, url=f.url)
        for f in files
    ]
    purchase.documents.extend(documents)
    stages = purchase.workflow.stages

    if doc_type == DocumentType.INVOICE:
        stages.after_purchase.invoice_attachments.extend(documents)
        message = f"{len(documents)} document(s) added to the invoice trail"
        target = "after_purchase.invoice_attachments"
        item = None
    elif doc_type == DocumentType.INSURANCE:
        stages.after_purchase.cost_invoices.extend(
            CostInvoice(cost_type=CostType.INSURANCE, description=d.name, attachment=d)
            for d in documents
        )
        message = f"{len(documents)} document(s) added as insurance cost invoices"
        target = "after_purchase.cost_invoices"
        item = None
    elif doc_type in DOCUMENT_CHECKLIST_TARGETS:
        checklist_target = DOCUMENT_CHECKLIST_TARGETS[doc_type]
        target = str(checklist_target)
        item = _resolve_target(purchase, checklist_target)
        if item is None:
            message = "Document stored, no task updated"
            logger.warning(
                "Purchase %s: %s upload has no active task %s",
                purchase.id, doc_type.value, target,
            )
            target = None
        else:
            # A batch satisfies its task once, pointing at the newest file.
            item.mark_complete(uploaded_by, attachment=documents[-1])
            message = f"Task {target} completed"
    else:
        message = "Document stored, no task updated"
        target = None
        item = None

    purchase.workflow.touch()
    purchase.touch()
    logger.info(
        "Purchase %s: stored %d %s document(s)%s",
        purchase.id, len(documents), doc_type.value,
        f", completed {target}" if item is not None else "",
    )
    return UploadResult(
        documents=documents,
        checklist_updated=item,
        target=target,
        message=message,
    )


def delete_document(purchase: Purchase, document_id: str) -> None:
    """Hard-delete a document everywhere it is referenced.

    Checklist items that point at it lose the attachment but stay completed.
    """
    if purchase.find_document(document_id) is None:
        raise NotFoundError("Document", document_id)

    purchase.documents = [d for d in purchase.documents if d.id != document_id]
    workflow = purchase.workflow
    after_purchase = workflow.stages.after_purchase
    after_purchase.invoice_attachments = [
        d for d in after_purchase.invoice_attachments if d.id != document_id
    ]
    for invoice in after_purchase.cost_invoices:
        if invoice.attachment is not None and invoice.attachment.id == document_id:
            invoice.attachment = None
    for stage_key in CHECKLIST_KEYS:
        for item in workflow.checklist(stage_key).values():
            if item.attachment is not None and item.attachment.id == document_id:
                item.attachment = None
    workflow.touch()
    purchase.touch()
    logger.info("Purchase %s: deleted document %s", purchase.id, document_id)


def all_documents(purchase: Purchase) -> list[Document]:
    """Purchase documents merged with the workflow's attachment trails, unique by id."""
    after_purchase = purchase.workflow.stages.after_purchase
    candidates = [
        *purchase.documents,
        *after_purchase.invoice_attachments,
        *(c.attachment for c in after_purchase.cost_invoices if c.attachment is not None),
    ]
    seen: set[str] = set()
    merged: list[Document] = []
    for doc in candidates:
        if doc.id not in seen:
            seen.add(doc.id)
            merged.append(doc)
    return merged


def document_checklist(purchase: Purchase) -> dict[DocumentType, bool]:
    """Which typed documents are on file (``other`` is not a checklist entry)."""
    present = {d.type for d in all_documents(purchase)}
    return {t: t in present for t in DocumentType if t != DocumentType.OTHER}
