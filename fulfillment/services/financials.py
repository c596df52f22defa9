"""Financial aggregation over a Purchase: payment progress, balance, payments."""


import datetime as dt
import logging
from decimal import Decimal

from fulfillment.core.exceptions import ValidationError
from fulfillment.domain.mixins import DomainModel
from fulfillment.domain.purchase import (
    Payment,
    PaymentMethod,
    PaymentStatus,
    Purchase,
    derive_payment_status,
)
from fulfillment.services.progress import round_percent

logger = logging.getLogger(__name__)

__all__ = [
    "FinancialSummary",
    "PaymentResult",
    "derive_payment_status",
    "financial_summary",
    "outstanding",
    "payment_progress_percent",
    "record_payment",
]


class PaymentResult(DomainModel):
    payment: Payment
    payment_status: PaymentStatus
    overpaid: bool


class FinancialSummary(DomainModel):
    currency: str
    total_amount: Decimal
    paid_amount: Decimal
    outstanding: Decimal
    payment_progress: int
    payment_status: PaymentStatus
    payment_count: int


def payment_progress_percent(purchase: Purchase) -> int:
    return round_percent(purchase.paid_amount, purchase.total_amount)


def outstanding(purchase: Purchase) -> Decimal:
    return max(Decimal("0"), purchase.total_amount - purchase.paid_amount)


def financial_summary(purchase: Purchase) -> FinancialSummary:
    return FinancialSummary(
        currency=purchase.currency,
        total_amount=purchase.total_amount,
        paid_amount=purchase.paid_amount,
        outstanding=outstanding(purchase),
        payment_progress=payment_progress_percent(purchase),
        payment_status=purchase.payment_status,
        payment_count=len(purchase.payments),
    )


def record_payment(
    purchase: Purchase,
    amount: Decimal,
    date: dt.date,
    *,
    method: PaymentMethod | None = None,
    reference_number: str | None = None,
    recorded_by: str | None = None,
    notes: str | None = None,
) -> PaymentResult:
    """Append a payment and bump paid_amount. Overpayment is flagged, not refused."""
    amount = Decimal(str(amount))
    if amount <= 0:
        raise ValidationError(f"Payment amount must be positive, got {amount}")

    payment = Payment(
        amount=amount,
        date=date,
        method=method,
        reference_number=reference_number,
        recorded_by=recorded_by,
        notes=notes,
    )
    purchase.payments.append(payment)
    purchase.paid_amount += amount
    purchase.touch()

    overpaid = purchase.paid_amount > purchase.total_amount
    if overpaid:
        logger.warning(
            "Purchase %s overpaid: paid=%s total=%s",
            purchase.id, purchase.paid_amount, purchase.total_amount,
        )
    else:
        logger.info(
            "Recorded payment %s on purchase %s (%s/%s)",
            amount, purchase.id, purchase.paid_amount, purchase.total_amount,
        )
    return PaymentResult(
        payment=payment,
        payment_status=purchase.payment_status,
        overpaid=overpaid,
    )
