"""Shipment tracking updates for a purchase."""


import datetime as dt
import logging

from fulfillment.core.exceptions import ValidationError
from fulfillment.domain.purchase import Purchase, Shipment, ShipmentEvent, ShipmentStatus

logger = logging.getLogger(__name__)

DEFAULT_LOCATION = "Warehouse"


def update_shipment(
    purchase: Purchase,
    *,
    carrier: str,
    tracking_number: str,
    status: ShipmentStatus = ShipmentStatus.PREPARING,
    current_location: str | None = None,
    estimated_delivery: dt.date | None = None,
    description: str | None = None,
) -> Shipment:
    """Replace the tracking details and append one event to the shipment history."""
    carrier = carrier.strip()
    tracking_number = tracking_number.strip()
    if not carrier or not tracking_number:
        raise ValidationError("carrier and tracking_number are required")

    location = (current_location or "").strip() or DEFAULT_LOCATION
    history = list(purchase.shipment.events) if purchase.shipment else []
    history.append(
        ShipmentEvent(
            location=location,
            status=status,
            description=description or "Shipment information updated",
        )
    )
    purchase.shipment = Shipment(
        carrier=carrier,
        tracking_number=tracking_number,
        status=status,
        current_location=location,
        estimated_delivery=estimated_delivery,
        events=history,
    )
    purchase.touch()
    logger.info(
        "Purchase %s: shipment %s/%s is %s at %s",
        purchase.id, carrier, tracking_number, status.value, location,
    )
    return purchase.shipment
