"""Customer-facing stage translation.

Staff work through stages in operational order (transport before payment is
confirmed); buyers see payment first. The translation table below is the only
bridge between the two numberings.
"""


from typing import Literal, NamedTuple

from fulfillment.core.exceptions import ValidationError
from fulfillment.domain.mixins import DomainModel
from fulfillment.domain.workflow import TOTAL_STAGES, PurchaseWorkflow
from fulfillment.services.progress import round_percent

CustomerStageStatus = Literal["completed", "in-progress", "pending"]


class CustomerStage(NamedTuple):
    number: int
    label: str
    description: str


CUSTOMER_STAGES: tuple[CustomerStage, ...] = (
    CustomerStage(1, "Won", "Auction won successfully"),
    CustomerStage(2, "Payment", "Processing your payment"),
    CustomerStage(3, "Transport", "Vehicle being transported"),
    CustomerStage(4, "Inspection", "Quality inspection & prep"),
    CustomerStage(5, "Documents", "Export documents ready"),
    CustomerStage(6, "Shipping", "Booked for shipping"),
    CustomerStage(7, "In Transit", "On the way to you"),
    CustomerStage(8, "Delivered", "Documents sent"),
)

# internal stage -> customer stage
INTERNAL_TO_CUSTOMER_STAGE: dict[int, int] = {
    1: 1,  # After Purchase -> Won
    2: 3,  # Transport -> Transport
    3: 2,  # Payment -> Payment
    4: 4,  # Repair/Stored -> Inspection
    5: 5,  # Documents -> Documents
    6: 6,  # Booking -> Shipping
    7: 7,  # Shipped -> In Transit
    8: 8,  # DHL -> Delivered
}


class CustomerStageRow(DomainModel):
    number: int
    label: str
    description: str
    status: CustomerStageStatus


class CustomerStageView(DomainModel):
    external_stage: int
    progress: int
    stages: list[CustomerStageRow]


def to_customer_stage(internal_stage: int) -> int:
    try:
        return INTERNAL_TO_CUSTOMER_STAGE[internal_stage]
    except KeyError:
        raise ValidationError(
            f"Stage must be between 1 and {TOTAL_STAGES}, got {internal_stage}"
        ) from None


def customer_stage_status(stage_number: int, external_stage: int) -> CustomerStageStatus:
    if stage_number < external_stage:
        return "completed"
    if stage_number == external_stage:
        return "in-progress"
    return "pending"


def customer_progress(external_stage: int) -> int:
    """Progress shown to the buyer, computed on the *customer* stage number."""
    return round_percent(external_stage, len(CUSTOMER_STAGES))


def customer_stage_view(workflow: PurchaseWorkflow) -> CustomerStageView:
    current = to_customer_stage(workflow.current_stage)
    return CustomerStageView(
        external_stage=current,
        progress=customer_progress(current),
        stages=[
            CustomerStageRow(
                number=stage.number,
                label=stage.label,
                description=stage.description,
                status=customer_stage_status(stage.number, current),
            )
            for stage in CUSTOMER_STAGES
        ],
    )
