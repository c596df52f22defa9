"""Purchase repository — also resolves a purchase from its workflow id."""


from fulfillment.domain.purchase import Purchase
from fulfillment.repositories.base import BaseRepository


class PurchaseRepository(BaseRepository[Purchase]):
    model = Purchase

    def __init__(self) -> None:
        super().__init__()
        self._by_workflow: dict[str, str] = {}

    def add(self, instance: Purchase) -> Purchase:
        self._by_workflow[instance.workflow.id] = instance.id
        return super().add(instance)

    def get_by_workflow_id(self, workflow_id: str) -> Purchase | None:
        purchase_id = self._by_workflow.get(workflow_id)
        return self.get_by_id(purchase_id) if purchase_id else None
