"""FastAPI dependencies shared by all routers."""


from fastapi import Request

from fulfillment.services.purchase_workflow import PurchaseWorkflowService


def get_purchase_service(request: Request) -> PurchaseWorkflowService:
    """The service instance created with the app (see ``create_app``)."""
    return request.app.state.purchase_service
