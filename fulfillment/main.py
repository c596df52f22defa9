"""Purchase Fulfillment API — FastAPI application factory."""


import logging
import sys

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fulfillment.core.config import settings
from fulfillment.core.exceptions import register_exception_handlers
from fulfillment.middleware.audit import AuditMiddleware
from fulfillment.repositories.purchase import PurchaseRepository
from fulfillment.routers.v1.purchases import router as purchases_v1_router
from fulfillment.routers.v1.workflows import router as workflows_v1_router
from fulfillment.schemas.common import HealthResponse
from fulfillment.services.purchase_workflow import PurchaseWorkflowService

logger = logging.getLogger(__name__)

_V1_ROUTERS = (purchases_v1_router, workflows_v1_router)


def _configure_logging() -> None:
    level = logging.DEBUG if settings.app_env == "development" else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True,
    )
    for noisy in ("httpcore", "httpx", "uvicorn.access"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def create_app(service: PurchaseWorkflowService | None = None) -> FastAPI:
    """Build the app. Pass ``service`` to share or pre-seed the purchase store."""
    _configure_logging()

    is_dev = settings.app_env == "development"
    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        docs_url="/docs" if is_dev else None,
        redoc_url="/redoc" if is_dev else None,
    )

    # Each app instance owns its in-memory store
    app.state.purchase_service = service or PurchaseWorkflowService(PurchaseRepository())

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )
    app.add_middleware(AuditMiddleware)
    register_exception_handlers(app)

    for router in _V1_ROUTERS:
        app.include_router(router, prefix="/api/v1")

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health():
        return HealthResponse(
            app=settings.app_name,
            env=settings.app_env,
            progress_strategy=settings.workflow_progress_strategy,
        )

    logger.debug(
        "App ready: env=%s progress_strategy=%s default_is_registered=%s",
        settings.app_env, settings.workflow_progress_strategy, settings.default_is_registered,
    )
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("fulfillment.main:app", host="0.0.0.0", port=settings.app_port)
