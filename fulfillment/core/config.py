from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration loaded from environment variables / .env file."""

    app_name: str = "Purchase Fulfillment API"
    app_env: str = "development"
    app_port: int = 8000
    frontend_url: str = "http://localhost:3000"
    max_upload_size_mb: int = 25

    # Formula behind GET .../progress:
    #   current_stage    -> currentStage / 8
    #   completed_stages -> fully completed stages / 8
    workflow_progress_strategy: Literal["current_stage", "completed_stages"] = Field(
        default="current_stage", alias="WORKFLOW_PROGRESS_STRATEGY",
    )

    # Registration branch for new purchases when the caller does not say.
    # None leaves the documents stage undecided (contributes no tasks).
    default_is_registered: bool | None = Field(
        default=True, alias="DEFAULT_IS_REGISTERED",
    )
    default_currency: str = Field(default="USD", alias="DEFAULT_CURRENCY")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "populate_by_name": True,
    }

    @property
    def max_upload_size_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024


settings = Settings()
