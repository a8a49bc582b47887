"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

from ckd_food_panel.adapters.dataset_provider import PACKAGED_DATASET_PATH

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    dataset_location: str = str(PACKAGED_DATASET_PATH)
    dataset_source_tag: str = "ckd-foods-master"
    fdc_api_key: str | None = None
    fdc_base_url: str = "https://api.nal.usda.gov/fdc/v1"
    default_locale: str = "en"
    debug: bool = False
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @property
    def remote_lookup_enabled(self) -> bool:
        """Return True when an FDC credential is configured."""
        return bool(self.fdc_api_key and self.fdc_api_key.strip())
