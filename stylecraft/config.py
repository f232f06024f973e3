from __future__ import annotations

from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from a .env file if present (local dev only)
load_dotenv()


class Settings(BaseSettings):
    """Application configuration loaded from environment variables or .env file."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # Gemini
    gemini_api_key: Optional[str] = Field(default=None, description="Google AI Studio API key")
    llm_provider: str = Field("gemini")
    gemini_text_model: str = Field("gemini-2.5-flash")
    gemini_image_model: str = Field("gemini-2.5-flash-image")
    gemini_temperature: float = Field(0.7)
    gemini_max_retries: int = Field(2, ge=0)

    # Cloud Storage inventory
    gcs_bucket_name: str = Field("maker-suite-images")
    gcs_inventory_path: Optional[str] = Field(
        default=None,
        description="Object path of a JSON metadata file listing the inventory. Bucket root is listed when unset.",
    )
    public_base_url: str = Field(
        "http://localhost:8080",
        description="Base URL the bundled fallback inventory images are served from.",
    )

    # Inventory image fetching
    fetch_batch_size: int = Field(4, ge=1)
    fetch_timeout_s: float = Field(30.0, gt=0)
    fetch_max_retries: int = Field(2, ge=0)
    fetch_inter_batch_delay_s: float = Field(0.1, ge=0)

    # API client
    api_base_url: str = Field("http://localhost:8080")
    api_timeout_s: float = Field(120.0, gt=0)
    max_request_mb: float = Field(50.0, gt=0, description="Ceiling for recommendation request bodies (MiB).")

    # Image uploads
    image_max_dim: int = Field(1024, description="Maximum width or height for uploaded images (pixels).")
    image_quality: int = Field(85, description="JPEG quality for compressed uploads (1-100).")

    # HTTP server
    host: str = Field("0.0.0.0")
    port: int = Field(8080)

    log_level: str = Field("INFO")


@lru_cache()
def get_settings() -> Settings:  # pragma: no cover
    """Return a cached Settings instance so it is only parsed once."""

    return Settings()
