"""Configuration management for the ERP contract tooling"""

from pathlib import Path
from typing import Optional, Tuple

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Tooling settings"""

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",  # Ignore extra fields in environment
    )

    # OpenAPI and tracker sources
    openapi_spec_path: str = Field(default="api/openapi_rest_grouped_66.yaml")
    tracker_dir: str = Field(default="docs/tracker")
    tracker_primary_name: str = Field(default="school_erp_master_implementation_tracker_extended.xlsx")
    tracker_fallback_name: str = Field(default="school_erp_master_implementation_tracker.xlsx")

    # Contract cases
    cases_path: str = Field(default="tests/contract/cases.json")
    generated_cases_path: str = Field(default="tests/contract/cases.generated.json")
    default_base_url: str = Field(default="http://localhost:3000/api/v1")

    # Replay
    contract_token: Optional[str] = Field(default=None)
    contract_live: bool = Field(default=False)
    request_timeout_seconds: float = Field(default=30.0, gt=0)

    # System validation
    erp_root: str = Field(default=".")

    # Logging Configuration
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="console")

    # Application Configuration
    app_name: str = "School ERP Contract Tooling"
    app_version: str = "0.1.0"

    def tracker_candidates(self) -> Tuple[Path, Path]:
        """Primary (extended) and fallback tracker paths, in lookup order"""
        base = Path(self.tracker_dir)
        return base / self.tracker_primary_name, base / self.tracker_fallback_name


# Global settings instance
settings = Settings()
