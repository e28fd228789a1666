"""
Application settings using Pydantic Settings.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# ISO measuring apertures in mils
APERTURES = (3, 5, 6, 10, 20)


def check_aperture(v: int) -> int:
    if v not in APERTURES:
        raise ValueError(f"Aperture must be one of {APERTURES}, got {v}")
    return v


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        # Prefer local overrides while keeping .env as the default source
        env_file=(".env.local", ".env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Verification defaults (ISO/IEC 15416 / 15415 reference conditions)
    verification_aperture: int = Field(6, description="Aperture in mils")
    verification_wavelength: int = Field(670, description="Light wavelength in nm")
    verification_angle: int = Field(45, description="Angle of incidence in degrees")
    verification_scan_lines: int = Field(10, description="Scan lines per linear symbol")
    verification_minimum_grade: Literal["A", "B", "C", "D", "F"] = "C"
    verification_check_quiet_zones: bool = True
    verification_gs1_compliance: bool = True
    verification_validate_ais: bool = True

    # Scan-line worker pool
    parallel_scan_lines: bool = Field(False, description="Analyze scan lines concurrently")
    max_workers: int = Field(4, description="Max threads for scan-line analysis")

    # Logging
    log_level: str = "INFO"
    log_format: Literal["json", "text"] = "json"

    @field_validator("verification_aperture")
    @classmethod
    def validate_aperture(cls, v: int) -> int:
        return check_aperture(v)


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
