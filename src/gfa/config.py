"""Application configuration and settings management."""

from pathlib import Path
from typing import Any, Literal, Optional

import json
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Runtime configuration loaded from environment variables or defaults."""

    model_config = SettingsConfigDict(
        env_prefix="GFA_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    app_name: str = "Greenfield Allocation API"
    api_prefix: str = "/api"
    data_root: Path = Field(default=Path("data"), description="Root directory for static data files.")
    customers_file: Path = Field(
        default=Path("data/customers.csv"),
        description="Customer demand points (id, name, latitude, longitude, one column per product).",
    )
    facilities_file: Path = Field(
        default=Path("data/facilities.csv"),
        description="Facilities (id, name, latitude, longitude, one capacity column per product).",
    )
    transport_cost_per_km: float = Field(default=0.5, ge=0.0)
    fixed_cost_per_facility: float = Field(default=10000.0, ge=0.0)
    allocation_mode: Literal["greedy", "greedy-split"] = Field(
        default="greedy",
        description="Allocator variant used when a request does not name one.",
    )
    sensitivity_fixed_costs: tuple[float, ...] = Field(default=(0.0, 500000.0, 1000000.0, 2000000.0))
    sensitivity_transport_rates: tuple[float, ...] = Field(default=(0.25, 0.5, 1.0, 2.0))
    remote_base_url: Optional[str] = Field(
        default=None,
        description="Base URL of a remote GFA optimizer (e.g., https://backend.example.com).",
    )
    remote_timeout_seconds: float = Field(default=60.0, gt=0.0)
    remote_max_retries: int = Field(default=2, ge=0)
    remote_backoff_seconds: float = Field(default=1.0, ge=0.0)
    frontend_allowed_origins: tuple[str, ...] = Field(
        default=(
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "http://localhost:8080",
            "http://127.0.0.1:8080",
        ),
        description="Permitted web origins for browser clients (CORS).",
    )

    @field_validator("data_root", "customers_file", "facilities_file", mode="before")
    @classmethod
    def _expand_path(cls, value: Any) -> Path:
        path_value = value if isinstance(value, Path) else Path(str(value))
        return path_value.expanduser().resolve()

    @field_validator("frontend_allowed_origins", mode="before")
    @classmethod
    def _parse_str_tuple_from_env(cls, value: Any) -> tuple[str, ...]:
        """Parse string tuple from environment variable (comma-separated or JSON array)."""
        return tuple(str(item) for item in _split_env_list(value))

    @field_validator("sensitivity_fixed_costs", "sensitivity_transport_rates", mode="before")
    @classmethod
    def _parse_float_tuple_from_env(cls, value: Any) -> tuple[float, ...]:
        """Parse float tuple from environment variable (comma-separated or JSON array)."""
        return tuple(float(item) for item in _split_env_list(value))


def _split_env_list(value: Any) -> list:
    if isinstance(value, (tuple, list)):
        return list(value)
    if isinstance(value, str):
        # Try JSON first
        try:
            parsed = json.loads(value)
            if isinstance(parsed, list):
                return parsed
        except (json.JSONDecodeError, TypeError):
            pass
        if "," in value:
            return [item.strip() for item in value.split(",") if item.strip()]
        if value.strip():
            return [value.strip()]
    return []


settings = Settings()
