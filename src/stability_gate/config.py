"""Configuration for the stability gate."""

from __future__ import annotations

from typing import Literal

from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict


class StabilitySettings(BaseSettings):
    """Run-flavor inputs loaded from environment."""

    flavor: str | None = None
    app_build: str | None = None
    platform_build: str | None = None
    skip_mode: Literal["skip", "deselect"] = "skip"

    model_config = SettingsConfigDict(env_prefix="STABILITY_", env_file=".env", extra="ignore")


def describe_settings_error(exc: ValidationError) -> str:
    """One-line summary of invalid STABILITY_* values."""
    problems = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"])
        problems.append(f"STABILITY_{field.upper()}: {error['msg']}")
    return "Invalid stability settings: " + "; ".join(problems)
