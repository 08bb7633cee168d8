"""
Models for client configuration: runtime binary location, polling cadence
and command limits.
"""
from typing import Optional
from pydantic import BaseModel, Field, field_validator

DEFAULT_BINARY = "/usr/local/bin/container"

class ClientSettings(BaseModel):
    """
    Settings for the catalog client and its polling coordinator.
    """
    binary: str = DEFAULT_BINARY
    poll_interval: float = Field(default=1.0, gt=0)
    command_timeout: Optional[float] = Field(default=None, gt=0)
    max_workers: int = Field(default=4, ge=1)
    log_level: str = "INFO"

    @field_validator("binary")
    @classmethod
    def _binary_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("binary must not be empty")
        return value

    @field_validator("log_level")
    @classmethod
    def _normalise_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {value}")
        return level
