"""Builder configuration models."""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class BuilderConfig(BaseModel):
    """Builder configuration."""
    model_config = ConfigDict(extra="ignore")

    runtime: str = Field(default="lxc", description="Container runtime provider name")
    lxc_binary: str = Field(default="lxc")
    network_timeout: float = Field(default=60.0, gt=0)
    network_interval: float = Field(default=1.0, gt=0)
    compression_level: int = Field(default=6, ge=0, le=9)
    command_timeout: Optional[float] = Field(default=None, gt=0)
    tmp_dir: Optional[str] = None
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}")
        return v.upper()
