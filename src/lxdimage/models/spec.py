"""Build specification models."""

from typing import List
from pydantic import BaseModel, ConfigDict, Field, field_validator

from lxdimage.cloudinit import cloud_init_templates
from lxdimage.models.template import Template


class BuildSpec(BaseModel):
    """Image build specification."""
    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    base_image: str = Field(default="", alias="base", description="Image to launch the build container from")
    alias: str = Field(default="", description="Alias the finished image is published under")
    # Absent templates fall back to the cloud-init seeds; an explicit list,
    # even an empty one, replaces them.
    templates: List[Template] = Field(default_factory=cloud_init_templates)
    commands: List[str] = Field(default_factory=list)

    @field_validator("templates", mode="before")
    @classmethod
    def default_templates(cls, v):
        """Treat a null templates field like an absent one."""
        if v is None:
            return cloud_init_templates()
        return v

    @field_validator("commands", mode="before")
    @classmethod
    def default_commands(cls, v):
        if v is None:
            return []
        return v
