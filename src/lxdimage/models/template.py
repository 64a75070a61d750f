"""Image template models."""

from typing import Any, Dict, List
from pydantic import BaseModel, ConfigDict, Field


class Template(BaseModel):
    """Boot-time configuration file generated inside the guest by LXD."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    properties: Dict[str, str] = Field(default_factory=dict)
    template: str = Field(..., description="Template file name under templates/")
    when: List[str] = Field(default_factory=list, description="Lifecycle hooks")
    path: str = Field(..., description="Absolute path of the generated file in the guest")
    content: str = Field(default="", description="Template body")

    def metadata_entry(self) -> Dict[str, Any]:
        """Render the record stored under metadata.yaml's templates mapping.

        The guest path is the mapping key and the body lives in its own
        archive entry, so neither is part of the record.
        """
        entry: Dict[str, Any] = {}
        if self.properties:
            entry["properties"] = dict(self.properties)
        entry["template"] = self.template
        if self.when:
            entry["when"] = list(self.when)
        return entry
