"""Pydantic models for build specifications, configuration and runtime state."""

from lxdimage.models.template import Template
from lxdimage.models.spec import BuildSpec
from lxdimage.models.config import BuilderConfig
from lxdimage.models.status import AddressInfo, ContainerNetworkStatus, NetworkInterface

__all__ = [
    "Template",
    "BuildSpec",
    "BuilderConfig",
    "AddressInfo",
    "ContainerNetworkStatus",
    "NetworkInterface",
]
