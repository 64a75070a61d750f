"""Container runtime providers for lxdimage."""

from lxdimage.providers.base import ContainerRuntime
from lxdimage.providers.lxc import LxcRuntime
from lxdimage.providers.registry import RuntimeRegistry, get_runtime_registry

__all__ = [
    "ContainerRuntime",
    "LxcRuntime",
    "RuntimeRegistry",
    "get_runtime_registry",
]
