"""Registry of container runtime implementations."""

import logging
from typing import Dict, List, Type

from lxdimage.errors import ConfigurationError
from lxdimage.models.config import BuilderConfig
from lxdimage.providers.base import ContainerRuntime
from lxdimage.providers.lxc import LxcRuntime


logger = logging.getLogger(__name__)


class RuntimeRegistry:
    """Registry mapping runtime names to implementations."""

    def __init__(self):
        """Initialize runtime registry."""
        self._runtime_classes: Dict[str, Type[ContainerRuntime]] = {
            "lxc": LxcRuntime,
        }

    def register(self, name: str, runtime_class: Type[ContainerRuntime]):
        """Register a runtime implementation under ``name``."""
        self._runtime_classes[name] = runtime_class

    async def create(self, config: BuilderConfig) -> ContainerRuntime:
        """Instantiate and initialize the runtime named by the configuration."""
        runtime_class = self._runtime_classes.get(config.runtime)
        if runtime_class is None:
            raise ConfigurationError(
                f"Unknown container runtime: {config.runtime} "
                f"(available: {', '.join(self.list_runtimes())})"
            )

        runtime = runtime_class()
        await runtime.initialize(config)
        logger.debug(f"Initialized runtime: {config.runtime}")
        return runtime

    def list_runtimes(self) -> List[str]:
        """List available runtime names."""
        return sorted(self._runtime_classes)


_registry = RuntimeRegistry()


def get_runtime_registry() -> RuntimeRegistry:
    """Get the process-wide runtime registry."""
    return _registry
