"""Container runtime interface."""

from abc import ABC, abstractmethod
from pathlib import Path

from lxdimage.models.config import BuilderConfig
from lxdimage.models.status import ContainerNetworkStatus


class ContainerRuntime(ABC):
    """Verbs the builder needs from a container runtime.

    Every method raises RuntimeInvocationError when the runtime reports a
    failure.
    """

    @abstractmethod
    async def initialize(self, config: BuilderConfig):
        """Initialize the runtime with configuration."""
        pass

    @abstractmethod
    async def launch(self, image: str, name: str) -> None:
        """Create and start container ``name`` from ``image``."""
        pass

    @abstractmethod
    async def status(self, name: str) -> ContainerNetworkStatus:
        """Query the container's state and network interfaces."""
        pass

    @abstractmethod
    async def exec(self, name: str, command: str) -> None:
        """Run a shell command inside the container."""
        pass

    @abstractmethod
    async def stop(self, name: str) -> None:
        pass

    @abstractmethod
    async def publish(self, name: str, alias: str) -> None:
        """Publish a stopped container as an image under ``alias``."""
        pass

    @abstractmethod
    async def delete(self, name: str, force: bool = False) -> None:
        pass

    @abstractmethod
    async def export_image(self, alias: str, dest_dir: Path) -> None:
        """Write the image bound to ``alias`` into ``dest_dir``."""
        pass

    @abstractmethod
    async def import_image(self, archive: Path, alias: str) -> None:
        """Import an image archive and bind it to ``alias``."""
        pass

    @abstractmethod
    async def delete_image(self, fingerprint: str) -> None:
        pass
