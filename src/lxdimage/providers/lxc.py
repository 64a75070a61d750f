"""LXD runtime driven through the lxc command-line client."""

import json
import logging
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from lxdimage.errors import RuntimeInvocationError
from lxdimage.models.config import BuilderConfig
from lxdimage.models.status import ContainerNetworkStatus
from lxdimage.providers.base import ContainerRuntime
from lxdimage.utils.process import CommandResult, run_command


logger = logging.getLogger(__name__)


class LxcRuntime(ContainerRuntime):
    """Runtime that shells out to ``lxc``."""

    def __init__(self):
        """Initialize lxc runtime."""
        self.binary = "lxc"
        self.command_timeout: Optional[float] = None

    async def initialize(self, config: BuilderConfig):
        """Initialize runtime with configuration."""
        self.binary = config.lxc_binary
        self.command_timeout = config.command_timeout

    async def launch(self, image: str, name: str) -> None:
        await self._lxc("launch", image, name)

    async def status(self, name: str) -> ContainerNetworkStatus:
        """Parse ``lxc list --format=json NAME`` into a status snapshot."""
        result = await self._lxc(
            "list", "--format=json", name,
            capture_output=True,
            timeout=self.command_timeout,
        )

        try:
            entries = json.loads(result.stdout)
        except json.JSONDecodeError as e:
            raise RuntimeInvocationError(
                f"parsing status of {name}: {e}",
                command=[self.binary, "list", "--format=json", name],
            ) from e

        if not isinstance(entries, list):
            raise RuntimeInvocationError(
                f"parsing status of {name}: expected a list, got {type(entries).__name__}"
            )

        # The name argument is a filter, so other containers may be listed too.
        for entry in entries:
            if isinstance(entry, dict) and entry.get("name") == name:
                try:
                    return ContainerNetworkStatus.from_lxc(entry)
                except ValidationError as e:
                    raise RuntimeInvocationError(
                        f"parsing status of {name}: {e}"
                    ) from e

        raise RuntimeInvocationError(f"container {name} not found in status output")

    async def exec(self, name: str, command: str) -> None:
        # exec replaces the shell so the command's exit status is reported as-is
        await self._lxc("exec", name, "--", "/bin/sh", "-c", f"exec {command}")

    async def stop(self, name: str) -> None:
        await self._lxc("stop", name)

    async def publish(self, name: str, alias: str) -> None:
        await self._lxc("publish", f"--alias={alias}", name)

    async def delete(self, name: str, force: bool = False) -> None:
        if force:
            await self._lxc("delete", "--force", name)
        else:
            await self._lxc("delete", name)

    async def export_image(self, alias: str, dest_dir: Path) -> None:
        await self._lxc("image", "export", alias, str(dest_dir))

    async def import_image(self, archive: Path, alias: str) -> None:
        await self._lxc("image", "import", f"--alias={alias}", str(archive))

    async def delete_image(self, fingerprint: str) -> None:
        await self._lxc("image", "delete", fingerprint)

    async def _lxc(self, *args: str, **kwargs) -> CommandResult:
        return await run_command([self.binary, *args], **kwargs)
