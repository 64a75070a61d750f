"""Running provisioning commands inside build containers."""

import logging
from typing import Sequence

from lxdimage.errors import ProvisioningError, RuntimeInvocationError
from lxdimage.providers.base import ContainerRuntime


logger = logging.getLogger(__name__)


async def run_commands(
    runtime: ContainerRuntime,
    container: str,
    commands: Sequence[str],
) -> None:
    """Run each command in order, stopping at the first one that fails."""
    for index, command in enumerate(commands, start=1):
        logger.debug(f"Provisioning step {index}/{len(commands)}")
        try:
            await runtime.exec(container, command)
        except RuntimeInvocationError as e:
            raise ProvisioningError(container, command) from e
