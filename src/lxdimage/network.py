"""Waiting for build containers to come online."""

import asyncio
import logging
import time
from typing import Awaitable, Callable

from lxdimage.errors import NetworkTimeoutError
from lxdimage.models.status import ContainerNetworkStatus
from lxdimage.providers.base import ContainerRuntime


logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60.0
DEFAULT_INTERVAL = 1.0


async def wait_for_network(
    runtime: ContainerRuntime,
    container: str,
    timeout: float = DEFAULT_TIMEOUT,
    interval: float = DEFAULT_INTERVAL,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> ContainerNetworkStatus:
    """Poll the container until a non-loopback interface has a global IPv4 address.

    The container is queried at a fixed interval. No query is issued once
    the next tick would fall past the deadline; NetworkTimeoutError is
    raised instead. Status query failures propagate immediately.
    """
    logger.info("Waiting for network connectivity")

    deadline = clock() + timeout
    while True:
        status = await runtime.status(container)
        if status.is_network_ready():
            logger.debug(f"Container {container} is online")
            return status

        if clock() + interval > deadline:
            break
        await sleep(interval)

    raise NetworkTimeoutError(container, timeout)
