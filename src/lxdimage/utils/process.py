"""Subprocess execution helpers."""

import asyncio
import logging
import shlex
from dataclasses import dataclass
from typing import List, Optional

from lxdimage.errors import RuntimeInvocationError


logger = logging.getLogger(__name__)


@dataclass
class CommandResult:
    """Result from running a command."""
    returncode: int
    stdout: str = ""


async def run_command(
    cmd: List[str],
    check: bool = True,
    capture_output: bool = False,
    timeout: Optional[float] = None,
    **kwargs
) -> CommandResult:
    """Run a command asynchronously.

    Without ``capture_output`` the child inherits this process's stdout and
    stderr, so long-running commands are visible as they run. With it,
    stdout is buffered for the caller to parse while stderr still streams
    through.
    """
    logger.info(f"Running command: {shlex.join(cmd)}")

    try:
        process = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE if capture_output else None,
            **kwargs
        )
    except OSError as e:
        raise RuntimeInvocationError(
            f"failed to run {cmd[0]}: {e}", command=cmd
        ) from e

    try:
        stdout, _ = await asyncio.wait_for(
            process.communicate(),
            timeout=timeout
        )
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        raise RuntimeInvocationError(
            f"command timed out after {timeout}s: {shlex.join(cmd)}",
            command=cmd,
        )

    result = CommandResult(
        returncode=process.returncode,
        stdout=stdout.decode() if stdout else "",
    )

    if check and process.returncode != 0:
        raise RuntimeInvocationError(
            f"command exited with status {process.returncode}: {shlex.join(cmd)}",
            command=cmd,
            returncode=process.returncode,
        )

    return result
