"""Exceptions raised while building images."""

from typing import List, Optional


class BuildError(Exception):
    """Base class for all image build errors."""
    pass


class ConfigurationError(BuildError):
    """A build specification or builder configuration is invalid."""
    pass


class SourceError(BuildError):
    """A build specification could not be fetched."""
    pass


class RuntimeInvocationError(BuildError):
    """An external command failed to spawn, exited non-zero, or produced unusable output."""

    def __init__(
        self,
        message: str,
        command: Optional[List[str]] = None,
        returncode: Optional[int] = None,
    ):
        super().__init__(message)
        self.command = command or []
        self.returncode = returncode


class NetworkTimeoutError(BuildError, TimeoutError):
    """A container did not acquire a global IPv4 address in time."""

    def __init__(self, container: str, timeout: float):
        super().__init__(
            f"timed out after {timeout:g}s waiting for network connectivity in {container}"
        )
        self.container = container
        self.timeout = timeout


class ArchiveFormatError(BuildError):
    """An exported image archive does not have the expected layout."""
    pass


class ProvisioningError(BuildError):
    """A provisioning command exited non-zero inside the build container."""

    def __init__(self, container: str, command: str):
        super().__init__(f"command failed in {container}: {command}")
        self.container = container
        self.command = command
