"""Container status models parsed from runtime output."""

from typing import Any, Dict, List
from pydantic import BaseModel, ConfigDict, Field, field_validator


LOOPBACK_INTERFACE = "lo"


class AddressInfo(BaseModel):
    """Address bound to a container network interface."""
    model_config = ConfigDict(extra="ignore")

    family: str = ""
    scope: str = ""
    address: str = ""


class NetworkInterface(BaseModel):
    """Container network interface state."""
    model_config = ConfigDict(extra="ignore")

    addresses: List[AddressInfo] = Field(default_factory=list)
    state: str = ""

    @field_validator("addresses", mode="before")
    @classmethod
    def default_addresses(cls, v):
        return v or []

    def has_global_ipv4(self) -> bool:
        """Check whether the interface is up with a global inet address."""
        if self.state != "up":
            return False
        return any(
            addr.family == "inet" and addr.scope == "global"
            for addr in self.addresses
        )


class ContainerNetworkStatus(BaseModel):
    """Snapshot of a container's runtime state and network interfaces."""
    model_config = ConfigDict(extra="ignore")

    name: str = ""
    status: str = ""
    interfaces: Dict[str, NetworkInterface] = Field(default_factory=dict)

    @property
    def running(self) -> bool:
        return self.status == "Running"

    def is_network_ready(self) -> bool:
        """Check for a non-loopback interface with a global IPv4 address."""
        if not self.running:
            return False
        return any(
            iface.has_global_ipv4()
            for name, iface in self.interfaces.items()
            if name != LOOPBACK_INTERFACE
        )

    @classmethod
    def from_lxc(cls, entry: Dict[str, Any]) -> "ContainerNetworkStatus":
        """Build from one element of `lxc list --format=json` output."""
        state: Dict[str, Any] = entry.get("state") or {}
        return cls(
            name=entry.get("name", ""),
            status=state.get("status") or entry.get("status", ""),
            interfaces=state.get("network") or {},
        )
