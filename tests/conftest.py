"""Shared fixtures: a scripted container runtime and image tarball builders."""

import io
import tarfile
from pathlib import Path
from typing import Callable, Dict, List, Optional

import pytest

from lxdimage.errors import RuntimeInvocationError
from lxdimage.models.status import ContainerNetworkStatus
from lxdimage.providers.base import ContainerRuntime


METADATA = b"""architecture: x86_64
creation_date: 1500000000
properties:
  os: centos
  release: "7"
templates:
  /etc/hostname:
    template: hostname.tpl
    when:
    - create
"""


def make_status(ready: bool = True, name: str = "c1") -> ContainerNetworkStatus:
    """Build a running container status, with or without a global IPv4 address."""
    addresses = [{"family": "inet6", "scope": "link"}]
    if ready:
        addresses.append({"family": "inet", "scope": "global", "address": "10.0.0.2"})
    return ContainerNetworkStatus(
        name=name,
        status="Running",
        interfaces={
            "lo": {"addresses": [{"family": "inet", "scope": "local"}], "state": "up"},
            "eth0": {"addresses": addresses, "state": "up"},
        },
    )


def write_image_tarball(
    path: Path,
    metadata: Optional[bytes] = METADATA,
    files: Optional[Dict[str, bytes]] = None,
) -> Path:
    """Write a gzip image tarball with metadata.yaml first, like LXD exports."""
    if files is None:
        files = {"rootfs/bin/sh": b"\x7fELF shell"}
    with tarfile.open(path, "w:gz") as tar:
        entries = ([("metadata.yaml", metadata)] if metadata is not None else []) + list(files.items())
        for name, payload in entries:
            info = tarfile.TarInfo(name)
            info.size = len(payload)
            info.mode = 0o755
            tar.addfile(info, io.BytesIO(payload))
    return path


def read_tarball(path: Path) -> Dict[str, Optional[bytes]]:
    """Read a gzip tarball into an ordered name -> payload mapping."""
    contents: Dict[str, Optional[bytes]] = {}
    with tarfile.open(path, "r:gz") as tar:
        for member in tar.getmembers():
            fileobj = tar.extractfile(member) if member.isreg() else None
            contents[member.name] = fileobj.read() if fileobj else None
    return contents


class FakeRuntime(ContainerRuntime):
    """Runtime that records every call and replays scripted results."""

    def __init__(self):
        self.calls: List[tuple] = []
        self.statuses: List[ContainerNetworkStatus] = [make_status()]
        self.failing_commands: set = set()
        self.failures: Dict[str, Exception] = {}
        self.export_writer: Optional[Callable[[Path], None]] = None
        self.imported: Optional[Dict[str, Optional[bytes]]] = None

    def _record(self, verb: str, *args, failure_key: Optional[str] = None):
        self.calls.append((verb, *args))
        failure = self.failures.get(failure_key or verb)
        if failure is not None:
            raise failure

    def verbs(self) -> List[str]:
        return [call[0] for call in self.calls]

    def calls_to(self, verb: str) -> List[tuple]:
        return [call for call in self.calls if call[0] == verb]

    async def initialize(self, config):
        pass

    async def launch(self, image, name):
        self._record("launch", image, name)

    async def status(self, name):
        self._record("status", name)
        if len(self.statuses) > 1:
            return self.statuses.pop(0)
        return self.statuses[0]

    async def exec(self, name, command):
        self._record("exec", name, command)
        if command in self.failing_commands:
            raise RuntimeInvocationError(f"command exited with status 1: {command}", returncode=1)

    async def stop(self, name):
        self._record("stop", name)

    async def publish(self, name, alias):
        self._record("publish", name, alias)

    async def delete(self, name, force=False):
        self._record("delete", name, force, failure_key="force_delete" if force else "delete")

    async def export_image(self, alias, dest_dir):
        self._record("export_image", alias, Path(dest_dir))
        if self.export_writer:
            self.export_writer(Path(dest_dir))

    async def import_image(self, archive, alias):
        self._record("import_image", Path(archive), alias)
        self.imported = read_tarball(Path(archive))

    async def delete_image(self, fingerprint):
        self._record("delete_image", fingerprint)


@pytest.fixture
def fake_runtime():
    """Create a scripted runtime whose container is online immediately."""
    return FakeRuntime()


@pytest.fixture
def image_tarball(tmp_path):
    """Create an exported image tarball in its own directory."""
    export_dir = tmp_path / "export"
    export_dir.mkdir()
    return write_image_tarball(export_dir / "abc123.tar.gz")


@pytest.fixture
def status_factory():
    """Expose make_status to tests."""
    return make_status


@pytest.fixture
def tarball_writer():
    """Expose write_image_tarball to tests."""
    return write_image_tarball


@pytest.fixture
def tarball_reader():
    """Expose read_tarball to tests."""
    return read_tarball
