"""Image build orchestration."""

import asyncio
import logging
import posixpath
import secrets
import tempfile
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from jinja2 import TemplateSyntaxError

from lxdimage.archive import locate_export, rewrite_archive
from lxdimage.errors import ConfigurationError
from lxdimage.models.config import BuilderConfig
from lxdimage.models.spec import BuildSpec
from lxdimage.network import wait_for_network
from lxdimage.providers.base import ContainerRuntime
from lxdimage.provision import run_commands
from lxdimage.utils.logging import build_alias
from lxdimage.utils.templates import check_template_syntax


logger = logging.getLogger(__name__)

CONTAINER_NAME_PREFIX = "lxd-image-builder-"
SCRATCH_PREFIX = "lxd-image-builder"
REWRITTEN_ARCHIVE_NAME = "output.tar.gz"


class BuildState(Enum):
    """Build progress."""
    CREATED = "created"
    LAUNCHED = "launched"
    NETWORK_READY = "network-ready"
    PROVISIONED = "provisioned"
    PUBLISHED = "published"
    TEMPLATES_INJECTED = "templates-injected"
    DONE = "done"
    FAILED = "failed"


@dataclass
class BuildResult:
    """Outcome of a successful build."""
    alias: str
    container: str
    state: BuildState
    replaced_fingerprint: Optional[str] = None


def new_build_container_name() -> str:
    """Generate a unique build container name from 16 random bytes."""
    return CONTAINER_NAME_PREFIX + secrets.token_hex(16)


def validate_spec(spec: BuildSpec) -> None:
    """Check a spec before any external command runs."""
    if not spec.base_image:
        raise ConfigurationError("BaseImage must be set")
    if not spec.alias:
        raise ConfigurationError("Alias must be set")

    for template in spec.templates:
        name = template.template
        if not name or "/" in name or name in (".", ".."):
            raise ConfigurationError(f"Invalid template name: {name!r}")
        if not posixpath.isabs(template.path):
            raise ConfigurationError(
                f"Template {name} path must be absolute: {template.path!r}"
            )
        # pongo2 accepts constructs Jinja does not, so a parse failure is
        # only a hint that the body may be broken.
        try:
            check_template_syntax(template.content)
        except TemplateSyntaxError as e:
            logger.warning(
                f"Template {name} may not render, line {e.lineno}: {e.message}"
            )


class BuildContainer:
    """Ephemeral container owned by a single build.

    The container is force-deleted by ``cleanup`` unless the build already
    deleted it on its way to publishing.
    """

    def __init__(self, runtime: ContainerRuntime, name: str):
        self.runtime = runtime
        self.name = name
        self.deleted = False

    def mark_deleted(self):
        self.deleted = True

    async def cleanup(self) -> None:
        """Force-delete the container if it still exists.

        Failures are logged rather than raised so they never replace the
        error that ended the build.
        """
        if self.deleted:
            return
        self.deleted = True
        try:
            await self.runtime.delete(self.name, force=True)
        except Exception as e:
            logger.error(f"Deleting build container {self.name}: {e}")


class ImageBuilder:
    """Builds an image by provisioning a throwaway container and publishing it."""

    def __init__(self, runtime: ContainerRuntime, config: Optional[BuilderConfig] = None):
        """Initialize image builder."""
        self.runtime = runtime
        self.config = config or BuilderConfig()
        self.state = BuildState.CREATED

    async def build(self, spec: BuildSpec) -> BuildResult:
        """Build the image described by ``spec`` and bind it to ``spec.alias``."""
        validate_spec(spec)

        with build_alias(spec.alias):
            self.state = BuildState.CREATED
            try:
                return await self._build(spec)
            except Exception:
                logger.error(f"Build failed in state {self.state.value}")
                self._transition(BuildState.FAILED)
                raise

    async def _build(self, spec: BuildSpec) -> BuildResult:
        container = BuildContainer(self.runtime, new_build_container_name())
        await self.runtime.launch(spec.base_image, container.name)
        self._transition(BuildState.LAUNCHED)

        try:
            await wait_for_network(
                self.runtime,
                container.name,
                timeout=self.config.network_timeout,
                interval=self.config.network_interval,
            )
            self._transition(BuildState.NETWORK_READY)

            await run_commands(self.runtime, container.name, spec.commands)
            self._transition(BuildState.PROVISIONED)

            await self.runtime.stop(container.name)
            await self.runtime.publish(container.name, spec.alias)
            await self.runtime.delete(container.name)
            container.mark_deleted()
            self._transition(BuildState.PUBLISHED)
        finally:
            await container.cleanup()

        result = BuildResult(alias=spec.alias, container=container.name, state=self.state)
        if spec.templates:
            result.replaced_fingerprint = await self._inject_templates(spec)
            self._transition(BuildState.TEMPLATES_INJECTED)

        self._transition(BuildState.DONE)
        result.state = self.state
        return result

    async def _inject_templates(self, spec: BuildSpec) -> str:
        """Re-import the published image with the build's templates added.

        Returns the fingerprint of the image that was replaced.
        """
        with tempfile.TemporaryDirectory(prefix=SCRATCH_PREFIX, dir=self.config.tmp_dir) as tmpdir:
            export_dir = Path(tmpdir) / "export"
            export_dir.mkdir()
            await self.runtime.export_image(spec.alias, export_dir)

            exported = locate_export(export_dir)
            output = Path(tmpdir) / REWRITTEN_ARCHIVE_NAME
            logger.info("Updating metadata/templates in tarball")
            await asyncio.to_thread(
                rewrite_archive,
                exported.path,
                spec.templates,
                output,
                self.config.compression_level,
            )

            # Importing rebinds the alias, leaving the exported image orphaned.
            await self.runtime.import_image(output, spec.alias)
            await self.runtime.delete_image(exported.fingerprint)

        return exported.fingerprint

    def _transition(self, state: BuildState):
        logger.info(f"Build state: {self.state.value} -> {state.value}")
        self.state = state
