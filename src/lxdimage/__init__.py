"""
lxdimage - Build LXD images from declarative specifications.

Launches a throwaway container from a base image, provisions it with shell
commands, publishes it under an alias and rewrites the published image to
carry boot-time templates such as cloud-init seeds.
"""

__version__ = "1.0.0"

# Re-export key components for easier access
from lxdimage.builder import BuildResult, BuildState, ImageBuilder
from lxdimage.models.config import BuilderConfig
from lxdimage.models.spec import BuildSpec
from lxdimage.models.template import Template

__all__ = [
    "BuildResult",
    "BuildState",
    "ImageBuilder",
    "BuilderConfig",
    "BuildSpec",
    "Template",
]
