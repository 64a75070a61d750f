"""Loading build specifications and builder configuration."""

import logging
import urllib.parse
from pathlib import Path
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from lxdimage.errors import ConfigurationError, SourceError
from lxdimage.models.config import BuilderConfig
from lxdimage.models.spec import BuildSpec


logger = logging.getLogger(__name__)

FETCH_TIMEOUT = 30.0


def fetch_source(location: str) -> bytes:
    """Read a build specification from a local path or a URL."""
    url = urllib.parse.urlparse(location)

    if url.scheme in ("", "file"):
        path = Path(url.path if url.scheme == "file" else location)
        try:
            return path.read_bytes()
        except OSError as e:
            raise SourceError(f"Reading {path}: {e}") from e

    if url.scheme not in ("http", "https"):
        raise SourceError(f"Unsupported source scheme {url.scheme!r}: {location}")

    logger.debug(f"Fetching {location}")
    try:
        response = httpx.get(location, follow_redirects=True, timeout=FETCH_TIMEOUT)
        response.raise_for_status()
    except httpx.RequestError as e:
        raise SourceError(f"Fetching {location}: {e}") from e
    except httpx.HTTPStatusError as e:
        raise SourceError(
            f"Fetching {location}: HTTP error {e.response.status_code}"
        ) from e
    return response.content


def load_spec(data: bytes) -> BuildSpec:
    """Parse a YAML build specification document."""
    document = _read_yaml(data, "build specification")
    try:
        return BuildSpec.model_validate(document)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid build specification: {e}") from e


def load_config(path: Optional[Path] = None, **overrides: Any) -> BuilderConfig:
    """Load builder configuration, applying non-None ``overrides`` on top."""
    data: Dict[str, Any] = {}
    if path is not None:
        try:
            content = Path(path).read_bytes()
        except OSError as e:
            raise ConfigurationError(f"Reading config {path}: {e}") from e
        data = _read_yaml(content, f"config {path}")
        logger.debug(f"Loaded builder config: {path}")

    data.update({key: value for key, value in overrides.items() if value is not None})
    try:
        return BuilderConfig(**data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid builder config: {e}") from e


def _read_yaml(data: bytes, what: str) -> Dict[str, Any]:
    """Parse a YAML document that must be a mapping."""
    yaml = YAML(typ="safe")
    try:
        document = yaml.load(data.decode("utf-8"))
    except (UnicodeDecodeError, YAMLError) as e:
        raise ConfigurationError(f"Parsing {what}: {e}") from e

    if document is None:
        return {}
    if not isinstance(document, dict):
        raise ConfigurationError(f"Expected a mapping in {what}")
    return document
