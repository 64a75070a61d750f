"""Logging utilities."""

import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator, Optional


_build_alias: ContextVar[Optional[str]] = ContextVar("build_alias", default=None)


class BuildAliasFilter(logging.Filter):
    """Prefix records emitted during a build with the build's alias."""

    def filter(self, record: logging.LogRecord) -> bool:
        alias = _build_alias.get()
        record.alias_prefix = f"[{alias}] " if alias else ""
        return True


@contextmanager
def build_alias(alias: str) -> Iterator[None]:
    """Tag log records emitted within the block with ``alias``."""
    token = _build_alias.set(alias)
    try:
        yield
    finally:
        _build_alias.reset(token)


def setup_logging(level: str = "INFO"):
    """Setup logging configuration."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stderr)
    handler.addFilter(BuildAliasFilter())

    # Configure root logger
    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(alias_prefix)s%(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
        handlers=[handler],
        force=True,
    )

    # Reduce noise from third-party libraries
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
