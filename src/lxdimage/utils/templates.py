"""Template syntax checking utilities."""

import logging

from jinja2 import Environment, TemplateSyntaxError


logger = logging.getLogger(__name__)

# LXD renders image templates with pongo2 inside the guest. pongo2 is close
# enough to Jinja that a Jinja parse flags most broken bodies early.
_environment = Environment(autoescape=False)


def check_template_syntax(content: str) -> None:
    """Raise TemplateSyntaxError if ``content`` is not a well-formed template."""
    try:
        _environment.parse(content)
    except TemplateSyntaxError as e:
        logger.debug(f"Template syntax error on line {e.lineno}: {e.message}")
        raise
