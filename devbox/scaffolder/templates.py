"""Jinja2 template rendering for project scaffolding.

Provides the TemplateRenderer class which loads Jinja2 templates from the
``devbox/scaffolder/templates/`` directory and renders them with the context
built from the project record.  Rendering is pure; writing files is the
generator's job.
"""

from __future__ import annotations

import shlex
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape


# ---------------------------------------------------------------------------
# Template directory discovery
# ---------------------------------------------------------------------------

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders Jinja2 templates for project scaffolding.

    Undefined variables raise instead of rendering as empty strings, so a
    template can never silently emit ``PROJECT_NAME=``.
    """

    def __init__(self, template_dir: str | Path | None = None) -> None:
        if template_dir is None:
            template_dir = _DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape([]),
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
        )
        self.env.filters["shell_quote"] = _shell_quote_filter
        self.env.filters["shell_join"] = _shell_join_filter
        self.env.filters["env_quote"] = _env_quote_filter

    def render(self, template_path: str, context: dict[str, Any]) -> str:
        """Render a single template with the provided context.

        Args:
            template_path: Path relative to the template directory (e.g.
                ``"docker-compose.yml.j2"``).
            context: Dictionary of variables available inside the template.

        Returns:
            The rendered template content as a string.
        """
        template = self.env.get_template(template_path)
        return template.render(**context)

    def render_string(self, template_string: str, context: dict[str, Any]) -> str:
        """Render an inline template string with the provided context."""
        template = self.env.from_string(template_string)
        return template.render(**context)


# ---------------------------------------------------------------------------
# Jinja2 custom filters
# ---------------------------------------------------------------------------

def _shell_quote_filter(value: Any) -> str:
    """Quote a value for POSIX shells."""
    return shlex.quote(str(value))


def _shell_join_filter(values: list[Any]) -> str:
    """Join argv items into a single, safely quoted command line."""
    return shlex.join(str(v) for v in values)


def _env_quote_filter(value: Any) -> str:
    """Double-quote a value for a file read by both ``source`` and ``docker compose``.

    Only ``"`` is escaped, so the value must already be free of ``$``,
    backticks, backslashes and newlines.
    """
    text = str(value)
    if any(ch in text for ch in "$`\\\n\r"):
        raise ValueError(f"value cannot be written to an env file: {text!r}")
    return '"' + text.replace('"', '\\"') + '"'
