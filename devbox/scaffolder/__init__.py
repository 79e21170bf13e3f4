"""devbox scaffolder -- renders the project directory from Jinja2 templates.

Quick usage::

    from devbox.scaffolder import ProjectScaffolder, build_context

    scaffolder = ProjectScaffolder(settings)
    files = scaffolder.render_files(build_context(record, settings))
    project_dir = scaffolder.scaffold(record)
"""

from devbox.scaffolder.generator import (
    PROJECT_FILES,
    GeneratedFile,
    ProjectScaffolder,
    build_context,
)
from devbox.scaffolder.templates import TemplateRenderer

__all__ = [
    "PROJECT_FILES",
    "GeneratedFile",
    "ProjectScaffolder",
    "TemplateRenderer",
    "build_context",
]
