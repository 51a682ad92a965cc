"""Building blocks for the generated NestJS sources.

* :mod:`~nestgen.scaffolder.templates` -- renders config and interceptor files.
* :mod:`~nestgen.scaffolder.dependencies` -- npm packages per database/ORM pair.
* :mod:`~nestgen.scaffolder.patcher` -- anchored text edits of ``AppModule``.
"""

from nestgen.scaffolder.dependencies import resolve_dependencies
from nestgen.scaffolder.patcher import (
    PatchSpec,
    append_array_entries,
    apply_patch,
    patch_array_block,
    patch_imports,
)
from nestgen.scaffolder.templates import TemplateRenderer

__all__ = [
    "PatchSpec",
    "TemplateRenderer",
    "append_array_entries",
    "apply_patch",
    "patch_array_block",
    "patch_imports",
    "resolve_dependencies",
]
