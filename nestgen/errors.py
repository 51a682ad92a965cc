"""Exception hierarchy for the generation pipeline.

Every stage failure is raised as a subclass of :class:`NestGenError`.  When
an error wraps a lower-level failure (an ``OSError``, a failed subprocess) the
original exception is chained as ``__cause__`` so callers can report both.
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from pathlib import Path


class NestGenError(Exception):
    """Base class for every error raised by nestgen."""


class DirectoryError(NestGenError):
    """Raised when a directory cannot be created."""

    def __init__(self, path: Path, message: str = "") -> None:
        self.path = Path(path)
        detail = f": {message}" if message else ""
        super().__init__(f"Cannot create directory {self.path}{detail}")


class CommandError(NestGenError):
    """Raised when an external command exits non-zero or cannot be started."""

    def __init__(self, command: Sequence[str], exit_code: int, stderr: str = "") -> None:
        self.command = list(command)
        self.exit_code = exit_code
        self.stderr = stderr
        message = f"Command `{' '.join(self.command)}` failed with exit code {exit_code}"
        if stderr:
            message += f": {stderr.strip()[:500]}"
        super().__init__(message)


class GeneratorError(NestGenError):
    """Raised when the ``nest`` generator fails for a base app, module or interceptor."""

    def __init__(self, stage: str, target: str) -> None:
        self.stage = stage
        self.target = target
        super().__init__(f"Generator failed ({stage}): {target}")


class DependencyInstallError(NestGenError):
    """Raised when the package installer fails."""

    def __init__(self, packages: Sequence[str]) -> None:
        self.packages = tuple(packages)
        super().__init__(f"Failed to install dependencies: {' '.join(self.packages)}")


class ConfigWriteError(NestGenError):
    """Raised when the database configuration file cannot be written."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        super().__init__(f"Failed to write database configuration: {self.path}")


class PatchFailure(str, Enum):
    """Why a source patch could not be applied."""

    ANCHOR_NOT_FOUND = "anchor_not_found"
    UNBALANCED_BLOCK = "unbalanced_block"


class PatchError(NestGenError):
    """Raised when a source file cannot be patched at the requested anchor."""

    def __init__(self, reason: PatchFailure, keyword: str, path: Path | None = None) -> None:
        self.reason = reason
        self.keyword = keyword
        self.path = path
        where = f" in {path}" if path is not None else ""
        if reason is PatchFailure.ANCHOR_NOT_FOUND:
            message = f"No `{keyword}: [...]` block found{where}"
        else:
            message = f"`{keyword}: [` block is never closed{where}"
        super().__init__(message)


class FileReadError(NestGenError):
    """Raised when a project file cannot be read."""

    def __init__(self, path: Path, not_found: bool = False) -> None:
        self.path = Path(path)
        self.not_found = not_found
        reason = "not found" if not_found else "unreadable"
        super().__init__(f"Cannot read {self.path} ({reason})")


class FileWriteError(NestGenError):
    """Raised when a project file cannot be written."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        super().__init__(f"Cannot write {self.path}")
