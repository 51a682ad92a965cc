"""Gateways to the outside world: external processes and the project tree.

The pipeline never spawns processes or touches files directly.  It talks to a
:class:`CommandRunner` (anything with an async ``run`` method) and to a
:class:`ProjectFiles` instance scoped to the project root, so tests can swap
in a recording fake runner and a temporary directory.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from nestgen.errors import CommandError, DirectoryError, FileReadError, FileWriteError
from nestgen.utils import ensure_dir, read_file, run_command, write_file


@dataclass
class CommandResult:
    """Outcome of one external command."""

    command: list[str]
    cwd: Path
    exit_code: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


class CommandRunner(Protocol):
    """Runs an external command in a given working directory.

    Implementations raise :class:`CommandError` when the command exits
    non-zero or cannot be started.
    """

    async def run(
        self, command: Sequence[str], cwd: Path, timeout: int | None = None
    ) -> CommandResult: ...


class SubprocessRunner:
    """:class:`CommandRunner` backed by real subprocesses."""

    def __init__(self, timeout: int = 600) -> None:
        self.timeout = timeout

    async def run(
        self, command: Sequence[str], cwd: Path, timeout: int | None = None
    ) -> CommandResult:
        argv = list(command)
        try:
            exit_code, stdout, stderr = await run_command(
                argv, cwd=cwd, timeout=timeout or self.timeout
            )
        except OSError as exc:
            raise CommandError(argv, 127, str(exc)) from exc

        result = CommandResult(argv, Path(cwd), exit_code, stdout, stderr)
        if not result.ok:
            raise CommandError(argv, exit_code, stderr or stdout)
        return result


class ProjectFiles:
    """File operations scoped to one project root.

    All paths are relative to ``root``; a path that resolves outside the root
    is rejected with ``ValueError``.  I/O runs in a worker thread so the event
    loop is never blocked.
    """

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def resolve(self, relative: str | Path) -> Path:
        """Absolute path of *relative* inside the project root."""
        target = (self.root / relative).resolve()
        root = self.root.resolve()
        if target != root and root not in target.parents:
            raise ValueError(f"{relative} escapes the project root {root}")
        return target

    async def ensure_directory(self, relative: str | Path = ".") -> Path:
        target = self.resolve(relative)
        try:
            return await asyncio.to_thread(ensure_dir, target)
        except OSError as exc:
            raise DirectoryError(target, exc.strerror or str(exc)) from exc

    async def read_file(self, relative: str | Path) -> str:
        target = self.resolve(relative)
        try:
            return await asyncio.to_thread(read_file, target)
        except FileNotFoundError as exc:
            raise FileReadError(target, not_found=True) from exc
        except (OSError, UnicodeDecodeError) as exc:
            raise FileReadError(target) from exc

    async def write_file(self, relative: str | Path, content: str) -> Path:
        target = self.resolve(relative)
        try:
            await asyncio.to_thread(write_file, target, content)
        except OSError as exc:
            raise FileWriteError(target) from exc
        return target

    async def exists(self, relative: str | Path) -> bool:
        target = self.resolve(relative)
        try:
            return await asyncio.to_thread(target.exists)
        except OSError as exc:
            raise FileReadError(target) from exc
