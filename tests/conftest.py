"""Shared pytest fixtures for the nestgen test suite.

Provides reusable fixtures for:
- Settings pointing at a temporary output directory
- A factory for ``GenerationConfig`` records
- A recording fake ``CommandRunner`` that imitates the Nest CLI and npm
- A Rich console that records output instead of printing it
"""

from __future__ import annotations

import io
import textwrap
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

import pytest
from rich.console import Console

from nestgen.config import GenerationConfig, Settings
from nestgen.errors import CommandError
from nestgen.gateways import CommandResult


# ---------------------------------------------------------------------------
# Generated source samples
# ---------------------------------------------------------------------------

DEFAULT_APP_MODULE = textwrap.dedent("""\
    import { Module } from '@nestjs/common';
    import { AppController } from './app.controller';
    import { AppService } from './app.service';

    @Module({
      imports: [],
      controllers: [AppController],
      providers: [AppService],
    })
    export class AppModule {}
    """)


def _pascal(name: str) -> str:
    return "".join(part.capitalize() for part in name.replace("_", "-").split("-") if part)


# ---------------------------------------------------------------------------
# Fake Nest CLI / npm
# ---------------------------------------------------------------------------


class FakeRunner:
    """Recording stand-in for :class:`~nestgen.gateways.SubprocessRunner`.

    Every call is appended to ``calls`` as ``(argv, cwd)``.  Commands whose
    joined text contains one of ``fail_on`` raise ``CommandError``.  Nest
    commands write the files the real CLI would produce, so later stages
    find an ``app.module.ts`` to patch.
    """

    def __init__(self, fail_on: Sequence[str] = (), simulate: bool = True) -> None:
        self.fail_on = list(fail_on)
        self.simulate = simulate
        self.calls: list[tuple[list[str], Path]] = []

    @property
    def commands(self) -> list[str]:
        return [" ".join(argv) for argv, _ in self.calls]

    async def run(
        self, command: Sequence[str], cwd: Path, timeout: int | None = None
    ) -> CommandResult:
        argv = list(command)
        cwd = Path(cwd)
        self.calls.append((argv, cwd))

        joined = " ".join(argv)
        if any(marker in joined for marker in self.fail_on):
            raise CommandError(argv, 1, f"simulated failure: {joined}")

        if self.simulate and argv and argv[0] == "nest":
            self._simulate_nest(argv[1:], cwd)
        return CommandResult(argv, cwd, 0, "", "")

    def _simulate_nest(self, args: list[str], cwd: Path) -> None:
        if args[0] == "new":
            root = cwd / args[1]
            (root / "src").mkdir(parents=True, exist_ok=True)
            (root / "src" / "app.module.ts").write_text(DEFAULT_APP_MODULE, encoding="utf-8")
            (root / "package.json").write_text('{"name": "%s"}\n' % args[1], encoding="utf-8")
        elif args[:2] == ["g", "resource"]:
            name = args[2].split("/")[-1]
            module_dir = cwd / "src" / "modules" / name
            module_dir.mkdir(parents=True, exist_ok=True)
            class_name = f"{_pascal(name)}Module"
            (module_dir / f"{name}.module.ts").write_text(
                f"export class {class_name} {{}}\n", encoding="utf-8"
            )
            app_module = cwd / "src" / "app.module.ts"
            source = app_module.read_text(encoding="utf-8")
            if "imports: []" in source:
                source = source.replace("imports: []", f"imports: [{class_name}]", 1)
            else:
                source = source.replace("imports: [", f"imports: [{class_name}, ", 1)
            source = f"import {{ {class_name} }} from './modules/{name}/{name}.module';\n{source}"
            app_module.write_text(source, encoding="utf-8")
        elif args[:2] == ["g", "interceptor"]:
            kind = args[2].split("/")[-1]
            target = cwd / "src" / args[2] / f"{kind}.interceptor.ts"
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(f"// generated {kind} interceptor\n", encoding="utf-8")


@pytest.fixture
def fake_runner() -> FakeRunner:
    """A fake runner where every command succeeds."""
    return FakeRunner()


@pytest.fixture
def make_runner() -> Callable[..., FakeRunner]:
    """Factory for fake runners with configurable failures."""
    def factory(fail_on: Sequence[str] = (), simulate: bool = True) -> FakeRunner:
        return FakeRunner(fail_on=fail_on, simulate=simulate)

    return factory


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings that generate into a temporary output directory."""
    output = tmp_path / "apps"
    output.mkdir()
    return Settings(output_dir=output)


@pytest.fixture
def make_config() -> Callable[..., GenerationConfig]:
    """Factory for ``GenerationConfig`` with scenario-A defaults."""
    def factory(**overrides: Any) -> GenerationConfig:
        values: dict[str, Any] = {
            "app_name": "shop",
            "modules": ["users"],
            "database": "Postgres",
            "orm": "TypeORM",
            "interceptors": False,
        }
        values.update(overrides)
        return GenerationConfig(**values)

    return factory


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------


@pytest.fixture
def recording_console() -> Console:
    """A Rich console that records output without writing to the terminal."""
    return Console(record=True, file=io.StringIO(), width=120)


@pytest.fixture
def app_module_source() -> str:
    """The ``src/app.module.ts`` produced by ``nest new``."""
    return DEFAULT_APP_MODULE
