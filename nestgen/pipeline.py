"""nestgen pipeline orchestrator.

Generates a NestJS application in five stages, each run to completion before
the next one starts:

INIT              -- Create the project directory.
BASE_STRUCTURE    -- ``nest new`` the base application.
MODULE_GENERATION -- ``nest g resource`` every requested module, in order.
DATABASE_SETUP    -- Install ORM packages, write the database config, wire it
                     into ``AppModule``.
INTERCEPTOR_SETUP -- (optional) Generate response/error interceptors and
                     register them as global providers.

The first failing stage ends the run.  Nothing is rolled back: a failed run
may leave a partially generated project on disk.

Usage::

    result = await Pipeline(Settings()).run(config)
    if not result.ok:
        print(result.stage, result.cause)
"""

from __future__ import annotations

import time
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Union

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from nestgen.config import GenerationConfig, ProjectLayout, Settings
from nestgen.errors import (
    CommandError,
    ConfigWriteError,
    DependencyInstallError,
    FileWriteError,
    GeneratorError,
    NestGenError,
    PatchError,
)
from nestgen.gateways import CommandRunner, ProjectFiles, SubprocessRunner
from nestgen.scaffolder.dependencies import resolve_dependencies
from nestgen.scaffolder.patcher import PatchSpec, apply_patch
from nestgen.scaffolder.templates import (
    INTERCEPTOR_KINDS,
    TemplateRenderer,
    database_module_entry,
    database_module_import,
    interceptor_imports,
    interceptor_providers,
)
from nestgen.utils import (
    console,
    format_duration,
    print_step,
    print_success,
    print_warning,
)

# ---------------------------------------------------------------------------
# Stages and results
# ---------------------------------------------------------------------------


class Stage(str, Enum):
    """Pipeline states, in execution order."""

    INIT = "init"
    BASE_STRUCTURE = "base_structure"
    MODULE_GENERATION = "module_generation"
    DATABASE_SETUP = "database_setup"
    INTERCEPTOR_SETUP = "interceptor_setup"
    DONE = "done"


STAGE_NAMES: dict[Stage, str] = {
    Stage.INIT: "Init",
    Stage.BASE_STRUCTURE: "Base structure",
    Stage.MODULE_GENERATION: "Module generation",
    Stage.DATABASE_SETUP: "Database setup",
    Stage.INTERCEPTOR_SETUP: "Interceptor setup",
    Stage.DONE: "Done",
}


@dataclass(frozen=True)
class Success:
    """The application was generated completely."""

    project_root: Path

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    """The run stopped at ``stage`` because of ``cause``."""

    stage: Stage
    cause: NestGenError

    @property
    def ok(self) -> bool:
        return False

    def describe(self) -> str:
        text = f"[{self.stage.value}] {self.cause}"
        if self.cause.__cause__ is not None:
            text += f"\n  caused by: {self.cause.__cause__}"
        return text


PipelineResult = Union[Success, Failure]


# ---------------------------------------------------------------------------
# Pipeline Orchestrator
# ---------------------------------------------------------------------------


class Pipeline:
    """Drives one generation run.

    Each stage is a coroutine that performs its work and returns the next
    :class:`Stage`, or raises a :class:`NestGenError`.  :meth:`run` turns the
    first error into a :class:`Failure` tagged with the stage that raised it.

    Attributes:
        settings: Tool settings (output dir, commands, timeouts).
        runner: Gateway used for every external command.
        renderer: Template renderer for generated TypeScript files.
        completed: Stages finished during the current run.
    """

    _STAGE_METHODS: dict[Stage, str] = {
        Stage.INIT: "_stage_init",
        Stage.BASE_STRUCTURE: "_stage_base_structure",
        Stage.MODULE_GENERATION: "_stage_module_generation",
        Stage.DATABASE_SETUP: "_stage_database_setup",
        Stage.INTERCEPTOR_SETUP: "_stage_interceptor_setup",
    }

    def __init__(
        self,
        settings: Settings | None = None,
        runner: CommandRunner | None = None,
        renderer: TemplateRenderer | None = None,
        out: Console | None = None,
    ) -> None:
        self.settings = settings or Settings()
        self.runner = runner or SubprocessRunner(timeout=self.settings.command_timeout)
        self.renderer = renderer or TemplateRenderer()
        self.console = out or console
        self.completed: list[Stage] = []

    # ------------------------------------------------------------------
    # Entry point
    # ------------------------------------------------------------------

    async def run(self, config: GenerationConfig) -> PipelineResult:
        """Generate the application described by *config*."""
        self.config = config
        self.project_root = self.settings.project_root(config.app_name)
        self.files = ProjectFiles(self.project_root)
        self.completed = []

        started = time.monotonic()
        self._print_banner()

        stage = Stage.INIT
        while stage is not Stage.DONE:
            method = getattr(self, self._STAGE_METHODS[stage])
            try:
                next_stage = await method()
            except NestGenError as exc:
                failure = Failure(stage, exc)
                self._print_final_summary(time.monotonic() - started, failure)
                return failure
            self.completed.append(stage)
            stage = next_stage

        result = Success(self.project_root)
        self._print_final_summary(time.monotonic() - started, result)
        print_success(
            f"NestJS application {config.app_name} created successfully!", out=self.console
        )
        return result

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    async def _stage_init(self) -> Stage:
        await self.files.ensure_directory()
        if await self.files.exists(ProjectLayout.APP_MODULE):
            print_warning(
                f"{self.project_root} already contains an application; "
                "AppModule will be patched again",
                out=self.console,
            )
        print_step(f"Project directory ready: {self.project_root}", out=self.console)
        return Stage.BASE_STRUCTURE

    async def _stage_base_structure(self) -> Stage:
        app_name = self.config.app_name
        await self._generate(
            [
                "new",
                app_name,
                "--package-manager",
                self.settings.package_manager,
                "--skip-git",
                "--skip-install",
            ],
            cwd=self.project_root.parent,
            stage="base",
            target=app_name,
        )
        print_step(f"Base application generated: {app_name}", out=self.console)
        return Stage.MODULE_GENERATION

    async def _stage_module_generation(self) -> Stage:
        if not self.config.modules:
            return Stage.DATABASE_SETUP

        await self.files.ensure_directory(ProjectLayout.MODULES_DIR)
        for module_name in self.config.modules:
            await self._generate(
                ["g", "resource", f"modules/{module_name}"],
                cwd=self.project_root,
                stage="module",
                target=module_name,
            )
            print_step(f"Module generated: {module_name}", out=self.console)
        return Stage.DATABASE_SETUP

    async def _stage_database_setup(self) -> Stage:
        database, orm = self.config.database, self.config.orm

        packages = resolve_dependencies(database, orm)
        await self._install(packages)
        print_step(f"Installed {', '.join(packages)}", out=self.console)

        content = self.renderer.render_database_config(database, orm)
        try:
            config_path = await self.files.write_file(ProjectLayout.DATABASE_CONFIG, content)
        except FileWriteError as exc:
            raise ConfigWriteError(exc.path) from exc
        print_step(f"Database configuration written: {config_path}", out=self.console)

        await self._patch_app_module(
            PatchSpec(
                block_keyword="imports",
                entries=(database_module_entry(orm),),
                import_text=database_module_import(orm),
            )
        )
        print_step(
            f"AppModule wired for {database.value} with {orm.value}", out=self.console
        )

        if self.config.interceptors:
            return Stage.INTERCEPTOR_SETUP
        return Stage.DONE

    async def _stage_interceptor_setup(self) -> Stage:
        await self.files.ensure_directory(ProjectLayout.INTERCEPTORS_DIR)

        for kind in INTERCEPTOR_KINDS:
            await self._generate(
                ["g", "interceptor", f"common/interceptors/{kind}", "--no-spec"],
                cwd=self.project_root,
                stage="interceptor",
                target=kind,
            )

        for kind in INTERCEPTOR_KINDS:
            await self.files.write_file(
                ProjectLayout.interceptor(kind), self.renderer.render_interceptor(kind)
            )
            print_step(f"{kind.capitalize()} interceptor written", out=self.console)

        # Both providers land in one read-modify-write of AppModule.
        await self._patch_app_module(
            PatchSpec(
                block_keyword="providers",
                entries=tuple(interceptor_providers()),
                import_text=interceptor_imports(),
            )
        )
        print_step("AppModule updated with interceptors", out=self.console)
        return Stage.DONE

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _generate(self, args: Sequence[str], cwd: Path, stage: str, target: str) -> None:
        """Run the Nest CLI with *args*, raising ``GeneratorError`` on failure."""
        command = [*self.settings.nest_argv, *args]
        try:
            await self.runner.run(command, cwd, timeout=self.settings.command_timeout)
        except CommandError as exc:
            raise GeneratorError(stage, target) from exc

    async def _install(self, packages: Sequence[str]) -> None:
        command = [self.settings.package_manager, "install", *packages, "--save"]
        try:
            await self.runner.run(
                command, self.project_root, timeout=self.settings.install_timeout
            )
        except CommandError as exc:
            raise DependencyInstallError(packages) from exc

    async def _patch_app_module(self, spec: PatchSpec) -> None:
        """Apply *spec* to ``src/app.module.ts``; the file is untouched on failure."""
        source = await self.files.read_file(ProjectLayout.APP_MODULE)
        try:
            patched = apply_patch(source, spec)
        except PatchError as exc:
            raise PatchError(
                exc.reason, exc.keyword, self.files.resolve(ProjectLayout.APP_MODULE)
            ) from exc
        await self.files.write_file(ProjectLayout.APP_MODULE, patched)

    # ------------------------------------------------------------------
    # Output
    # ------------------------------------------------------------------

    def _print_banner(self) -> None:
        config = self.config
        self.console.print(
            Panel(
                f"[bold bright_cyan]nestgen[/bold bright_cyan]\n"
                f"App          : {escape(config.app_name)}\n"
                f"Output       : {escape(str(self.project_root))}\n"
                f"Modules      : {escape(', '.join(config.modules) or '(none)')}\n"
                f"Database     : {config.database.value} ({config.orm.value})\n"
                f"Interceptors : {'yes' if config.interceptors else 'no'}",
                title="[bold]Generating NestJS application[/bold]",
                border_style="bright_cyan",
            )
        )

    def _print_final_summary(self, elapsed: float, result: PipelineResult) -> None:
        if result.ok:
            border_style = "bold green"
            status_text = "[bold green]GENERATION SUCCEEDED[/bold green]"
        else:
            border_style = "bold red"
            status_text = "[bold red]GENERATION FAILED[/bold red]"

        completed = ", ".join(STAGE_NAMES[stage] for stage in self.completed) or "none"
        detail_lines = [
            status_text,
            "",
            f"Duration  : {format_duration(elapsed)}",
            f"Completed : {completed}",
        ]
        if isinstance(result, Failure):
            detail_lines.append(f"Failed    : {STAGE_NAMES[result.stage]}")
            detail_lines.append(f"Error     : {escape(result.describe())}")
        detail_lines.append(f"Project   : {escape(str(self.project_root))}")

        self.console.print()
        self.console.print(
            Panel(
                "\n".join(detail_lines),
                title="[bold]Generation Complete[/bold]",
                border_style=border_style,
            )
        )
