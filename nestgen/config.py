"""nestgen configuration.

Two typed models live here:

* :class:`Settings` -- how the tool itself runs (output directory, which
  ``nest`` / package-manager binaries to call, timeouts).  Can be built from
  ``NESTGEN_*`` environment variables.
* :class:`GenerationConfig` -- what to generate (app name, modules, database,
  ORM, interceptors).  Created once from the CLI answers and
  never mutated afterwards.

:class:`ProjectLayout` names the fixed paths of the generated artefacts.
"""

from __future__ import annotations

import os
import re
import shlex
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Database(str, Enum):
    """Database engines offered to the user."""

    POSTGRES = "Postgres"
    MONGODB = "MongoDB"
    MYSQL = "MySQL"

    @property
    def driver_name(self) -> str:
        """Lower-cased name used as the TypeORM ``type`` / Sequelize ``dialect``."""
        return self.value.lower()


class Orm(str, Enum):
    """Object (or document) mappers offered to the user."""

    TYPEORM = "TypeORM"
    MONGOOSE = "Mongoose"
    SEQUELIZE = "Sequelize"


_APP_NAME_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_-]*$")


class GenerationConfig(BaseModel):
    """The user's choices for one generation run."""

    model_config = ConfigDict(frozen=True)

    app_name: str = Field(..., min_length=1, description="Directory and package name of the app")
    modules: tuple[str, ...] = Field(
        default=(),
        description="Resource modules to generate, in generation order",
    )
    database: Database
    orm: Orm
    interceptors: bool = Field(default=True, description="Generate response/error interceptors")

    @field_validator("app_name")
    @classmethod
    def _check_app_name(cls, value: str) -> str:
        if not _APP_NAME_RE.match(value):
            raise ValueError(
                "app name may only contain letters, digits, '-' and '_' "
                "and must start with a letter or digit"
            )
        return value

    @field_validator("modules", mode="before")
    @classmethod
    def _normalise_modules(cls, value: Any) -> Any:
        if value is None:
            return ()
        if isinstance(value, str):
            value = value.split(",")
        if isinstance(value, (list, tuple)):
            # Non-string items pass through for the tuple[str, ...] check to reject.
            return tuple(
                item.strip() if isinstance(item, str) else item
                for item in value
                if not isinstance(item, str) or item.strip()
            )
        return value

    @field_validator("modules")
    @classmethod
    def _check_modules(cls, value: tuple[str, ...]) -> tuple[str, ...]:
        seen: set[str] = set()
        for name in value:
            if not _APP_NAME_RE.match(name.replace("/", "-")):
                raise ValueError(f"invalid module name: {name!r}")
            if name in seen:
                raise ValueError(f"duplicate module name: {name!r}")
            seen.add(name)
        return value


class Settings(BaseModel):
    """How nestgen runs: where projects go and which tools it calls."""

    output_dir: Path = Field(default=Path("."))
    nest_command: str = Field(default="nest", description="Command used to invoke the Nest CLI")
    package_manager: str = Field(default="npm")
    command_timeout: int = Field(
        default=600, ge=10, description="Timeout for a single generator call in seconds"
    )
    install_timeout: int = Field(
        default=900, ge=10, description="Timeout for the dependency install in seconds"
    )

    @property
    def nest_argv(self) -> list[str]:
        """The Nest CLI command split into arguments (``npx @nestjs/cli`` works too)."""
        return shlex.split(self.nest_command)

    def project_root(self, app_name: str) -> Path:
        """Absolute directory the app named *app_name* is generated into."""
        return self.output_dir.resolve() / app_name

    @classmethod
    def from_env(cls) -> "Settings":
        """Build ``Settings`` from environment variables.

        Recognised variables (all optional):
            NESTGEN_OUTPUT_DIR, NESTGEN_NEST_COMMAND, NESTGEN_PACKAGE_MANAGER,
            NESTGEN_COMMAND_TIMEOUT, NESTGEN_INSTALL_TIMEOUT.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("NESTGEN_OUTPUT_DIR"):
            kwargs["output_dir"] = Path(os.environ["NESTGEN_OUTPUT_DIR"])
        if os.environ.get("NESTGEN_NEST_COMMAND"):
            kwargs["nest_command"] = os.environ["NESTGEN_NEST_COMMAND"]
        if os.environ.get("NESTGEN_PACKAGE_MANAGER"):
            kwargs["package_manager"] = os.environ["NESTGEN_PACKAGE_MANAGER"]
        if os.environ.get("NESTGEN_COMMAND_TIMEOUT"):
            kwargs["command_timeout"] = int(os.environ["NESTGEN_COMMAND_TIMEOUT"])
        if os.environ.get("NESTGEN_INSTALL_TIMEOUT"):
            kwargs["install_timeout"] = int(os.environ["NESTGEN_INSTALL_TIMEOUT"])
        return cls(**kwargs)


class ProjectLayout:
    """Relative paths of the files nestgen reads and writes inside a project."""

    APP_MODULE = Path("src") / "app.module.ts"
    MODULES_DIR = Path("src") / "modules"
    CONFIG_DIR = Path("src") / "config"
    DATABASE_CONFIG = CONFIG_DIR / "database.config.ts"
    INTERCEPTORS_DIR = Path("src") / "common" / "interceptors"
    RESPONSE_INTERCEPTOR = INTERCEPTORS_DIR / "response" / "response.interceptor.ts"
    ERROR_INTERCEPTOR = INTERCEPTORS_DIR / "error" / "error.interceptor.ts"

    @classmethod
    def interceptor(cls, kind: str) -> Path:
        """Path of the generated interceptor file for ``"response"`` or ``"error"``."""
        if kind == "response":
            return cls.RESPONSE_INTERCEPTOR
        if kind == "error":
            return cls.ERROR_INTERCEPTOR
        raise ValueError(f"Unknown interceptor kind: {kind}")
