"""Jinja2 template rendering for the generated TypeScript sources.

The template set is fixed: one database configuration template per ORM and
the two interceptor bodies, all stored under ``nestgen/scaffolder/templates/``.
Rendering is pure -- the same selection always yields byte-identical output.

The small import/registration snippets that get patched into ``AppModule``
are kept here too, next to the files they refer to.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from nestgen.config import Database, Orm

# ---------------------------------------------------------------------------
# Template directory discovery
# ---------------------------------------------------------------------------

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"

_DATABASE_TEMPLATES: dict[Orm, str] = {
    Orm.TYPEORM: "database/typeorm.config.ts.j2",
    Orm.MONGOOSE: "database/mongoose.config.ts.j2",
    Orm.SEQUELIZE: "database/sequelize.config.ts.j2",
}

INTERCEPTOR_KINDS: tuple[str, ...] = ("response", "error")

# Nest module class per ORM, and the expression handed to its ``forRoot``.
_ORM_MODULES: dict[Orm, tuple[str, str, str]] = {
    Orm.TYPEORM: ("TypeOrmModule", "@nestjs/typeorm", "databaseConfig"),
    Orm.MONGOOSE: ("MongooseModule", "@nestjs/mongoose", "databaseConfig.uri"),
    Orm.SEQUELIZE: ("SequelizeModule", "@nestjs/sequelize", "databaseConfig"),
}

_INTERCEPTOR_CLASSES: dict[str, str] = {
    "response": "ResponseInterceptor",
    "error": "ErrorInterceptor",
}


def database_port(database: Database) -> int:
    """Default port written into SQL configs: 5432 for Postgres, 3306 otherwise."""
    return 5432 if database is Database.POSTGRES else 3306


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders the packaged ``.j2`` templates into TypeScript source text."""

    def __init__(self, template_dir: str | Path | None = None) -> None:
        if template_dir is None:
            template_dir = _DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=select_autoescape([]),
            keep_trailing_newline=True,
            undefined=StrictUndefined,
        )

    def render(self, template_path: str, context: dict[str, Any]) -> str:
        """Render a single template with the provided context.

        Args:
            template_path: Path relative to the template directory (e.g.
                ``"database/typeorm.config.ts.j2"``).
            context: Dictionary of variables available inside the template.
        """
        template = self.env.get_template(template_path)
        return template.render(**context)

    def render_database_config(self, database: Database | str, orm: Orm | str) -> str:
        """Render ``src/config/database.config.ts`` for the selected database and ORM.

        TypeORM and Sequelize get a typed options object with host, port and
        placeholder credentials.  Mongoose gets a connection URI object
        instead; it has no host/port fields at all.
        """
        database = Database(database)
        orm = Orm(orm)
        context = {"database": database, "port": database_port(database)}
        return self.render(_DATABASE_TEMPLATES[orm], context)

    def render_interceptor(self, kind: str) -> str:
        """Render the body of the ``"response"`` or ``"error"`` interceptor."""
        if kind not in INTERCEPTOR_KINDS:
            raise ValueError(f"Unknown interceptor kind: {kind}")
        return self.render(f"interceptors/{kind}.interceptor.ts.j2", {})


# ---------------------------------------------------------------------------
# AppModule snippets
# ---------------------------------------------------------------------------


def database_module_import(orm: Orm | str) -> str:
    """Import statements ``AppModule`` needs for the ORM module and its config."""
    module_class, package, _ = _ORM_MODULES[Orm(orm)]
    return (
        f"import {{ {module_class} }} from '{package}';\n"
        "import { databaseConfig } from './config/database.config';"
    )


def database_module_entry(orm: Orm | str) -> str:
    """The ``imports`` array entry that initialises the ORM module."""
    module_class, _, argument = _ORM_MODULES[Orm(orm)]
    return f"{module_class}.forRoot({argument})"


def interceptor_imports() -> str:
    """Import statements for ``APP_INTERCEPTOR`` and both interceptor classes."""
    lines = ["import { APP_INTERCEPTOR } from '@nestjs/core';"]
    for kind in INTERCEPTOR_KINDS:
        module_path = f"./common/interceptors/{kind}/{kind}.interceptor"
        lines.append(f"import {{ {_INTERCEPTOR_CLASSES[kind]} }} from '{module_path}';")
    return "\n".join(lines)


def interceptor_providers() -> list[str]:
    """``providers`` entries registering both interceptors globally, response first."""
    return [
        "{\n"
        "      provide: APP_INTERCEPTOR,\n"
        f"      useClass: {_INTERCEPTOR_CLASSES[kind]},\n"
        "    }"
        for kind in INTERCEPTOR_KINDS
    ]
