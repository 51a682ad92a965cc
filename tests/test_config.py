"""Unit tests for nestgen configuration (nestgen.config).

Tests cover:
- Database / Orm enums
- GenerationConfig validation (app name, module normalisation, duplicates)
- GenerationConfig immutability and non-string module entries
- Settings defaults, derived values and from_env
- ProjectLayout paths
"""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from nestgen.config import Database, GenerationConfig, Orm, ProjectLayout, Settings


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class TestEnums:
    @pytest.mark.unit
    def test_database_values(self):
        assert [db.value for db in Database] == ["Postgres", "MongoDB", "MySQL"]

    @pytest.mark.unit
    def test_driver_names_are_lowercase(self):
        assert Database.POSTGRES.driver_name == "postgres"
        assert Database.MYSQL.driver_name == "mysql"
        assert Database.MONGODB.driver_name == "mongodb"

    @pytest.mark.unit
    def test_orm_values(self):
        assert [orm.value for orm in Orm] == ["TypeORM", "Mongoose", "Sequelize"]

    @pytest.mark.unit
    def test_postgresql_spelling_is_rejected(self):
        with pytest.raises(ValueError):
            Database("PostgreSQL")


# ---------------------------------------------------------------------------
# GenerationConfig
# ---------------------------------------------------------------------------


class TestGenerationConfig:
    @pytest.mark.unit
    def test_valid_config(self, make_config):
        config = make_config()
        assert config.app_name == "shop"
        assert config.modules == ("users",)
        assert config.database is Database.POSTGRES
        assert config.orm is Orm.TYPEORM
        assert config.interceptors is False

    @pytest.mark.unit
    def test_interceptors_default_true(self):
        config = GenerationConfig(app_name="shop", database="MySQL", orm="Sequelize")
        assert config.interceptors is True
        assert config.modules == ()

    @pytest.mark.unit
    def test_modules_from_comma_separated_string(self, make_config):
        config = make_config(modules=" users , orders,, ,payments ")
        assert config.modules == ("users", "orders", "payments")

    @pytest.mark.unit
    def test_blank_module_entries_are_dropped(self, make_config):
        config = make_config(modules=["users", "", "   ", " orders "])
        assert config.modules == ("users", "orders")

    @pytest.mark.unit
    def test_module_order_is_preserved(self, make_config):
        config = make_config(modules=["orders", "users", "audit"])
        assert config.modules == ("orders", "users", "audit")

    @pytest.mark.unit
    def test_duplicate_modules_rejected(self, make_config):
        with pytest.raises(ValidationError, match="duplicate"):
            make_config(modules=["users", "users"])

    @pytest.mark.unit
    def test_invalid_module_name_rejected(self, make_config):
        with pytest.raises(ValidationError):
            make_config(modules=["users; rm -rf /"])

    @pytest.mark.unit
    def test_nested_module_path_allowed(self, make_config):
        config = make_config(modules=["admin/users"])
        assert config.modules == ("admin/users",)

    @pytest.mark.unit
    @pytest.mark.parametrize("name", ["", "my app", "-shop", "shop!", "../shop"])
    def test_invalid_app_names(self, make_config, name):
        with pytest.raises(ValidationError):
            make_config(app_name=name)

    @pytest.mark.unit
    @pytest.mark.parametrize("name", ["shop", "my-shop", "shop_2", "2fa-service"])
    def test_valid_app_names(self, make_config, name):
        assert make_config(app_name=name).app_name == name

    @pytest.mark.unit
    def test_unknown_database_rejected(self, make_config):
        with pytest.raises(ValidationError):
            make_config(database="Oracle")

    @pytest.mark.unit
    def test_config_is_frozen(self, make_config):
        config = make_config()
        with pytest.raises(ValidationError):
            config.app_name = "other"

    @pytest.mark.unit
    @pytest.mark.parametrize("modules", [["users", 5], [1], ("users", None)])
    def test_non_string_module_rejected(self, make_config, modules):
        with pytest.raises(ValidationError):
            make_config(modules=modules)

    @pytest.mark.unit
    def test_validate_from_answers_dict(self):
        config = GenerationConfig.model_validate(
            {
                "app_name": "shop",
                "modules": ["users", "orders"],
                "database": "MongoDB",
                "orm": "Mongoose",
                "interceptors": True,
            }
        )
        assert config.modules == ("users", "orders")
        assert config.database is Database.MONGODB
        assert config.orm is Orm.MONGOOSE


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


class TestSettings:
    @pytest.mark.unit
    def test_defaults(self):
        settings = Settings()
        assert settings.output_dir == Path(".")
        assert settings.nest_command == "nest"
        assert settings.package_manager == "npm"
        assert settings.command_timeout == 600
        assert settings.install_timeout == 900

    @pytest.mark.unit
    def test_timeout_minimum(self):
        with pytest.raises(ValidationError):
            Settings(command_timeout=1)

    @pytest.mark.unit
    def test_nest_argv_splits_multi_word_commands(self):
        assert Settings().nest_argv == ["nest"]
        assert Settings(nest_command="npx @nestjs/cli").nest_argv == ["npx", "@nestjs/cli"]

    @pytest.mark.unit
    def test_project_root_is_absolute(self, tmp_path: Path):
        settings = Settings(output_dir=tmp_path)
        root = settings.project_root("shop")
        assert root.is_absolute()
        assert root == tmp_path.resolve() / "shop"

    @pytest.mark.unit
    def test_from_env(self, monkeypatch, tmp_path: Path):
        monkeypatch.setenv("NESTGEN_OUTPUT_DIR", str(tmp_path))
        monkeypatch.setenv("NESTGEN_NEST_COMMAND", "npx @nestjs/cli")
        monkeypatch.setenv("NESTGEN_PACKAGE_MANAGER", "pnpm")
        monkeypatch.setenv("NESTGEN_COMMAND_TIMEOUT", "120")
        monkeypatch.setenv("NESTGEN_INSTALL_TIMEOUT", "300")

        settings = Settings.from_env()
        assert settings.output_dir == tmp_path
        assert settings.nest_command == "npx @nestjs/cli"
        assert settings.package_manager == "pnpm"
        assert settings.command_timeout == 120
        assert settings.install_timeout == 300

    @pytest.mark.unit
    def test_from_env_without_variables(self, monkeypatch):
        for name in (
            "NESTGEN_OUTPUT_DIR",
            "NESTGEN_NEST_COMMAND",
            "NESTGEN_PACKAGE_MANAGER",
            "NESTGEN_COMMAND_TIMEOUT",
            "NESTGEN_INSTALL_TIMEOUT",
        ):
            monkeypatch.delenv(name, raising=False)
        assert Settings.from_env() == Settings()


# ---------------------------------------------------------------------------
# ProjectLayout
# ---------------------------------------------------------------------------


class TestProjectLayout:
    @pytest.mark.unit
    def test_fixed_paths(self):
        assert ProjectLayout.APP_MODULE.as_posix() == "src/app.module.ts"
        assert ProjectLayout.DATABASE_CONFIG.as_posix() == "src/config/database.config.ts"
        assert ProjectLayout.MODULES_DIR.as_posix() == "src/modules"

    @pytest.mark.unit
    def test_interceptor_paths(self):
        assert (
            ProjectLayout.interceptor("response").as_posix()
            == "src/common/interceptors/response/response.interceptor.ts"
        )
        assert (
            ProjectLayout.interceptor("error").as_posix()
            == "src/common/interceptors/error/error.interceptor.ts"
        )

    @pytest.mark.unit
    def test_unknown_interceptor(self):
        with pytest.raises(ValueError):
            ProjectLayout.interceptor("logging")
