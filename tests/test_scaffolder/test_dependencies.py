"""Tests for the dependency resolver (nestgen.scaffolder.dependencies)."""

from __future__ import annotations

import itertools

import pytest

from nestgen.config import Database, Orm
from nestgen.scaffolder.dependencies import resolve_dependencies

pytestmark = pytest.mark.unit


class TestResolveDependencies:
    def test_typeorm_postgres(self):
        assert resolve_dependencies(Database.POSTGRES, Orm.TYPEORM) == (
            "typeorm",
            "@nestjs/typeorm",
            "pg",
        )

    def test_sequelize_mysql(self):
        assert resolve_dependencies(Database.MYSQL, Orm.SEQUELIZE) == (
            "sequelize",
            "@nestjs/sequelize",
            "sequelize-typescript",
            "mysql2",
        )

    def test_mongoose_mongodb_excludes_generic_driver(self):
        packages = resolve_dependencies(Database.MONGODB, Orm.MONGOOSE)
        assert packages == ("mongoose", "@nestjs/mongoose")
        assert "mongodb" not in packages

    def test_typeorm_mongodb_includes_generic_driver(self):
        assert "mongodb" in resolve_dependencies(Database.MONGODB, Orm.TYPEORM)

    def test_mongoose_with_sql_database_still_gets_driver(self):
        assert resolve_dependencies(Database.POSTGRES, Orm.MONGOOSE)[-1] == "pg"

    def test_postgres_spelling_resolves_driver(self):
        assert "pg" in resolve_dependencies("Postgres", "TypeORM")

    @pytest.mark.parametrize("database,orm", list(itertools.product(Database, Orm)))
    def test_no_duplicates_and_orm_first(self, database, orm):
        packages = resolve_dependencies(database, orm)
        assert len(packages) == len(set(packages))
        assert packages[0] in {"typeorm", "mongoose", "sequelize"}

    def test_unknown_database(self):
        with pytest.raises(ValueError):
            resolve_dependencies("PostgreSQL", "TypeORM")
