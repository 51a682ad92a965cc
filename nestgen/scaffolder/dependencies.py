"""npm packages required by a database/ORM selection."""

from __future__ import annotations

from nestgen.config import Database, Orm

ORM_PACKAGES: dict[Orm, tuple[str, ...]] = {
    Orm.TYPEORM: ("typeorm", "@nestjs/typeorm"),
    Orm.MONGOOSE: ("mongoose", "@nestjs/mongoose"),
    Orm.SEQUELIZE: ("sequelize", "@nestjs/sequelize", "sequelize-typescript"),
}

DRIVER_PACKAGES: dict[Database, str] = {
    Database.POSTGRES: "pg",
    Database.MONGODB: "mongodb",
    Database.MYSQL: "mysql2",
}


def resolve_dependencies(database: Database | str, orm: Orm | str) -> tuple[str, ...]:
    """Return the packages to install, ORM packages first, then the driver.

    Mongoose ships its own MongoDB driver, so ``mongodb`` is left out for the
    MongoDB + Mongoose pair only.  Duplicates keep their first position.
    """
    database = Database(database)
    orm = Orm(orm)

    packages = list(ORM_PACKAGES[orm])
    if not (database is Database.MONGODB and orm is Orm.MONGOOSE):
        packages.append(DRIVER_PACKAGES[database])

    return tuple(dict.fromkeys(packages))
