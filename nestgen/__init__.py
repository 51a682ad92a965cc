"""nestgen -- NestJS application generator.

Creates a NestJS project with the ``nest`` CLI, generates resource modules,
wires a database ORM into ``AppModule`` and optionally installs global
response/error interceptors.

Quick usage::

    from nestgen import GenerationConfig, Pipeline, Settings

    config = GenerationConfig(
        app_name="shop",
        modules=["users", "orders"],
        database="Postgres",
        orm="TypeORM",
        interceptors=True,
    )
    result = await Pipeline(Settings()).run(config)
"""

from nestgen.config import Database, GenerationConfig, Orm, ProjectLayout, Settings
from nestgen.pipeline import Failure, Pipeline, PipelineResult, Stage, Success

__version__ = "1.0.0"

__all__ = [
    "Database",
    "Failure",
    "GenerationConfig",
    "Orm",
    "Pipeline",
    "PipelineResult",
    "ProjectLayout",
    "Settings",
    "Stage",
    "Success",
    "__version__",
]
