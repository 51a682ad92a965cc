"""Command-line entry point.

Usage::

    nestgen create shop
    nestgen create shop --modules users,orders --database Postgres --orm TypeORM
    nestgen create shop --config shop.json --output ./apps
    python -m nestgen create shop --no-interceptors

Any choice not given on the command line (or in ``--config``) is asked for
interactively.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any

from pydantic import ValidationError
from rich.console import Console
from rich.prompt import Confirm, Prompt

from nestgen import __version__
from nestgen.config import Database, GenerationConfig, Orm, Settings
from nestgen.pipeline import Failure, Pipeline
from nestgen.utils import console, print_error


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nestgen",
        description="NestJS application generator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  nestgen create shop\n"
            "  nestgen create shop --modules users,orders --database MySQL --orm Sequelize\n"
            "  nestgen create shop --config shop.json --no-interceptors\n"
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    create = subparsers.add_parser("create", help="Create a new NestJS application")
    create.add_argument("app_name", metavar="app-name", help="Name of the application")
    create.add_argument(
        "--modules",
        default=None,
        help="Comma-separated module names to generate (asked if omitted)",
    )
    create.add_argument(
        "--database",
        choices=[db.value for db in Database],
        default=None,
        help="Database engine (asked if omitted)",
    )
    create.add_argument(
        "--orm",
        choices=[orm.value for orm in Orm],
        default=None,
        help="ORM (asked if omitted)",
    )
    create.add_argument(
        "--interceptors",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Create response and error interceptors (asked if omitted)",
    )
    create.add_argument(
        "--config",
        type=Path,
        default=None,
        help="JSON file with modules/database/orm/interceptors answers",
    )
    create.add_argument(
        "--output", "-o",
        type=Path,
        default=None,
        help="Directory the application is created in (default: current directory)",
    )
    return parser


_ANSWER_KEYS = ("modules", "database", "orm", "interceptors")


def load_answers(path: Path) -> dict[str, Any]:
    """Read prompt answers from a JSON object file; unknown keys are ignored."""
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a JSON object")
    return {key: data[key] for key in _ANSWER_KEYS if key in data}


def collect_answers(args: argparse.Namespace, out: Console | None = None) -> dict[str, Any]:
    """Merge ``--config`` file values and CLI flags, prompting for anything missing."""
    out = out or console
    answers: dict[str, Any] = {}
    if args.config is not None:
        answers.update(load_answers(args.config))

    for key in _ANSWER_KEYS:
        value = getattr(args, key)
        if value is not None:
            answers[key] = value

    if "modules" not in answers:
        answers["modules"] = Prompt.ask(
            "Enter module names (comma-separated)", default="", console=out
        )
    if "database" not in answers:
        answers["database"] = Prompt.ask(
            "Select database",
            choices=[db.value for db in Database],
            default=Database.POSTGRES.value,
            console=out,
        )
    if "orm" not in answers:
        answers["orm"] = Prompt.ask(
            "Select ORM",
            choices=[orm.value for orm in Orm],
            default=Orm.TYPEORM.value,
            console=out,
        )
    if "interceptors" not in answers:
        answers["interceptors"] = Confirm.ask(
            "Create response and error interceptors?", default=True, console=out
        )
    return answers


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``nestgen`` and ``python -m nestgen``."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        answers = collect_answers(args)
        config = GenerationConfig(app_name=args.app_name, **answers)
        settings = Settings.from_env()
    except (ValidationError, ValueError, OSError) as exc:
        print_error(f"Invalid input: {exc}")
        sys.exit(1)
    except KeyboardInterrupt:
        print_error("Aborted.")
        sys.exit(130)

    if args.output is not None:
        settings = settings.model_copy(update={"output_dir": args.output})

    try:
        result = asyncio.run(Pipeline(settings).run(config))
    except KeyboardInterrupt:
        print_error("Aborted.")
        sys.exit(130)

    # Pipeline.run has already reported the failure in its summary panel.
    if isinstance(result, Failure):
        sys.exit(1)


if __name__ == "__main__":
    main()
